"""Apple Music integration modules."""

from apple_music.client import AppleMusicApiError, AppleMusicCatalogClient

__all__ = ["AppleMusicApiError", "AppleMusicCatalogClient"]

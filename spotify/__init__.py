"""Spotify integration modules."""

from spotify.client import SpotifyApiError, SpotifyCatalogClient

__all__ = ["SpotifyApiError", "SpotifyCatalogClient"]

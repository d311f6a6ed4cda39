from resolution.providers.acrcloud import AcrCloudMetadataProvider
from resolution.providers.apple_music import AppleMusicSearchProvider
from resolution.providers.spotify import SpotifySearchProvider

__all__ = ["AcrCloudMetadataProvider", "AppleMusicSearchProvider", "SpotifySearchProvider"]

import logging

from resolution.providers.base import CatalogClient
from resolution.types import SOURCE_SPOTIFY, PartialResolution
from spotify.client import SpotifyApiError


class SpotifySearchProvider:
    """Fallback source: Spotify catalog lookup by track ID, then ISRC, then text."""

    name = SOURCE_SPOTIFY

    def __init__(self, *, client: CatalogClient):
        self.client = client

    def lookup(self, resolve_input):
        if not self.client.configured:
            logging.info("Spotify not configured, skipping")
            return None
        try:
            track = _fetch_track(self.client, resolve_input)
        except (SpotifyApiError, ValueError):
            logging.exception("Spotify lookup failed")
            return None
        if not track:
            return None
        try:
            return _to_partial(track)
        except (AttributeError, TypeError, ValueError):
            logging.exception("Spotify track could not be parsed")
            return None


def _fetch_track(client, resolve_input):
    if resolve_input.spotify_track_id:
        return client.get_by_id(resolve_input.spotify_track_id)
    if resolve_input.isrc:
        return client.search_by_isrc(resolve_input.isrc)
    query = resolve_input.text_query()
    if query:
        return client.search_by_text(query)
    return None


def _to_partial(track):
    artists = track.get("artists") or []
    first_artist = artists[0].get("name") if artists and isinstance(artists[0], dict) else None
    logging.info("Spotify found title=%r artist=%r", track.get("name"), first_artist)
    album = track.get("album") or {}
    external_ids = track.get("external_ids") or {}
    track_id = track.get("id")
    spotify_url = (track.get("external_urls") or {}).get("spotify")
    if not spotify_url and track_id:
        spotify_url = f"https://open.spotify.com/track/{track_id}"
    duration_ms = track.get("duration_ms")
    return PartialResolution(
        resolver_sources=[SOURCE_SPOTIFY],
        isrc=external_ids.get("isrc"),
        title=track.get("name"),
        artist=first_artist,
        album=album.get("name"),
        duration_ms=int(duration_ms) if duration_ms else None,
        spotify_track_id=track_id,
        spotify_url=spotify_url,
    )

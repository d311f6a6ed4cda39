import logging

from apple_music.client import AppleMusicApiError
from resolution.identifiers import extract_apple_music_id
from resolution.providers.base import CatalogClient
from resolution.types import SOURCE_APPLE_MUSIC, PartialResolution


class AppleMusicSearchProvider:
    """Fallback source: Apple Music catalog. Without a developer token it never calls out."""

    name = SOURCE_APPLE_MUSIC

    def __init__(self, *, client: CatalogClient):
        self.client = client

    def lookup(self, resolve_input):
        if not self.client.configured:
            logging.info("Apple Music not configured, skipping")
            return None
        try:
            song = _fetch_song(self.client, resolve_input)
        except (AppleMusicApiError, ValueError):
            logging.exception("Apple Music lookup failed")
            return None
        if not song:
            return None
        try:
            return _to_partial(song)
        except (AttributeError, TypeError, ValueError):
            logging.exception("Apple Music song could not be parsed")
            return None


def _fetch_song(client, resolve_input):
    if resolve_input.apple_music_id:
        return client.get_by_id(resolve_input.apple_music_id)
    if resolve_input.isrc:
        return client.search_by_isrc(resolve_input.isrc)
    query = resolve_input.text_query()
    if query:
        return client.search_by_text(query)
    return None


def _to_partial(song):
    attributes = song.get("attributes") or {}
    song_id = song.get("id")
    song_url = attributes.get("url")
    logging.info("Apple Music found title=%r artist=%r", attributes.get("name"), attributes.get("artistName"))
    duration_ms = attributes.get("durationInMillis")
    return PartialResolution(
        resolver_sources=[SOURCE_APPLE_MUSIC],
        isrc=attributes.get("isrc"),
        title=attributes.get("name"),
        artist=attributes.get("artistName"),
        album=attributes.get("albumName"),
        duration_ms=int(duration_ms) if duration_ms else None,
        apple_music_id=str(song_id) if song_id else extract_apple_music_id(song_url),
        apple_music_url=song_url,
    )

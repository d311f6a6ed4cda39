import logging

from acrcloud_metadata.client import AcrCloudError, AcrCloudMetadataClient
from resolution.links import normalize_platform_links
from resolution.types import SOURCE_ACRCLOUD, PartialResolution


class AcrCloudMetadataProvider:
    """Primary source: ACRCloud external metadata, normalized into platform links."""

    name = SOURCE_ACRCLOUD

    def __init__(self, *, client: AcrCloudMetadataClient):
        self.client = client

    def query(self, resolve_input):
        params = _query_params(resolve_input)
        if not params:
            logging.info("ACRCloud skipped: no usable identifier")
            return None
        if not self.client.configured:
            logging.info("ACRCloud not configured, skipping")
            return None
        try:
            candidates = self.client.search_tracks(**params)
        except (AcrCloudError, ValueError):
            logging.exception("ACRCloud lookup failed params=%s", sorted(params))
            return None
        if not candidates:
            logging.info("ACRCloud returned no match params=%s", sorted(params))
            return None
        try:
            return _to_partial(candidates[0])
        except (AttributeError, TypeError, ValueError):
            logging.exception("ACRCloud candidate could not be parsed")
            return None


def _query_params(resolve_input):
    if resolve_input.isrc:
        return {"isrc": resolve_input.isrc}
    if resolve_input.acrid:
        return {"acr_id": resolve_input.acrid}
    if resolve_input.spotify_url:
        return {"source_url": resolve_input.spotify_url}
    query = resolve_input.text_query()
    if query:
        return {"query": query}
    return None


def _to_partial(track):
    normalized = normalize_platform_links(external_metadata=track.get("external_metadata"))
    links = normalized["normalized_links"]
    raw_ids = normalized["raw_ids"]
    logging.info(
        "ACRCloud matched title=%r platforms=%s notes=%d",
        track.get("name"),
        ",".join(sorted(links)) or "-",
        len(normalized["notes"]),
    )
    artists = track.get("artists") or []
    first_artist = artists[0].get("name") if artists and isinstance(artists[0], dict) else None
    album = track.get("album") if isinstance(track.get("album"), dict) else {}
    external_ids = track.get("external_ids") if isinstance(track.get("external_ids"), dict) else {}
    duration_ms = track.get("duration_ms")
    return PartialResolution(
        resolver_sources=[SOURCE_ACRCLOUD],
        isrc=raw_ids.get("isrc") or external_ids.get("isrc") or track.get("isrc"),
        title=track.get("name"),
        artist=first_artist,
        album=album.get("name"),
        duration_ms=int(duration_ms) if duration_ms else None,
        spotify_track_id=raw_ids.get("spotify_track_id"),
        spotify_url=links.get("spotify"),
        apple_music_id=raw_ids.get("apple_music_id"),
        apple_music_url=links.get("apple_music"),
        youtube_url=links.get("youtube"),
        deezer_url=links.get("deezer"),
        acrid=track.get("acrid") or track.get("acr_id"),
        acrcloud_raw=track,
    )

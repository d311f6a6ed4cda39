from __future__ import annotations

import pytest

from db.track_resolutions import TrackResolutionStore
from resolution.cache import CacheGate
from resolution.types import ResolveInput, TrackResolution


def _resolution(**overrides) -> TrackResolution:
    values = {
        "isrc": "USABC1234567",
        "title": "Song A",
        "artist": "Artist A",
        "spotify_track_id": "sp1",
        "spotify_url": "https://open.spotify.com/track/sp1",
        "acrid": "acr1",
        "acrcloud_raw": {"name": "Song A", "external_metadata": {"spotify": {"id": "sp1"}}},
        "resolver_sources": ["acrcloud", "spotify"],
        "confidence": 0.9,
        "status": "resolved",
        "resolver_path": "acrcloud_then_search",
        "fallback_reason": "missing_platform_ids",
    }
    values.update(overrides)
    return TrackResolution(**values)


def test_upsert_then_get_by_each_identifier(tmp_path) -> None:
    store = TrackResolutionStore(tmp_path / "resolutions.sqlite3")
    resolution = _resolution()

    row_id = store.upsert(resolution)

    assert isinstance(row_id, int)
    for kind, value in (("isrc", "USABC1234567"), ("spotify_track_id", "sp1"), ("acrid", "acr1")):
        loaded = store.get(kind, value)
        assert loaded == resolution


def test_upsert_updates_existing_row_matched_by_acrid(tmp_path) -> None:
    store = TrackResolutionStore(tmp_path / "resolutions.sqlite3")
    first_id = store.upsert(_resolution(confidence=0.55, status="partial"))

    second_id = store.upsert(_resolution(confidence=0.9, status="resolved", title="Song A (Edit)"))

    assert second_id == first_id
    loaded = store.get("acrid", "acr1")
    assert loaded.confidence == 0.9
    assert loaded.title == "Song A (Edit)"


def test_upsert_without_acrid_or_isrc_is_skipped(tmp_path) -> None:
    store = TrackResolutionStore(tmp_path / "resolutions.sqlite3")
    assert store.upsert(_resolution(isrc=None, acrid=None)) is None
    assert store.get("spotify_track_id", "sp1") is None


def test_get_rejects_unknown_identifier_kind(tmp_path) -> None:
    store = TrackResolutionStore(tmp_path / "resolutions.sqlite3")
    with pytest.raises(ValueError):
        store.get("title", "Song A")


def test_store_backs_cache_gate(tmp_path) -> None:
    store = TrackResolutionStore(tmp_path / "resolutions.sqlite3")
    store.upsert(_resolution())

    hit = CacheGate(store).lookup(ResolveInput(spotify_track_id="sp1"))

    assert hit is not None
    assert hit.resolver_path == "cache"
    assert hit.isrc == "USABC1234567"

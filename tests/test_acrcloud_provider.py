from __future__ import annotations

from typing import Any

import requests

from acrcloud_metadata.client import AcrCloudMetadataClient
from resolution.providers.acrcloud import AcrCloudMetadataProvider
from resolution.types import ResolveInput


class _FakeResponse:
    def __init__(self, status_code: int, payload: Any = None) -> None:
        self.status_code = status_code
        self._payload = payload
        self.content = b"{}" if payload is not None else b""

    def json(self) -> Any:
        if isinstance(self._payload, Exception):
            raise self._payload
        return self._payload


_TRACK = {
    "name": "Song A",
    "acrid": "acr-123",
    "duration_ms": 201000,
    "artists": [{"name": "Artist A"}, {"name": "Guest"}],
    "album": {"name": "Album A"},
    "external_ids": {"isrc": "USABC1234567"},
    "external_metadata": {
        "spotify": [{"id": "sp123"}],
        "applemusic": [{"url": "https://music.apple.com/us/album/a/1?i=2", "id": "2"}],
        "deezer": [{"track": {"id": "77"}}],
    },
}


def _provider(monkeypatch, responder, token: str | None = "token"):
    client = AcrCloudMetadataClient(bearer_token=token, base_url="https://acr.example")
    calls: list[dict[str, Any]] = []

    def fake_get(url, params=None, headers=None, timeout=None):
        calls.append({"url": url, "params": dict(params or {}), "headers": dict(headers or {})})
        return responder()

    monkeypatch.setattr(client._session, "get", fake_get)
    return AcrCloudMetadataProvider(client=client), calls


def test_isrc_match_is_normalized_into_partial_resolution(monkeypatch) -> None:
    provider, calls = _provider(monkeypatch, lambda: _FakeResponse(200, {"data": [_TRACK]}))

    partial = provider.query(ResolveInput(isrc="USABC1234567", acrid="ignored", query="ignored"))

    assert len(calls) == 1
    assert calls[0]["url"] == "https://acr.example/api/external-metadata/tracks"
    assert calls[0]["params"]["isrc"] == "USABC1234567"
    assert "acr_id" not in calls[0]["params"]
    assert calls[0]["headers"]["Authorization"] == "Bearer token"

    assert partial is not None
    assert partial.resolver_sources == ["acrcloud"]
    assert partial.isrc == "USABC1234567"
    assert partial.title == "Song A"
    assert partial.artist == "Artist A"
    assert partial.album == "Album A"
    assert partial.duration_ms == 201000
    assert partial.spotify_track_id == "sp123"
    assert partial.spotify_url == "https://open.spotify.com/track/sp123"
    assert partial.apple_music_id == "2"
    assert partial.apple_music_url == "https://music.apple.com/us/album/a/1?i=2"
    assert partial.deezer_url == "https://www.deezer.com/track/77"
    assert partial.acrid == "acr-123"
    assert partial.acrcloud_raw is _TRACK


def test_query_priority_after_isrc(monkeypatch) -> None:
    provider, calls = _provider(monkeypatch, lambda: _FakeResponse(200, {"data": []}))

    provider.query(ResolveInput(acrid="acr-1", spotify_url="https://open.spotify.com/track/x"))
    provider.query(ResolveInput(spotify_url="https://open.spotify.com/track/x", query="q"))
    provider.query(ResolveInput(title="Song", artist="Artist"))

    assert calls[0]["params"]["acr_id"] == "acr-1"
    assert calls[1]["params"]["source_url"] == "https://open.spotify.com/track/x"
    assert calls[2]["params"]["query"] == "Artist Song"


def test_no_identifier_means_no_call(monkeypatch) -> None:
    provider, calls = _provider(monkeypatch, lambda: _FakeResponse(200, {"data": [_TRACK]}))
    assert provider.query(ResolveInput(title="Song only")) is None
    assert calls == []


def test_missing_token_degrades_without_call(monkeypatch) -> None:
    provider, calls = _provider(monkeypatch, lambda: _FakeResponse(200, {"data": [_TRACK]}), token=None)
    assert provider.query(ResolveInput(isrc="X")) is None
    assert calls == []


def test_empty_result_is_no_match(monkeypatch) -> None:
    provider, _calls = _provider(monkeypatch, lambda: _FakeResponse(200, {"data": []}))
    assert provider.query(ResolveInput(isrc="X")) is None


def test_http_error_is_no_match(monkeypatch) -> None:
    provider, _calls = _provider(monkeypatch, lambda: _FakeResponse(500, {"error": "boom"}))
    assert provider.query(ResolveInput(isrc="X")) is None


def test_transport_error_is_no_match(monkeypatch) -> None:
    def raise_timeout():
        raise requests.Timeout("timed out")

    provider, _calls = _provider(monkeypatch, raise_timeout)
    assert provider.query(ResolveInput(isrc="X")) is None


def test_unparseable_body_is_no_match(monkeypatch) -> None:
    provider, _calls = _provider(monkeypatch, lambda: _FakeResponse(200, ValueError("bad json")))
    assert provider.query(ResolveInput(isrc="X")) is None

from __future__ import annotations

from typing import Any

import pytest

from apple_music.client import AppleMusicApiError, AppleMusicCatalogClient
from resolution.providers.apple_music import AppleMusicSearchProvider
from resolution.resolver import TrackResolver
from resolution.types import ResolveInput


class _FakeResponse:
    def __init__(self, status_code: int, payload: Any = None) -> None:
        self.status_code = status_code
        self._payload = payload

    def json(self) -> Any:
        return self._payload


_SONG = {
    "id": "1440857795",
    "type": "songs",
    "attributes": {
        "name": "Song A",
        "artistName": "Artist A",
        "albumName": "Album A",
        "durationInMillis": 201000,
        "isrc": "USABC1234567",
        "url": "https://music.apple.com/us/album/song-a/1440857781?i=1440857795",
    },
}


def test_unconfigured_provider_never_calls_out(monkeypatch) -> None:
    client = AppleMusicCatalogClient(developer_token=None)

    def fail_get(*args, **kwargs):
        raise AssertionError("no request expected")

    monkeypatch.setattr(client._session, "get", fail_get)

    assert AppleMusicSearchProvider(client=client).lookup(ResolveInput(isrc="X")) is None


def test_isrc_lookup_uses_catalog_filter(monkeypatch) -> None:
    client = AppleMusicCatalogClient(developer_token="dev-token", storefront="GB")
    calls: list[dict[str, Any]] = []

    def fake_get(url, params=None, headers=None, timeout=None):
        calls.append({"url": url, "params": params, "headers": headers})
        return _FakeResponse(200, {"data": [_SONG]})

    monkeypatch.setattr(client._session, "get", fake_get)

    partial = AppleMusicSearchProvider(client=client).lookup(ResolveInput(isrc="USABC1234567"))

    assert calls[0]["url"] == "https://api.music.apple.com/v1/catalog/gb/songs"
    assert calls[0]["params"] == {"filter[isrc]": "USABC1234567"}
    assert calls[0]["headers"]["Authorization"] == "Bearer dev-token"
    assert partial.resolver_sources == ["apple_music"]
    assert partial.apple_music_id == "1440857795"
    assert partial.apple_music_url == _SONG["attributes"]["url"]
    assert partial.title == "Song A"
    assert partial.artist == "Artist A"
    assert partial.duration_ms == 201000


def test_text_search_reads_nested_results(monkeypatch) -> None:
    client = AppleMusicCatalogClient(developer_token="dev-token")
    monkeypatch.setattr(
        client._session,
        "get",
        lambda *a, **k: _FakeResponse(200, {"results": {"songs": {"data": [_SONG]}}}),
    )

    partial = AppleMusicSearchProvider(client=client).lookup(ResolveInput(query="artist a song a"))

    assert partial.isrc == "USABC1234567"


def test_not_found_and_errors_are_no_match(monkeypatch) -> None:
    client = AppleMusicCatalogClient(developer_token="dev-token")
    provider = AppleMusicSearchProvider(client=client)

    monkeypatch.setattr(client._session, "get", lambda *a, **k: _FakeResponse(404, None))
    assert provider.lookup(ResolveInput(apple_music_id="1")) is None

    monkeypatch.setattr(client._session, "get", lambda *a, **k: _FakeResponse(401, {"errors": []}))
    assert provider.lookup(ResolveInput(apple_music_id="1")) is None


@pytest.mark.parametrize(
    ("method", "argument", "body"),
    [
        ("search_by_text", "artist a song a", {"results": {"songs": ["x"]}}),
        ("search_by_text", "artist a song a", {"results": "none"}),
        ("search_by_text", "artist a song a", {"results": {"songs": {"data": {"id": "1"}}}}),
        ("search_by_isrc", "USABC1234567", {"data": "x"}),
        ("get_by_id", "1", {"data": ["not-an-object"]}),
    ],
)
def test_malformed_bodies_raise_api_error(monkeypatch, method, argument, body) -> None:
    client = AppleMusicCatalogClient(developer_token="dev-token")
    monkeypatch.setattr(client._session, "get", lambda *a, **k: _FakeResponse(200, body))

    with pytest.raises(AppleMusicApiError):
        getattr(client, method)(argument)


def test_malformed_search_body_still_completes_resolve(monkeypatch) -> None:
    class _NoPrimary:
        name = "acrcloud"

        def query(self, resolve_input):
            return None

    client = AppleMusicCatalogClient(developer_token="dev-token")
    monkeypatch.setattr(client._session, "get", lambda *a, **k: _FakeResponse(200, {"results": {"songs": ["x"]}}))
    resolver = TrackResolver(primary=_NoPrimary(), secondaries=[AppleMusicSearchProvider(client=client)])

    result = resolver.resolve(ResolveInput(query="artist a song a"))

    assert result.resolver_sources == []
    assert result.fallback_reason == "no_match"
    assert result.status == "needs_review"

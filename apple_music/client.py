"""Apple Music catalog client using a pre-issued developer token."""

from __future__ import annotations

import logging
import urllib.parse
from typing import Any

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from config.settings import APPLE_MUSIC_DEFAULT_STOREFRONT

logger = logging.getLogger(__name__)


class AppleMusicApiError(RuntimeError):
    """Raised when an Apple Music catalog request cannot be completed."""


class AppleMusicCatalogClient:
    _BASE_URL = "https://api.music.apple.com/v1/catalog/{storefront}"

    def __init__(
        self,
        *,
        developer_token: str | None,
        storefront: str = APPLE_MUSIC_DEFAULT_STOREFRONT,
        timeout_sec: int = 15,
    ) -> None:
        self.developer_token = (developer_token or "").strip() or None
        self.storefront = (storefront or APPLE_MUSIC_DEFAULT_STOREFRONT).strip().lower()
        self.timeout_sec = timeout_sec
        self._session = requests.Session()
        retry = Retry(
            total=2,
            backoff_factor=0.5,
            status_forcelist=(429, 500, 502, 503, 504),
            allowed_methods=frozenset({"GET"}),
            respect_retry_after_header=True,
        )
        adapter = HTTPAdapter(max_retries=retry)
        self._session.mount("https://", adapter)

    @property
    def configured(self) -> bool:
        return bool(self.developer_token)

    def _request_json(self, path: str, params: dict[str, Any] | None = None) -> dict[str, Any] | None:
        if not self.configured:
            raise AppleMusicApiError("Apple Music developer token is not configured")
        url = self._BASE_URL.format(storefront=urllib.parse.quote(self.storefront, safe="")) + path
        try:
            response = self._session.get(
                url,
                params=params,
                headers={"Authorization": f"Bearer {self.developer_token}"},
                timeout=self.timeout_sec,
            )
        except requests.RequestException as exc:
            raise AppleMusicApiError(f"Apple Music request failed: {exc}") from exc
        if response.status_code == 404:
            return None
        if response.status_code != 200:
            raise AppleMusicApiError(f"Apple Music request failed ({response.status_code})")
        try:
            payload = response.json()
        except ValueError as exc:
            raise AppleMusicApiError("Apple Music response was not valid JSON") from exc
        if not isinstance(payload, dict):
            raise AppleMusicApiError("Apple Music response was not a JSON object")
        return payload

    def get_by_id(self, song_id: str) -> dict[str, Any] | None:
        song_id = (song_id or "").strip()
        if not song_id:
            raise ValueError("song_id is required")
        payload = self._request_json(f"/songs/{urllib.parse.quote(song_id, safe='')}")
        return _first_song(payload)

    def search_by_isrc(self, isrc: str) -> dict[str, Any] | None:
        isrc = (isrc or "").strip()
        if not isrc:
            raise ValueError("isrc is required")
        payload = self._request_json("/songs", params={"filter[isrc]": isrc})
        return _first_song(payload)

    def search_by_text(self, query: str) -> dict[str, Any] | None:
        query = (query or "").strip()
        if not query:
            raise ValueError("query is required")
        payload = self._request_json("/search", params={"term": query, "types": "songs", "limit": 1})
        if payload is None:
            return None
        results = payload.get("results") or {}
        if not isinstance(results, dict):
            raise AppleMusicApiError("Apple Music search response results was not an object")
        songs = results.get("songs") or {}
        if not isinstance(songs, dict):
            raise AppleMusicApiError("Apple Music search response results.songs was not an object")
        return _first_song(songs)


def _first_song(container: dict[str, Any] | None) -> dict[str, Any] | None:
    """Return the first resource in ``container["data"]``; malformed shapes raise."""
    if container is None:
        return None
    data = container.get("data") or []
    if not isinstance(data, list):
        raise AppleMusicApiError("Apple Music response data was not a list")
    if not data:
        return None
    first = data[0]
    if not isinstance(first, dict):
        raise AppleMusicApiError("Apple Music response returned a non-object resource")
    return first

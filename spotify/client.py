"""Spotify Web API client for single-track catalog lookups."""

from __future__ import annotations

import base64
import logging
import os
import time
import urllib.parse
from typing import Any

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

logger = logging.getLogger(__name__)


class SpotifyApiError(RuntimeError):
    """Raised when a Spotify catalog request cannot be completed."""


class SpotifyCatalogClient:
    """Client for track lookups by ID, ISRC, or free text using client credentials."""

    _TOKEN_URL = "https://accounts.spotify.com/api/token"
    _TRACK_URL = "https://api.spotify.com/v1/tracks/{track_id}"
    _SEARCH_URL = "https://api.spotify.com/v1/search"

    def __init__(
        self,
        *,
        client_id: str | None = None,
        client_secret: str | None = None,
        access_token: str | None = None,
        timeout_sec: int = 20,
    ) -> None:
        self.client_id = client_id or os.environ.get("SPOTIFY_CLIENT_ID")
        self.client_secret = client_secret or os.environ.get("SPOTIFY_CLIENT_SECRET")
        self.timeout_sec = timeout_sec
        self._provided_access_token = (access_token or "").strip() or None
        self._access_token: str | None = None
        self._access_token_expire_at: float = 0.0
        self._session = requests.Session()
        retry = Retry(
            total=3,
            backoff_factor=0.5,
            status_forcelist=(429, 500, 502, 503, 504),
            allowed_methods=frozenset({"GET"}),
            respect_retry_after_header=True,
        )
        self._session.mount("https://", HTTPAdapter(max_retries=retry))

    @property
    def configured(self) -> bool:
        return bool(self._provided_access_token or (self.client_id and self.client_secret))

    def _get_access_token(self) -> str:
        if self._provided_access_token:
            return self._provided_access_token

        if not self.client_id or not self.client_secret:
            raise SpotifyApiError("Spotify credentials are required")

        now = time.time()
        if self._access_token and now < self._access_token_expire_at:
            return self._access_token

        auth_payload = f"{self.client_id}:{self.client_secret}".encode("utf-8")
        auth_header = base64.b64encode(auth_payload).decode("ascii")
        try:
            response = self._session.post(
                self._TOKEN_URL,
                data={"grant_type": "client_credentials"},
                headers={"Authorization": f"Basic {auth_header}"},
                timeout=self.timeout_sec,
            )
        except requests.RequestException as exc:
            raise SpotifyApiError(f"Spotify token request failed: {exc}") from exc
        if response.status_code != 200:
            raise SpotifyApiError(f"Spotify token request failed ({response.status_code})")

        try:
            payload = response.json()
        except ValueError as exc:
            raise SpotifyApiError("Spotify token response was not valid JSON") from exc
        token = payload.get("access_token") if isinstance(payload, dict) else None
        if not token or not isinstance(token, str):
            raise SpotifyApiError("Spotify token response missing access_token")

        try:
            expires_in = int(payload.get("expires_in") or 0)
        except (TypeError, ValueError):
            expires_in = 0
        self._access_token = token
        self._access_token_expire_at = now + max(0, expires_in - 30)
        return token

    def _request_json(self, url: str, params: dict[str, Any] | None = None) -> dict[str, Any] | None:
        """GET ``url``; ``None`` for 404, one token refresh on 401, error on anything else non-200."""
        token = self._get_access_token()
        try:
            response = self._session.get(
                url,
                params=params,
                headers={"Authorization": f"Bearer {token}"},
                timeout=self.timeout_sec,
            )
            if response.status_code == 401 and not self._provided_access_token:
                self._access_token = None
                token = self._get_access_token()
                response = self._session.get(
                    url,
                    params=params,
                    headers={"Authorization": f"Bearer {token}"},
                    timeout=self.timeout_sec,
                )
        except requests.RequestException as exc:
            raise SpotifyApiError(f"Spotify request failed: {exc}") from exc

        if response.status_code == 404:
            return None
        if response.status_code != 200:
            raise SpotifyApiError(f"Spotify request failed ({response.status_code})")
        try:
            payload = response.json()
        except ValueError as exc:
            raise SpotifyApiError("Spotify response was not valid JSON") from exc
        if not isinstance(payload, dict):
            raise SpotifyApiError("Spotify response was not a JSON object")
        return payload

    def get_by_id(self, track_id: str) -> dict[str, Any] | None:
        track_id = (track_id or "").strip()
        if not track_id:
            raise ValueError("track_id is required")
        encoded_id = urllib.parse.quote(track_id, safe="")
        return self._request_json(self._TRACK_URL.format(track_id=encoded_id))

    def search_by_isrc(self, isrc: str) -> dict[str, Any] | None:
        isrc = (isrc or "").strip()
        if not isrc:
            raise ValueError("isrc is required")
        return self._search_first(f"isrc:{isrc}")

    def search_by_text(self, query: str) -> dict[str, Any] | None:
        query = (query or "").strip()
        if not query:
            raise ValueError("query is required")
        return self._search_first(query)

    def _search_first(self, query: str) -> dict[str, Any] | None:
        payload = self._request_json(self._SEARCH_URL, params={"q": query, "type": "track", "limit": 1})
        if payload is None:
            return None
        tracks = payload.get("tracks")
        if not isinstance(tracks, dict):
            raise SpotifyApiError("Spotify search response missing tracks object")
        items = tracks.get("items") or []
        if not isinstance(items, list):
            raise SpotifyApiError("Spotify search response tracks.items was not a list")
        if not items:
            logger.info("Spotify search returned no tracks query=%r", query)
            return None
        first = items[0]
        if not isinstance(first, dict):
            raise SpotifyApiError("Spotify search returned a non-object track")
        return first

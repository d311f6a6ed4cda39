import logging
from typing import Any

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from config.settings import ACRCLOUD_DEFAULT_BASE_URL, ACRCLOUD_DEFAULT_PLATFORMS

logger = logging.getLogger(__name__)

_EXTERNAL_METADATA_TRACKS_ENDPOINT = "/api/external-metadata/tracks"


class AcrCloudError(RuntimeError):
    """Raised when the ACRCloud External Metadata API cannot answer a query."""


class AcrCloudMetadataClient:
    """Thin client for ACRCloud's External Metadata ``tracks`` endpoint."""

    def __init__(
        self,
        *,
        bearer_token: str | None,
        base_url: str = ACRCLOUD_DEFAULT_BASE_URL,
        timeout_seconds: float = 10.0,
        platforms: str = ACRCLOUD_DEFAULT_PLATFORMS,
    ) -> None:
        self.bearer_token = (bearer_token or "").strip() or None
        self.base_url = (base_url or ACRCLOUD_DEFAULT_BASE_URL).rstrip("/")
        self.timeout_seconds = timeout_seconds
        self.platforms = platforms
        self._session = requests.Session()
        retry = Retry(
            total=3,
            backoff_factor=0.4,
            status_forcelist=(429, 500, 502, 503, 504),
            allowed_methods=frozenset({"GET"}),
            respect_retry_after_header=True,
        )
        adapter = HTTPAdapter(max_retries=retry)
        self._session.mount("https://", adapter)
        self._session.mount("http://", adapter)

    @property
    def configured(self) -> bool:
        return bool(self.bearer_token)

    def search_tracks(
        self,
        *,
        isrc: str | None = None,
        acr_id: str | None = None,
        source_url: str | None = None,
        query: str | None = None,
    ) -> list[dict[str, Any]]:
        """Query by the first identifier given (isrc > acr_id > source_url > query).

        Returns the raw ``data`` list, best candidate first; an empty list
        means the service answered with no match.
        """
        if not self.configured:
            raise AcrCloudError("ACRCLOUD_BEARER_TOKEN is not configured")

        params: dict[str, Any] = {}
        if isrc:
            mode = "isrc"
            params["isrc"] = isrc
        elif acr_id:
            mode = "acr_id"
            params["acr_id"] = acr_id
        elif source_url:
            mode = "source_url"
            params["source_url"] = source_url
        elif query:
            mode = "query"
            params["query"] = query
            params["format"] = "json"
        else:
            raise ValueError("one of isrc, acr_id, source_url or query is required")
        params["platforms"] = self.platforms

        url = f"{self.base_url}{_EXTERNAL_METADATA_TRACKS_ENDPOINT}"
        try:
            resp = self._session.get(
                url,
                params=params,
                headers={
                    "Authorization": f"Bearer {self.bearer_token}",
                    "Accept": "application/json",
                },
                timeout=self.timeout_seconds,
            )
        except requests.RequestException as exc:
            logger.info("[ACRCLOUD] mode=%s status=error", mode)
            raise AcrCloudError(f"ACRCloud request failed: {exc}") from exc

        status = int(resp.status_code)
        logger.info("[ACRCLOUD] mode=%s status=%s", mode, status)
        if status == 404:
            return []
        if status != 200:
            raise AcrCloudError(f"ACRCloud request failed ({status})")
        try:
            payload = resp.json() if resp.content else {}
        except ValueError as exc:
            raise AcrCloudError("ACRCloud response was not valid JSON") from exc
        if not isinstance(payload, dict):
            raise AcrCloudError("ACRCloud response was not a JSON object")
        data = payload.get("data") or []
        if not isinstance(data, list):
            raise AcrCloudError("ACRCloud response 'data' was not a list")
        return [item for item in data if isinstance(item, dict)]

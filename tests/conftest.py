import sys
from pathlib import Path

import pytest


# Ensure tests can import project packages regardless of how pytest is invoked.
ROOT = Path(__file__).resolve().parents[1]
ROOT_STR = str(ROOT)
if ROOT_STR not in sys.path:
    sys.path.insert(0, ROOT_STR)

_CREDENTIAL_ENV = (
    "ACRCLOUD_BEARER_TOKEN",
    "ACRCLOUD_BASE_URL",
    "ACRCLOUD_TIMEOUT_SECONDS",
    "SPOTIFY_CLIENT_ID",
    "SPOTIFY_CLIENT_SECRET",
    "APPLE_MUSIC_DEVELOPER_TOKEN",
    "APPLE_MUSIC_STOREFRONT",
    "TRACK_RESOLVER_CACHE_PATH",
    "TRACK_RESOLVER_DB_PATH",
)


@pytest.fixture(autouse=True)
def _isolate_credentials(monkeypatch):
    # Real tokens in the developer's shell must never reach a live API from tests.
    for name in _CREDENTIAL_ENV:
        monkeypatch.delenv(name, raising=False)

"""Application settings constants."""

from __future__ import annotations

import os

# Primary-source confidence at or above which no fallback search runs.
ACRCLOUD_CONFIDENCE_MIN = 0.70

# Primary-source confidence below which fallback search always runs.
ACRCLOUD_CONFIDENCE_FALLBACK = 0.55

# At least one of these must be populated for a mid-confidence primary result to stand alone.
REQUIRED_PLATFORM_FIELDS = ("spotify_url", "apple_music_url")

# Cached resolutions below this confidence are re-resolved instead of served.
CACHE_CONFIDENCE_MIN = 0.75

STATUS_RESOLVED_MIN = 0.75
STATUS_PARTIAL_MIN = 0.50

ACRCLOUD_DEFAULT_BASE_URL = "https://eu-api-v2.acrcloud.com"
# ACRCloud accepts at most five platforms per external-metadata request.
ACRCLOUD_DEFAULT_PLATFORMS = "spotify,applemusic,youtube,deezer,tidal"

APPLE_MUSIC_DEFAULT_STOREFRONT = "us"

DEFAULT_CACHE_PATH = ".cache/track_resolutions.json"
DEFAULT_CACHE_TTL_SECONDS = 7 * 24 * 60 * 60
DEFAULT_DB_PATH = "track_resolutions.sqlite3"


def _section(config, name):
    if not isinstance(config, dict):
        return {}
    value = config.get(name)
    return value if isinstance(value, dict) else {}


def _first_text(*values):
    for value in values:
        text = str(value or "").strip()
        if text:
            return text
    return None


def acrcloud_settings(config=None):
    """Return ``(base_url, bearer_token, timeout_seconds)``; environment wins over config."""
    section = _section(config, "acrcloud")
    base_url = _first_text(
        os.environ.get("ACRCLOUD_BASE_URL"),
        section.get("base_url"),
        ACRCLOUD_DEFAULT_BASE_URL,
    )
    token = _first_text(os.environ.get("ACRCLOUD_BEARER_TOKEN"), section.get("bearer_token"))
    timeout = _float_setting(
        os.environ.get("ACRCLOUD_TIMEOUT_SECONDS"),
        section.get("timeout_seconds"),
        default=10.0,
    )
    return base_url.rstrip("/"), token, timeout


def spotify_credentials(config=None):
    client_id = os.environ.get("SPOTIFY_CLIENT_ID")
    client_secret = os.environ.get("SPOTIFY_CLIENT_SECRET")
    if client_id and client_secret:
        return client_id, client_secret
    section = _section(config, "spotify")
    return section.get("client_id"), section.get("client_secret")


def apple_music_settings(config=None):
    """Return ``(developer_token, storefront)`` for the Apple Music catalog API."""
    section = _section(config, "apple_music")
    token = _first_text(os.environ.get("APPLE_MUSIC_DEVELOPER_TOKEN"), section.get("developer_token"))
    storefront = _first_text(
        os.environ.get("APPLE_MUSIC_STOREFRONT"),
        section.get("storefront"),
        APPLE_MUSIC_DEFAULT_STOREFRONT,
    )
    return token, storefront.lower()


def cache_settings(config=None):
    """Return ``(cache_path, ttl_seconds)`` for the JSON resolution cache."""
    section = _section(config, "cache")
    path = _first_text(
        os.environ.get("TRACK_RESOLVER_CACHE_PATH"),
        section.get("path"),
        DEFAULT_CACHE_PATH,
    )
    ttl = section.get("ttl_seconds")
    try:
        ttl_seconds = int(ttl) if ttl is not None else DEFAULT_CACHE_TTL_SECONDS
    except (TypeError, ValueError):
        ttl_seconds = DEFAULT_CACHE_TTL_SECONDS
    return os.path.abspath(path), ttl_seconds


def db_path(config=None):
    section = _section(config, "cache")
    path = _first_text(
        os.environ.get("TRACK_RESOLVER_DB_PATH"),
        section.get("db_path"),
        os.path.join(os.getcwd(), DEFAULT_DB_PATH),
    )
    return os.path.abspath(path)


def _float_setting(*values, default):
    for value in values:
        if value is None or value == "":
            continue
        try:
            return float(value)
        except (TypeError, ValueError):
            continue
    return default

"""Platform ID extraction from raw streaming URLs, without network calls."""

from __future__ import annotations

import re
from typing import Any, Optional
from urllib.parse import parse_qs, urlparse

_SPOTIFY_ID_RE = re.compile(r"^[A-Za-z0-9]+$")
_NUMERIC_RE = re.compile(r"^\d+$")
# Pasted links often arrive without a scheme.
_SCHEMELESS_SPOTIFY_RE = re.compile(r"^(?:[\w-]+\.)*spotify\.com/", re.IGNORECASE)
_SCHEMELESS_APPLE_RE = re.compile(r"^music\.apple\.com/", re.IGNORECASE)


def extract_spotify_track_id(url: Any) -> Optional[str]:
    """Return the track ID from an ``open.spotify.com/track/<id>`` URL or ``spotify:track:<id>`` URI."""
    raw = _text(url)
    if not raw:
        return None
    if raw.lower().startswith("spotify:track:"):
        return _spotify_id(raw.split(":", 2)[2])

    parsed = _parse_link(raw, _SCHEMELESS_SPOTIFY_RE)
    if not parsed.scheme or "spotify.com" not in (parsed.netloc or "").lower():
        return None
    parts = [segment for segment in (parsed.path or "").split("/") if segment]
    # Localized links carry an ``intl-xx`` segment ahead of ``track``.
    for idx, segment in enumerate(parts[:-1]):
        if segment.lower() == "track":
            return _spotify_id(parts[idx + 1])
    return None


def extract_apple_music_id(url: Any) -> Optional[str]:
    """Return the song ID from a ``music.apple.com`` album URL.

    The ``?i=<id>`` song parameter wins when present; otherwise the trailing
    numeric path segment after ``/album/<slug>/`` is used.
    """
    raw = _text(url)
    if not raw:
        return None
    parsed = _parse_link(raw, _SCHEMELESS_APPLE_RE)
    if not parsed.scheme or "music.apple.com" not in (parsed.netloc or "").lower():
        return None

    song_ids = parse_qs(parsed.query).get("i")
    if song_ids and _NUMERIC_RE.match(song_ids[0].strip()):
        return song_ids[0].strip()

    parts = [segment for segment in (parsed.path or "").split("/") if segment]
    try:
        album_idx = [segment.lower() for segment in parts].index("album")
    except ValueError:
        return None
    tail = parts[album_idx + 1 :]
    if len(tail) >= 2 and _NUMERIC_RE.match(tail[-1]):
        return tail[-1]
    return None


def _spotify_id(value: str) -> Optional[str]:
    cleaned = (value or "").split("?", 1)[0].strip().strip("/")
    if cleaned and _SPOTIFY_ID_RE.match(cleaned):
        return cleaned
    return None


def _text(value: Any) -> str:
    if not isinstance(value, str):
        return ""
    return value.strip()


def _parse_link(raw: str, schemeless_re: re.Pattern):
    if schemeless_re.match(raw):
        return urlparse(f"https://{raw}")
    return urlparse(raw)

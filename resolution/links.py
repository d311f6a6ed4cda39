"""Platform link normalization.

Turns the mix of URLs, URIs and bare IDs that catalog services hand back into
canonical platform URLs plus the raw IDs they were built from. Pure functions
only; nothing here performs I/O or imports the resolver.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Optional, TypedDict

from resolution.identifiers import extract_apple_music_id, extract_spotify_track_id

logger = logging.getLogger(__name__)

_SPOTIFY_BARE_ID_RE = re.compile(r"^[A-Za-z0-9]{22}$")
_NUMERIC_RE = re.compile(r"^\d+$")
_YOUTUBE_ID_RE = re.compile(r"^[A-Za-z0-9_-]{11}$")
_YOUTUBE_QUERY_ID_RE = re.compile(r"[?&]v=([A-Za-z0-9_-]+)")
_YOUTU_BE_RE = re.compile(r"youtu\.be/([A-Za-z0-9_-]+)")
_DEEZER_TRACK_RE = re.compile(r"deezer\.com/(?:[a-z]{2}/)?track/(\d+)")
_TIDAL_TRACK_RE = re.compile(r"/track/(\d+)")


class PlatformIds(TypedDict, total=False):
    spotify_track_id: str
    spotify_uri: str
    apple_music_id: str
    youtube_video_id: str
    deezer_track_id: str
    tidal_track_id: str
    isrc: str
    upc: str


class NormalizedLinks(TypedDict, total=False):
    spotify: str
    apple_music: str
    youtube: str
    youtube_music: str
    deezer: str
    tidal: str
    soundcloud: str


class LinkNormalization(TypedDict):
    normalized_links: NormalizedLinks
    raw_ids: PlatformIds
    notes: list[str]


def normalize_platform_links(
    *,
    spotify: Optional[str] = None,
    apple_music: Optional[str] = None,
    youtube: Optional[str] = None,
    youtube_music: Optional[str] = None,
    deezer: Optional[str] = None,
    tidal: Optional[str] = None,
    soundcloud: Optional[str] = None,
    external_metadata: Optional[dict[str, Any]] = None,
) -> LinkNormalization:
    """Normalize explicit platform values and an ACRCloud ``external_metadata`` block.

    Explicit values win over anything found in ``external_metadata``. Each
    platform entry in ``external_metadata`` may be a single object or a list
    of objects; only the first object of a list is considered.
    """
    links: NormalizedLinks = {}
    ids: PlatformIds = {}
    notes: list[str] = []
    meta = external_metadata if isinstance(external_metadata, dict) else {}

    if spotify:
        url, track_id, uri, note = normalize_spotify(spotify)
        if url:
            links["spotify"] = url
            notes.append(note)
        if track_id:
            ids["spotify_track_id"] = track_id
        if uri:
            ids["spotify_uri"] = uri
    _spotify_from_metadata(_first_entry(meta.get("spotify")), links, ids, notes)

    if apple_music:
        url, track_id, note = normalize_apple_music(apple_music)
        if url:
            links["apple_music"] = url
            notes.append(note)
        if track_id:
            ids["apple_music_id"] = track_id
    apple_meta = _first_entry(meta.get("applemusic") or meta.get("apple_music"))
    if apple_meta:
        apple_url = apple_meta.get("url") or apple_meta.get("link")
        if apple_url and "apple_music" not in links:
            links["apple_music"] = str(apple_url)
            notes.append("Apple Music: used URL from ACRCloud")
        apple_id = apple_meta.get("id") or (apple_meta.get("track") or {}).get("id")
        if apple_id and "apple_music_id" not in ids:
            ids["apple_music_id"] = str(apple_id)
            if "apple_music" not in links:
                notes.append("Apple Music: stored ID but no clean URL available")

    if deezer:
        url, track_id, note = normalize_deezer(deezer)
        if url:
            links["deezer"] = url
            notes.append(note)
        if track_id:
            ids["deezer_track_id"] = track_id
    deezer_meta = _first_entry(meta.get("deezer"))
    if deezer_meta and "deezer" not in links:
        deezer_id = (deezer_meta.get("track") or {}).get("id") or deezer_meta.get("id")
        if deezer_id:
            ids["deezer_track_id"] = str(deezer_id)
            links["deezer"] = f"https://www.deezer.com/track/{deezer_id}"
            notes.append("Deezer: built URL from ACRCloud track ID")
        elif deezer_meta.get("link"):
            links["deezer"] = str(deezer_meta["link"])
            notes.append("Deezer: used link from ACRCloud")

    if youtube:
        url, video_id, note = normalize_youtube(youtube)
        if url:
            links["youtube"] = url
            notes.append(note)
        if video_id:
            ids["youtube_video_id"] = video_id
    youtube_meta = _first_entry(meta.get("youtube"))
    if youtube_meta and "youtube" not in links:
        video_id = youtube_meta.get("vid") or youtube_meta.get("id")
        if video_id:
            ids["youtube_video_id"] = str(video_id)
            links["youtube"] = f"https://www.youtube.com/watch?v={video_id}"
            notes.append("YouTube: built URL from ACRCloud video ID")
        elif youtube_meta.get("link") or youtube_meta.get("url"):
            url, video_id, note = normalize_youtube(str(youtube_meta.get("link") or youtube_meta.get("url")))
            if url:
                links["youtube"] = url
                notes.append(note)
            if video_id:
                ids["youtube_video_id"] = video_id

    if youtube_music:
        url, video_id, note = normalize_youtube(youtube_music)
        if video_id:
            links["youtube_music"] = f"https://music.youtube.com/watch?v={video_id}"
            notes.append("YouTube Music: converted from video ID")
        elif url:
            links["youtube_music"] = url
            notes.append(note)

    if tidal:
        url, track_id, note = normalize_tidal(tidal)
        if url:
            links["tidal"] = url
            notes.append(note)
        if track_id:
            ids["tidal_track_id"] = track_id
    tidal_meta = _first_entry(meta.get("tidal"))
    if tidal_meta and "tidal" not in links:
        tidal_id = (tidal_meta.get("track") or {}).get("id") or tidal_meta.get("id")
        if tidal_id:
            ids["tidal_track_id"] = str(tidal_id)
            links["tidal"] = f"https://listen.tidal.com/track/{tidal_id}"
            notes.append("Tidal: built URL from ACRCloud track ID")

    if soundcloud:
        url, note = normalize_soundcloud(soundcloud)
        if url:
            links["soundcloud"] = url
            notes.append(note)

    if meta.get("isrc"):
        ids["isrc"] = str(meta["isrc"])
    if meta.get("upc"):
        ids["upc"] = str(meta["upc"])

    return {"normalized_links": links, "raw_ids": ids, "notes": notes}


def normalize_spotify(value: str) -> tuple[Optional[str], Optional[str], Optional[str], str]:
    """Return ``(url, track_id, uri, note)`` for a Spotify URI, URL or bare 22-char ID."""
    trimmed = (value or "").strip()
    if trimmed.lower().startswith("spotify:track:") or "spotify.com/" in trimmed.lower():
        track_id = extract_spotify_track_id(trimmed)
        if track_id:
            return (
                f"https://open.spotify.com/track/{track_id}",
                track_id,
                f"spotify:track:{track_id}",
                "Spotify: canonicalized track URL",
            )
    if _SPOTIFY_BARE_ID_RE.match(trimmed):
        return (
            f"https://open.spotify.com/track/{trimmed}",
            trimmed,
            f"spotify:track:{trimmed}",
            "Spotify: built URL from track ID",
        )
    logger.warning("Unrecognized Spotify link format value=%s", trimmed)
    return trimmed or None, None, None, "Spotify: unrecognized format, kept as-is"


def normalize_apple_music(value: str) -> tuple[Optional[str], Optional[str], str]:
    """Return ``(url, track_id, note)``; a bare numeric ID yields no URL (it needs storefront + album)."""
    trimmed = (value or "").strip()
    if "music.apple.com" in trimmed.lower():
        return trimmed, extract_apple_music_id(trimmed), "Apple Music: already valid URL"
    if _NUMERIC_RE.match(trimmed):
        return None, trimmed, "Apple Music: ID only, no URL"
    return trimmed or None, None, "Apple Music: unknown format, kept as-is"


def normalize_deezer(value: str) -> tuple[Optional[str], Optional[str], str]:
    trimmed = (value or "").strip()
    match = _DEEZER_TRACK_RE.search(trimmed)
    if match:
        return trimmed, match.group(1), "Deezer: already valid URL"
    if _NUMERIC_RE.match(trimmed):
        return f"https://www.deezer.com/track/{trimmed}", trimmed, "Deezer: built URL from track ID"
    return trimmed or None, None, "Deezer: unknown format, kept as-is"


def normalize_youtube(value: str) -> tuple[Optional[str], Optional[str], str]:
    trimmed = (value or "").strip()
    video_id = None
    if "youtube.com/watch" in trimmed:
        match = _YOUTUBE_QUERY_ID_RE.search(trimmed)
        video_id = match.group(1) if match else None
    elif "youtu.be/" in trimmed:
        match = _YOUTU_BE_RE.search(trimmed)
        video_id = match.group(1) if match else None
    elif _YOUTUBE_ID_RE.match(trimmed):
        video_id = trimmed
    if video_id:
        return f"https://www.youtube.com/watch?v={video_id}", video_id, "YouTube: extracted video ID"
    return trimmed or None, None, "YouTube: unknown format, kept as-is"


def normalize_tidal(value: str) -> tuple[Optional[str], Optional[str], str]:
    trimmed = (value or "").strip()
    if trimmed.startswith("tidal://track/"):
        track_id = trimmed[len("tidal://track/") :].strip("/")
        return f"https://listen.tidal.com/track/{track_id}", track_id, "Tidal: converted deep link to URL"
    if "tidal.com/" in trimmed:
        match = _TIDAL_TRACK_RE.search(trimmed)
        return trimmed, (match.group(1) if match else None), "Tidal: already valid URL"
    if _NUMERIC_RE.match(trimmed):
        return f"https://listen.tidal.com/track/{trimmed}", trimmed, "Tidal: built URL from track ID"
    return trimmed or None, None, "Tidal: unknown format, kept as-is"


def normalize_soundcloud(value: str) -> tuple[Optional[str], str]:
    # SoundCloud URLs are artist/slug paths with no stable ID to rebuild from.
    trimmed = (value or "").strip()
    if "soundcloud.com/" in trimmed:
        return trimmed, "SoundCloud: already valid URL"
    return trimmed or None, "SoundCloud: unknown format, kept as-is"


def _spotify_from_metadata(spotify_meta, links, ids, notes) -> None:
    if not spotify_meta or "spotify_track_id" in ids:
        return
    track = spotify_meta.get("track") if isinstance(spotify_meta.get("track"), dict) else {}
    tracks = spotify_meta.get("tracks") if isinstance(spotify_meta.get("tracks"), list) else []
    first_track = tracks[0] if tracks and isinstance(tracks[0], dict) else {}

    track_id = track.get("id") or first_track.get("id") or spotify_meta.get("id")
    if track_id:
        ids["spotify_track_id"] = str(track_id)
        links["spotify"] = f"https://open.spotify.com/track/{track_id}"
        notes.append("Spotify: extracted track ID from ACRCloud")
        return

    track_url = (track.get("external_urls") or {}).get("spotify") or spotify_meta.get("link")
    if track_url and "spotify" not in links:
        url, extracted_id, uri, _note = normalize_spotify(str(track_url))
        if url:
            links["spotify"] = url
        if extracted_id:
            ids["spotify_track_id"] = extracted_id
        if uri:
            ids["spotify_uri"] = uri
        notes.append("Spotify: used track URL from ACRCloud")


def _first_entry(value: Any) -> dict[str, Any]:
    if isinstance(value, list):
        value = value[0] if value else None
    return value if isinstance(value, dict) else {}

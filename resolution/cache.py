"""Resolution cache gate and a file-backed cache store."""

from __future__ import annotations

import json
import logging
import os
import threading
import time
from dataclasses import replace
from pathlib import Path
from typing import Optional, Protocol

from config.settings import CACHE_CONFIDENCE_MIN, DEFAULT_CACHE_TTL_SECONDS
from resolution.types import ResolveInput, TrackResolution

logger = logging.getLogger(__name__)

# Strongest first; the gate performs a single lookup on the first one present.
CACHE_KEY_PRIORITY = ("isrc", "spotify_track_id", "acrid")


class ResolutionCacheStore(Protocol):
    def get(self, kind: str, value: str) -> Optional[TrackResolution]:
        raise NotImplementedError


def cache_identifier(resolve_input: ResolveInput) -> Optional[tuple[str, str]]:
    """Return ``(kind, value)`` for the strongest identifier on the input, if any."""
    for kind in CACHE_KEY_PRIORITY:
        value = str(getattr(resolve_input, kind, None) or "").strip()
        if value:
            return kind, value
    return None


class CacheGate:
    """Serve settled resolutions from the store; everything else re-resolves."""

    def __init__(self, store: Optional[ResolutionCacheStore], *, min_confidence: float = CACHE_CONFIDENCE_MIN):
        self.store = store
        self.min_confidence = min_confidence

    def lookup(self, resolve_input: ResolveInput) -> Optional[TrackResolution]:
        if self.store is None:
            return None
        identifier = cache_identifier(resolve_input)
        if identifier is None:
            return None
        kind, value = identifier
        try:
            cached = self.store.get(kind, value)
        except Exception:
            logger.exception("Resolution cache lookup failed kind=%s", kind)
            return None
        if cached is None:
            logger.info("cache kind=%s result=miss", kind)
            return None
        if cached.confidence < self.min_confidence:
            logger.info("cache kind=%s result=stale confidence=%s", kind, cached.confidence)
            return None
        logger.info("cache kind=%s result=hit confidence=%s", kind, cached.confidence)
        return replace(
            cached,
            resolver_sources=list(cached.resolver_sources),
            resolver_path="cache",
            fallback_reason=None,
        )


class JsonResolutionCache:
    """Resolutions in one JSON file, indexed as ``"<kind>:<value>"`` for every cacheable identifier.

    File layout: ``{"version": 1, "entries": {key: {"ts": <epoch>, "value": <resolution dict>}}}``.
    Malformed entries are dropped on read; expired ones are pruned and the file rewritten.
    """

    def __init__(self, path, *, ttl_seconds=DEFAULT_CACHE_TTL_SECONDS):
        self.path = Path(path)
        self.ttl_seconds = ttl_seconds
        self._lock = threading.Lock()
        self._entries: Optional[dict] = None

    def get(self, kind, value):
        key = _cache_key(kind, value)
        with self._lock:
            entries = self._current_entries()
            entry = entries.get(key)
            if entry is None:
                return None
            if self._expired(entry, time.time()):
                del entries[key]
                self._write(entries)
                logger.info("cache_file key=%s result=expired", key)
                return None
            return TrackResolution.from_dict(entry["value"])

    def put(self, resolution: TrackResolution):
        """Index ``resolution`` under each identifier it carries; returns the keys written."""
        keys = [
            _cache_key(kind, getattr(resolution, kind))
            for kind in CACHE_KEY_PRIORITY
            if getattr(resolution, kind, None)
        ]
        if not keys:
            return []
        entry = {"ts": time.time(), "value": resolution.to_dict()}
        with self._lock:
            entries = self._current_entries()
            entries.update(dict.fromkeys(keys, entry))
            self._write(entries)
        return keys

    def _current_entries(self) -> dict:
        if self._entries is None:
            self._entries = self._read()
        return self._entries

    def _expired(self, entry, now) -> bool:
        if self.ttl_seconds is None:
            return False
        return now - entry["ts"] > float(self.ttl_seconds)

    def _read(self) -> dict:
        try:
            payload = json.loads(self.path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return {}
        except (OSError, ValueError):
            logger.warning("Ignoring unreadable resolution cache path=%s", self.path)
            return {}
        raw_entries = payload.get("entries") if isinstance(payload, dict) else None
        if not isinstance(raw_entries, dict):
            return {}
        return {
            key: entry
            for key, entry in raw_entries.items()
            if isinstance(entry, dict)
            and isinstance(entry.get("ts"), (int, float))
            and isinstance(entry.get("value"), dict)
        }

    def _write(self, entries: dict) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        staging = self.path.with_name(f"{self.path.name}.tmp")
        staging.write_text(json.dumps({"version": 1, "entries": entries}), encoding="utf-8")
        os.replace(staging, self.path)


def _cache_key(kind: str, value) -> str:
    return f"{kind}:{value}"

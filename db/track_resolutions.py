"""SQLite persistence for resolved track identities."""

from __future__ import annotations

import json
import sqlite3
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from db.migrations import ensure_track_resolutions_table
from resolution.cache import CACHE_KEY_PRIORITY
from resolution.types import TrackResolution

_COLUMNS = (
    "isrc",
    "title",
    "artist",
    "album",
    "duration_ms",
    "spotify_track_id",
    "spotify_url",
    "apple_music_id",
    "apple_music_url",
    "youtube_url",
    "deezer_url",
    "acrid",
    "acrcloud_raw",
    "resolver_sources",
    "confidence",
    "status",
    "resolver_path",
    "fallback_reason",
)


class TrackResolutionStore:
    """Keyed store of resolutions; the resolver reads through ``get``, callers write with ``upsert``."""

    def __init__(self, db_path: Path):
        self.db_path = Path(db_path)
        conn = self._connect()
        try:
            ensure_track_resolutions_table(conn)
        finally:
            conn.close()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self.db_path), check_same_thread=False, timeout=30)
        conn.row_factory = sqlite3.Row
        return conn

    def get(self, kind: str, value: str) -> Optional[TrackResolution]:
        """Return the most recently written resolution whose ``kind`` column equals ``value``."""
        if kind not in CACHE_KEY_PRIORITY:
            raise ValueError(f"unsupported identifier kind: {kind}")
        lookup = (value or "").strip()
        if not lookup:
            return None
        conn = self._connect()
        try:
            cur = conn.cursor()
            cur.execute(
                f"SELECT * FROM track_resolutions WHERE {kind}=? ORDER BY id DESC LIMIT 1",
                (lookup,),
            )
            row = cur.fetchone()
        finally:
            conn.close()
        if row is None:
            return None
        return _row_to_resolution(row)

    def upsert(self, resolution: TrackResolution) -> Optional[int]:
        """Insert or update by ``acrid``, else ``isrc``; returns the row id.

        Resolutions carrying neither identifier are not persisted and ``None``
        is returned.
        """
        if resolution.acrid:
            match_column, match_value = "acrid", resolution.acrid
        elif resolution.isrc:
            match_column, match_value = "isrc", resolution.isrc
        else:
            return None

        values = _resolution_to_row(resolution)
        updated_at = datetime.now(timezone.utc).isoformat()
        conn = self._connect()
        try:
            cur = conn.cursor()
            cur.execute(
                f"SELECT id FROM track_resolutions WHERE {match_column}=? ORDER BY id DESC LIMIT 1",
                (match_value,),
            )
            existing = cur.fetchone()
            if existing is not None:
                assignments = ", ".join(f"{column}=?" for column in _COLUMNS)
                cur.execute(
                    f"UPDATE track_resolutions SET {assignments}, updated_at=? WHERE id=?",
                    (*values, updated_at, existing["id"]),
                )
                row_id = int(existing["id"])
            else:
                placeholders = ", ".join("?" for _ in _COLUMNS)
                cur.execute(
                    f"INSERT INTO track_resolutions ({', '.join(_COLUMNS)}, updated_at) "
                    f"VALUES ({placeholders}, ?)",
                    (*values, updated_at),
                )
                row_id = int(cur.lastrowid)
            conn.commit()
            return row_id
        finally:
            conn.close()


def _resolution_to_row(resolution: TrackResolution) -> tuple:
    record = resolution.to_dict()
    record["resolver_sources"] = json.dumps(record.get("resolver_sources") or [])
    raw = record.get("acrcloud_raw")
    record["acrcloud_raw"] = json.dumps(raw) if raw is not None else None
    return tuple(record.get(column) for column in _COLUMNS)


def _row_to_resolution(row: sqlite3.Row) -> TrackResolution:
    record = {column: row[column] for column in _COLUMNS}
    try:
        record["resolver_sources"] = json.loads(record.get("resolver_sources") or "[]")
    except ValueError:
        record["resolver_sources"] = []
    raw = record.get("acrcloud_raw")
    if raw:
        try:
            record["acrcloud_raw"] = json.loads(raw)
        except ValueError:
            record["acrcloud_raw"] = None
    return TrackResolution.from_dict(record)

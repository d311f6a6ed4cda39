"""SQLite migrations for track resolution storage."""

from __future__ import annotations

import sqlite3


def ensure_track_resolutions_table(conn: sqlite3.Connection) -> None:
    """Ensure the ``track_resolutions`` table and its identifier indexes exist."""
    cur = conn.cursor()
    cur.execute(
        """
        CREATE TABLE IF NOT EXISTS track_resolutions (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            isrc TEXT,
            title TEXT,
            artist TEXT,
            album TEXT,
            duration_ms INTEGER,
            spotify_track_id TEXT,
            spotify_url TEXT,
            apple_music_id TEXT,
            apple_music_url TEXT,
            youtube_url TEXT,
            deezer_url TEXT,
            acrid TEXT,
            acrcloud_raw TEXT,
            resolver_sources TEXT NOT NULL DEFAULT '[]',
            confidence REAL NOT NULL DEFAULT 0,
            status TEXT NOT NULL DEFAULT 'needs_review',
            resolver_path TEXT,
            fallback_reason TEXT,
            updated_at TEXT NOT NULL
        )
        """
    )
    cur.execute("CREATE INDEX IF NOT EXISTS idx_track_resolutions_isrc ON track_resolutions (isrc)")
    cur.execute(
        "CREATE INDEX IF NOT EXISTS idx_track_resolutions_spotify_track_id "
        "ON track_resolutions (spotify_track_id)"
    )
    cur.execute("CREATE INDEX IF NOT EXISTS idx_track_resolutions_acrid ON track_resolutions (acrid)")
    conn.commit()

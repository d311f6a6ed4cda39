#!/usr/bin/env python3
from __future__ import annotations

import json
import logging
import os
import sys

from config.settings import db_path
from db import TrackResolutionStore
from resolution import ResolveInput, build_track_resolver
from resolution.identifiers import extract_spotify_track_id


def _input_from_arg(raw: str) -> ResolveInput:
    if "spotify" in raw.lower() and extract_spotify_track_id(raw):
        return ResolveInput(spotify_url=raw)
    if "music.apple.com" in raw.lower():
        return ResolveInput(apple_music_url=raw)
    compact = raw.replace("-", "").upper()
    if len(compact) == 12 and compact[:2].isalpha() and compact[-7:].isdigit():
        return ResolveInput(isrc=compact)
    return ResolveInput(query=raw)


def main() -> int:
    raw = " ".join(sys.argv[1:]).strip()
    if not raw:
        print("Usage: scripts/resolve_track_smoke.py <isrc | spotify url | apple music url | query>")
        return 1
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s %(message)s")

    # With TRACK_RESOLVER_DB_PATH set, read through and write back to SQLite instead of the JSON cache.
    store = TrackResolutionStore(db_path()) if os.environ.get("TRACK_RESOLVER_DB_PATH") else None
    resolver = build_track_resolver(cache_store=store)
    resolution = resolver.resolve(_input_from_arg(raw))
    if store is not None and resolution.resolver_path != "cache":
        row_id = store.upsert(resolution)
        logging.info("stored resolution row_id=%s", row_id)

    record = resolution.to_dict()
    record.pop("acrcloud_raw", None)
    print(json.dumps(record, indent=2, sort_keys=True))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

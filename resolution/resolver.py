"""Track identity resolution pipeline.

Resolution order:
1. Resolution cache, served only when the stored confidence is settled.
2. ACRCloud external metadata (primary, highest trust).
3. Spotify then Apple Music catalog search, only when the fallback policy
   asks for it. Fallback results fill gaps and never relabel the primary
   source's title/artist/album.

The pipeline never writes to storage; persisting the returned resolution is
the caller's job.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import replace
from typing import Optional, Sequence

from acrcloud_metadata.client import AcrCloudMetadataClient
from apple_music.client import AppleMusicCatalogClient
from config.settings import (
    acrcloud_settings,
    apple_music_settings,
    cache_settings,
    spotify_credentials,
)
from resolution.cache import CacheGate, JsonResolutionCache, ResolutionCacheStore
from resolution.confidence import calculate_confidence, classify_status
from resolution.fallback import decide_fallback
from resolution.identifiers import extract_apple_music_id, extract_spotify_track_id
from resolution.merge import merge_resolution
from resolution.providers.acrcloud import AcrCloudMetadataProvider
from resolution.providers.apple_music import AppleMusicSearchProvider
from resolution.providers.base import PrimaryMetadataSource, SecondaryMetadataSource
from resolution.providers.spotify import SpotifySearchProvider
from resolution.types import (
    PartialResolution,
    ResolutionContractError,
    ResolveInput,
    TrackResolution,
)
from spotify.client import SpotifyCatalogClient

logger = logging.getLogger(__name__)


def prepare_input(resolve_input: ResolveInput) -> ResolveInput:
    """Return a copy with platform IDs derived from any URLs that lack them."""
    updates = {}
    if resolve_input.spotify_url and not resolve_input.spotify_track_id:
        updates["spotify_track_id"] = extract_spotify_track_id(resolve_input.spotify_url)
    if resolve_input.apple_music_url and not resolve_input.apple_music_id:
        updates["apple_music_id"] = extract_apple_music_id(resolve_input.apple_music_url)
    return replace(resolve_input, **updates)


class TrackResolver:
    def __init__(
        self,
        *,
        primary: PrimaryMetadataSource,
        secondaries: Sequence[SecondaryMetadataSource] = (),
        cache_store: Optional[ResolutionCacheStore] = None,
    ):
        self.primary = primary
        # Fixed order: when two fallbacks can fill the same gap, the earlier one wins.
        self.secondaries = tuple(secondaries)
        self.cache_gate = CacheGate(cache_store)

    def resolve(self, resolve_input: ResolveInput) -> TrackResolution:
        if not isinstance(resolve_input, ResolveInput):
            raise TypeError("resolve_input must be a ResolveInput")
        prepared = prepare_input(resolve_input)

        cached = self.cache_gate.lookup(prepared)
        if cached is not None:
            logger.info("resolver path=cache confidence=%s", cached.confidence)
            return cached

        resolution = TrackResolution()
        primary_data = _checked(self.primary.query(prepared), self.primary)
        primary_found = primary_data is not None
        confidence = 0.0
        if primary_found:
            resolution = merge_resolution(resolution, primary_data)
            confidence = calculate_confidence(resolution)
            logger.info("resolver primary=%s confidence=%s", self.primary.name, confidence)
        else:
            logger.info("resolver primary=%s result=no_match", self.primary.name)

        decision = decide_fallback(
            primary_found,
            confidence,
            resolution,
            force_search_fallback=prepared.force_search_fallback,
        )
        if decision.required:
            logger.info("resolver fallback=required reason=%s", decision.reason)
            for source in self.secondaries:
                addition = _checked(source.lookup(prepared), source)
                if addition is not None:
                    resolution = merge_resolution(resolution, addition, preserve_metadata=True)

        final_confidence = calculate_confidence(resolution)
        resolution = replace(
            resolution,
            confidence=final_confidence,
            status=classify_status(final_confidence),
            resolver_path=decision.resolver_path(primary_found),
            fallback_reason=decision.reason,
        )
        logger.info(
            "resolver final sources=%s confidence=%s status=%s path=%s reason=%s",
            ",".join(resolution.resolver_sources) or "-",
            resolution.confidence,
            resolution.status,
            resolution.resolver_path,
            resolution.fallback_reason,
        )
        return resolution


def _checked(result, source) -> Optional[PartialResolution]:
    if result is None or isinstance(result, PartialResolution):
        return result
    raise ResolutionContractError(
        f"{getattr(source, 'name', type(source).__name__)} returned {type(result).__name__}, "
        "expected PartialResolution or None"
    )


def build_track_resolver(config=None, *, cache_store: Optional[ResolutionCacheStore] = None) -> TrackResolver:
    """Wire the ACRCloud, Spotify and Apple Music sources from config and environment.

    ``cache_store`` defaults to the JSON file cache; pass a
    ``db.TrackResolutionStore`` or any store with ``get(kind, value)`` to override.
    """
    config = config or {}
    base_url, bearer_token, timeout = acrcloud_settings(config)
    spotify_id, spotify_secret = spotify_credentials(config)
    apple_token, storefront = apple_music_settings(config)

    if cache_store is None:
        cache_path, ttl_seconds = cache_settings(config)
        cache_store = JsonResolutionCache(cache_path, ttl_seconds=ttl_seconds)

    primary = AcrCloudMetadataProvider(
        client=AcrCloudMetadataClient(bearer_token=bearer_token, base_url=base_url, timeout_seconds=timeout)
    )
    secondaries = [
        SpotifySearchProvider(
            client=SpotifyCatalogClient(client_id=spotify_id, client_secret=spotify_secret)
        ),
        AppleMusicSearchProvider(
            client=AppleMusicCatalogClient(developer_token=apple_token, storefront=storefront)
        ),
    ]
    return TrackResolver(primary=primary, secondaries=secondaries, cache_store=cache_store)


_DEFAULT_RESOLVER: TrackResolver | None = None
_DEFAULT_RESOLVER_LOCK = threading.Lock()


def get_track_resolver() -> TrackResolver:
    global _DEFAULT_RESOLVER
    if _DEFAULT_RESOLVER is not None:
        return _DEFAULT_RESOLVER
    with _DEFAULT_RESOLVER_LOCK:
        if _DEFAULT_RESOLVER is None:
            _DEFAULT_RESOLVER = build_track_resolver()
    return _DEFAULT_RESOLVER


def resolve(resolve_input: ResolveInput) -> TrackResolution:
    """Resolve ``resolve_input`` with the environment-configured default resolver."""
    return get_track_resolver().resolve(resolve_input)

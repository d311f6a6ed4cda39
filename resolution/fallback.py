"""Decide whether secondary catalog searches must run after the primary source."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from config.settings import (
    ACRCLOUD_CONFIDENCE_FALLBACK,
    ACRCLOUD_CONFIDENCE_MIN,
    REQUIRED_PLATFORM_FIELDS,
)
from resolution.types import FallbackReason, ResolverPath, TrackResolution


@dataclass(frozen=True)
class FallbackDecision:
    required: bool
    reason: Optional[FallbackReason] = None

    def resolver_path(self, primary_found: bool) -> ResolverPath:
        if not self.required:
            return "acrcloud_only"
        return "acrcloud_then_search" if primary_found else "search_only"


def has_required_platform(resolution: TrackResolution) -> bool:
    return any(getattr(resolution, name, None) for name in REQUIRED_PLATFORM_FIELDS)


def decide_fallback(
    primary_found: bool,
    confidence: float,
    resolution: TrackResolution,
    force_search_fallback: bool = False,
) -> FallbackDecision:
    """Apply the primary-source fallback rules in order.

    1. No primary match: fall back (``no_match``).
    2. Confidence under ``ACRCLOUD_CONFIDENCE_FALLBACK``: fall back (``low_confidence``).
    3. Confidence under ``ACRCLOUD_CONFIDENCE_MIN`` or a forced search: fall back
       (``missing_platform_ids``) when forced or when no required platform link
       is populated; otherwise the primary result stands.
    4. Anything else stands alone.
    """
    if not primary_found:
        return FallbackDecision(required=True, reason="no_match")
    if confidence < ACRCLOUD_CONFIDENCE_FALLBACK:
        return FallbackDecision(required=True, reason="low_confidence")
    if confidence < ACRCLOUD_CONFIDENCE_MIN or force_search_fallback:
        if force_search_fallback or not has_required_platform(resolution):
            return FallbackDecision(required=True, reason="missing_platform_ids")
    return FallbackDecision(required=False)

from __future__ import annotations

from config.settings import STATUS_PARTIAL_MIN, STATUS_RESOLVED_MIN
from resolution.types import ResolutionStatus, TrackResolution

_WEIGHTS = {
    "isrc": 0.55,
    "spotify_track_id": 0.25,
    "apple_music_id": 0.15,
    "multi_source": 0.10,
}


def calculate_confidence(resolution: TrackResolution) -> float:
    """Score a resolution from which identifiers are populated, capped at 1.0.

    Only distinct source names count toward the multi-source bonus. The sum is
    rounded so float accumulation never lands a hair under a threshold.
    """
    confidence = 0.0
    if resolution.isrc:
        confidence += _WEIGHTS["isrc"]
    if resolution.spotify_track_id:
        confidence += _WEIGHTS["spotify_track_id"]
    if resolution.apple_music_id:
        confidence += _WEIGHTS["apple_music_id"]
    if len(set(resolution.resolver_sources or [])) >= 2:
        confidence += _WEIGHTS["multi_source"]
    return round(min(confidence, 1.0), 4)


def classify_status(confidence: float) -> ResolutionStatus:
    if confidence >= STATUS_RESOLVED_MIN:
        return "resolved"
    if confidence >= STATUS_PARTIAL_MIN:
        return "partial"
    return "needs_review"

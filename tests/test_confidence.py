from __future__ import annotations

import pytest

from resolution.confidence import calculate_confidence, classify_status
from resolution.types import TrackResolution


def test_empty_resolution_scores_zero_and_needs_review() -> None:
    resolution = TrackResolution()
    assert calculate_confidence(resolution) == 0.0
    assert classify_status(0.0) == "needs_review"


def test_isrc_only_is_partial() -> None:
    resolution = TrackResolution(isrc="USABC1234567", resolver_sources=["acrcloud"])
    confidence = calculate_confidence(resolution)
    assert confidence == 0.55
    assert classify_status(confidence) == "partial"


def test_isrc_and_spotify_id_is_resolved() -> None:
    resolution = TrackResolution(
        isrc="USABC1234567",
        spotify_track_id="sp1",
        resolver_sources=["acrcloud"],
    )
    confidence = calculate_confidence(resolution)
    assert confidence == 0.8
    assert classify_status(confidence) == "resolved"


def test_everything_present_is_capped_at_one() -> None:
    resolution = TrackResolution(
        isrc="USABC1234567",
        spotify_track_id="sp1",
        apple_music_id="am1",
        resolver_sources=["acrcloud", "spotify"],
    )
    assert calculate_confidence(resolution) == 1.0


def test_multi_source_bonus_counts_distinct_sources_only() -> None:
    single = TrackResolution(isrc="X", resolver_sources=["spotify", "spotify"])
    double = TrackResolution(isrc="X", resolver_sources=["acrcloud", "spotify"])
    assert calculate_confidence(single) == 0.55
    assert calculate_confidence(double) == 0.65


def test_score_ignores_non_identifier_fields() -> None:
    resolution = TrackResolution(
        title="Song",
        artist="Artist",
        spotify_url="https://open.spotify.com/track/sp1",
        resolver_sources=["spotify"],
    )
    assert calculate_confidence(resolution) == 0.0


@pytest.mark.parametrize(
    "confidence, expected",
    [
        (1.0, "resolved"),
        (0.75, "resolved"),
        (0.7499, "partial"),
        (0.5, "partial"),
        (0.4999, "needs_review"),
        (0.0, "needs_review"),
    ],
)
def test_status_thresholds(confidence, expected) -> None:
    assert classify_status(confidence) == expected

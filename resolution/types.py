"""Structured types for track identity resolution."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field, fields
from typing import Any, Literal, Optional

ResolutionStatus = Literal["resolved", "partial", "needs_review"]
ResolverPath = Literal["cache", "acrcloud_only", "acrcloud_then_search", "search_only"]
FallbackReason = Literal["no_match", "low_confidence", "missing_platform_ids"]

SOURCE_ACRCLOUD = "acrcloud"
SOURCE_SPOTIFY = "spotify"
SOURCE_APPLE_MUSIC = "apple_music"

# Fields a source adapter may contribute; outcome fields are owned by the pipeline.
CONTRIBUTED_FIELDS = (
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
)

METADATA_FIELDS = ("title", "artist", "album")


class ResolutionContractError(TypeError):
    """Raised when a collaborator returns a shape that violates its contract."""


@dataclass
class ResolveInput:
    isrc: Optional[str] = None
    spotify_url: Optional[str] = None
    spotify_track_id: Optional[str] = None
    apple_music_url: Optional[str] = None
    apple_music_id: Optional[str] = None
    acrid: Optional[str] = None
    query: Optional[str] = None  # free text, usually "artist title"
    title: Optional[str] = None
    artist: Optional[str] = None
    force_search_fallback: bool = False

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "ResolveInput":
        """Build an input from a loose mapping, ignoring unknown keys and blank strings."""
        known = {f.name for f in fields(cls)}
        values: dict[str, Any] = {}
        for key, value in (payload or {}).items():
            if key not in known:
                continue
            if key == "force_search_fallback":
                values[key] = _flag(value)
                continue
            text = str(value).strip() if value is not None else ""
            if text:
                values[key] = text
        return cls(**values)

    def text_query(self) -> Optional[str]:
        """Return the free-text query, or ``"artist title"`` when both are present."""
        if self.query and self.query.strip():
            return self.query.strip()
        if self.title and self.artist:
            return f"{self.artist} {self.title}".strip()
        return None


@dataclass
class PartialResolution:
    """One source adapter's normalized contribution."""

    resolver_sources: list[str]
    isrc: Optional[str] = None
    title: Optional[str] = None
    artist: Optional[str] = None
    album: Optional[str] = None
    duration_ms: Optional[int] = None
    spotify_track_id: Optional[str] = None
    spotify_url: Optional[str] = None
    apple_music_id: Optional[str] = None
    apple_music_url: Optional[str] = None
    youtube_url: Optional[str] = None
    deezer_url: Optional[str] = None
    acrid: Optional[str] = None
    acrcloud_raw: Optional[dict[str, Any]] = None

    def __post_init__(self) -> None:
        if not self.resolver_sources:
            raise ValueError("resolver_sources must name at least one source")


@dataclass
class TrackResolution:
    isrc: Optional[str] = None
    title: Optional[str] = None
    artist: Optional[str] = None
    album: Optional[str] = None
    duration_ms: Optional[int] = None

    spotify_track_id: Optional[str] = None
    spotify_url: Optional[str] = None
    apple_music_id: Optional[str] = None
    apple_music_url: Optional[str] = None
    youtube_url: Optional[str] = None
    deezer_url: Optional[str] = None

    acrid: Optional[str] = None
    acrcloud_raw: Optional[dict[str, Any]] = None

    resolver_sources: list[str] = field(default_factory=list)
    confidence: float = 0.0
    status: ResolutionStatus = "needs_review"
    resolver_path: Optional[ResolverPath] = None
    fallback_reason: Optional[FallbackReason] = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "TrackResolution":
        """Rebuild a stored resolution; missing outcome fields fall back to their defaults."""
        known = {f.name for f in fields(cls)}
        values = {key: value for key, value in (payload or {}).items() if key in known}
        values["resolver_sources"] = list(values.get("resolver_sources") or [])
        values["confidence"] = float(values.get("confidence") or 0.0)
        values["status"] = values.get("status") or "needs_review"
        return cls(**values)


def _flag(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return bool(value)


__all__ = [
    "CONTRIBUTED_FIELDS",
    "FallbackReason",
    "METADATA_FIELDS",
    "PartialResolution",
    "ResolutionContractError",
    "ResolutionStatus",
    "ResolveInput",
    "ResolverPath",
    "SOURCE_ACRCLOUD",
    "SOURCE_APPLE_MUSIC",
    "SOURCE_SPOTIFY",
    "TrackResolution",
]

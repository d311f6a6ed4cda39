"""Cross-platform track identity resolution."""

from resolution.resolver import TrackResolver, build_track_resolver, resolve
from resolution.types import PartialResolution, ResolutionContractError, ResolveInput, TrackResolution

__all__ = [
    "PartialResolution",
    "ResolutionContractError",
    "ResolveInput",
    "TrackResolution",
    "TrackResolver",
    "build_track_resolver",
    "resolve",
]

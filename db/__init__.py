"""Database helpers for the track resolver."""

from db.track_resolutions import TrackResolutionStore

__all__ = ["TrackResolutionStore"]

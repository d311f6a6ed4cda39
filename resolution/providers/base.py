from typing import Any, Protocol, runtime_checkable

from resolution.types import PartialResolution, ResolveInput


@runtime_checkable
class CatalogClient(Protocol):
    """Shape shared by the secondary catalog HTTP clients."""

    configured: bool

    def get_by_id(self, track_id: str) -> dict[str, Any] | None:
        raise NotImplementedError

    def search_by_isrc(self, isrc: str) -> dict[str, Any] | None:
        raise NotImplementedError

    def search_by_text(self, query: str) -> dict[str, Any] | None:
        raise NotImplementedError


class PrimaryMetadataSource(Protocol):
    name: str

    def query(self, resolve_input: ResolveInput) -> PartialResolution | None:
        raise NotImplementedError


class SecondaryMetadataSource(Protocol):
    name: str

    def lookup(self, resolve_input: ResolveInput) -> PartialResolution | None:
        raise NotImplementedError

"""Gap-fill merge of source contributions into a running resolution."""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any

from resolution.types import CONTRIBUTED_FIELDS, METADATA_FIELDS, PartialResolution, TrackResolution

_LOG = logging.getLogger(__name__)


def merge_resolution(
    base: TrackResolution,
    addition: PartialResolution,
    preserve_metadata: bool = False,
) -> TrackResolution:
    """Return a new resolution with ``addition`` folded into ``base``.

    Populated fields in ``base`` are never overwritten. With
    ``preserve_metadata`` set, title/artist/album follow the same rule, which
    keeps the primary source's labelling when a fallback search disagrees.
    Source names are appended in order without duplicates.
    """
    updates: dict[str, Any] = {}
    for field_name in CONTRIBUTED_FIELDS:
        value = getattr(addition, field_name)
        if not _has_value(value):
            continue
        if _has_value(getattr(base, field_name)):
            if preserve_metadata and field_name in METADATA_FIELDS and value != getattr(base, field_name):
                _LOG.debug(
                    "merge_preserved field=%s kept=%r offered=%r source=%s",
                    field_name,
                    getattr(base, field_name),
                    value,
                    ",".join(addition.resolver_sources),
                )
            continue
        updates[field_name] = value

    sources = list(base.resolver_sources)
    for source in addition.resolver_sources:
        if source and source not in sources:
            sources.append(source)
    updates["resolver_sources"] = sources

    _LOG.info(
        "merge_resolution sources=%s filled=%s preserve_metadata=%s",
        ",".join(addition.resolver_sources),
        ",".join(sorted(key for key in updates if key != "resolver_sources")) or "-",
        preserve_metadata,
    )
    return replace(base, **updates)


def _has_value(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    if isinstance(value, (list, dict)):
        return len(value) > 0
    return bool(value)

"""Address-space algorithms: contribution lookup and overlap resolution."""

from __future__ import annotations

from .extents import (
    EVENT_CLOSE,
    EVENT_OPEN,
    AttributedSpan,
    ExtentEvent,
    ExtentInvariantError,
    ResolvedExtents,
    build_events,
    fill_missing_ranges,
    resolve_extents,
)
from .range_index import RangeIndex, SectionContribution, classify_section

__all__ = [
    "SectionContribution",
    "RangeIndex",
    "classify_section",
    "EVENT_OPEN",
    "EVENT_CLOSE",
    "ExtentEvent",
    "AttributedSpan",
    "ResolvedExtents",
    "ExtentInvariantError",
    "build_events",
    "resolve_extents",
    "fill_missing_ranges",
]

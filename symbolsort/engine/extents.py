"""Overlap removal for address-range symbols.

``resolve_extents`` sweeps open/close events in address order and gives every
byte to the most-preferred symbol covering it. Preference is list order:
ingestion appends the most authoritative listing first. Lower-preference
symbols shrink by the bytes they lose, and gaps can be filled with synthetic
unmapped symbols.

``fill_missing_ranges`` is the cheaper variant that only adds gap fillers.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, replace

from ..model.types import SYMBOL_FLAG_WEAK, Symbol, unmapped_symbol
from ..progress import ProgressCallback, ProgressReporter

logger = logging.getLogger(__name__)

EVENT_OPEN = 0
EVENT_CLOSE = 1


class ExtentInvariantError(ValueError):
    """Symbol list cannot be resolved into disjoint extents."""

    def __init__(self, message: str, symbol: Symbol, address: int) -> None:
        super().__init__(f"{message}: {symbol.name!r} at 0x{address:x}")
        self.symbol = symbol
        self.address = address


@dataclass(frozen=True)
class ExtentEvent:
    """Open or close boundary of the symbol at position ``rank``."""

    location: int
    kind: int
    rank: int

    def sort_key(self) -> tuple[int, int, int]:
        return (self.location, self.kind, self.rank)


@dataclass(frozen=True)
class AttributedSpan:
    """Address span ``[start, end)`` attributed to exactly one symbol."""

    start: int
    end: int
    symbol: Symbol

    @property
    def size(self) -> int:
        return self.end - self.start


@dataclass(frozen=True)
class ResolvedExtents:
    """Resolver output: sized symbols plus the disjoint attribution behind them."""

    symbols: list[Symbol]
    spans: list[AttributedSpan]
    fillers: list[Symbol]


def build_events(symbols: Sequence[Symbol]) -> list[ExtentEvent]:
    """Return the sorted open/close events for ``symbols``.

    At one location opens come before closes, and within a kind earlier
    symbols come first.
    """
    events: list[ExtentEvent] = []
    for rank, symbol in enumerate(symbols):
        events.append(ExtentEvent(symbol.rva_start, EVENT_OPEN, rank))
        events.append(ExtentEvent(symbol.rva_end, EVENT_CLOSE, rank))
    events.sort(key=ExtentEvent.sort_key)
    return events


def resolve_extents(
    symbols: Sequence[Symbol],
    fill_gaps: bool = False,
    progress: ProgressCallback | None = None,
) -> ResolvedExtents:
    """Remove overlap between ``symbols`` given in priority order.

    Each span covered by several symbols is charged to the earliest one; the
    others shrink by the span length. With ``fill_gaps`` every uncovered span
    between the first start and last end becomes an unmapped filler. Without
    it, weak symbols that resolve to zero bytes are dropped.

    Raises ``ExtentInvariantError`` when a close event has no matching open
    symbol or a resolved size goes negative.
    """
    events = build_events(symbols)
    reporter = ProgressReporter("Resolving overlapping symbols", len(events), progress)
    shrink = [0] * len(symbols)
    open_ranks: set[int] = set()
    preferred: int | None = None
    owner_spans: list[tuple[int, int, int]] = []
    filler_spans: list[tuple[int, int]] = []
    last_location: int | None = None

    for done, event in enumerate(events, start=1):
        if last_location is not None and event.location > last_location:
            span_size = event.location - last_location
            if preferred is None:
                if fill_gaps:
                    filler_spans.append((last_location, event.location))
            else:
                for rank in open_ranks:
                    if rank != preferred:
                        shrink[rank] += span_size
                owner_spans.append((last_location, event.location, preferred))
        last_location = event.location

        if event.kind == EVENT_OPEN:
            open_ranks.add(event.rank)
            if preferred is None or event.rank < preferred:
                preferred = event.rank
        else:
            if event.rank not in open_ranks:
                raise ExtentInvariantError(
                    "close event without a matching open symbol",
                    symbols[event.rank],
                    event.location,
                )
            open_ranks.remove(event.rank)
            if event.rank == preferred:
                preferred = min(open_ranks) if open_ranks else None
        reporter.update(done)
    reporter.finish()

    resolved: list[Symbol] = []
    for rank, symbol in enumerate(symbols):
        size = symbol.size - shrink[rank]
        if size < 0:
            raise ExtentInvariantError("negative resolved size", symbol, symbol.rva_start)
        if size != symbol.size:
            symbol = replace(symbol, size=size)
        resolved.append(symbol)

    spans = [AttributedSpan(start, end, resolved[rank]) for start, end, rank in owner_spans]
    fillers = [unmapped_symbol(start, end) for start, end in filler_spans]
    spans.extend(AttributedSpan(filler.rva_start, filler.rva_end, filler) for filler in fillers)
    spans.sort(key=lambda span: span.start)

    if fill_gaps:
        output = resolved + fillers
    else:
        output = [symbol for symbol in resolved if not (symbol.flags & SYMBOL_FLAG_WEAK and symbol.size == 0)]
        pruned = len(resolved) - len(output)
        if pruned:
            logger.debug("Dropped %d redundant weak symbols", pruned)

    logger.debug(
        "Resolved %d symbols into %d spans with %d unmapped fillers",
        len(symbols),
        len(spans),
        len(fillers),
    )
    return ResolvedExtents(symbols=output, spans=spans, fillers=fillers)


def fill_missing_ranges(
    symbols: Sequence[Symbol],
    progress: ProgressCallback | None = None,
) -> list[Symbol]:
    """Append unmapped fillers for address gaps without shrinking anything.

    Symbols are visited by ``(rva_start, name)`` while a high-water mark
    tracks the furthest end seen so far.
    """
    ordered = sorted(symbols, key=lambda symbol: (symbol.rva_start, symbol.name))
    reporter = ProgressReporter("Filling unmapped ranges", len(ordered), progress)
    fillers: list[Symbol] = []
    high_water_mark: int | None = None
    for done, symbol in enumerate(ordered, start=1):
        if high_water_mark is not None and symbol.rva_start > high_water_mark:
            fillers.append(unmapped_symbol(high_water_mark, symbol.rva_start))
        if high_water_mark is None or symbol.rva_end > high_water_mark:
            high_water_mark = symbol.rva_end
        reporter.update(done)
    reporter.finish()
    return list(symbols) + fillers

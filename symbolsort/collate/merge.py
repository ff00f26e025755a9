"""Collation of symbols into merged totals and the orders used to show them.

Buckets only ever accumulate sums, so feeding a current set plus a negated
basis set through ``collate`` yields net differences per key.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Sequence

from ..model.types import MergedSymbol, Symbol
from ..progress import ProgressCallback, ProgressReporter
from .names import KeyFunction


def collate(
    symbols: Sequence[Symbol],
    key_fn: KeyFunction,
    progress: ProgressCallback | None = None,
    stage: str = "Collating symbols",
) -> list[MergedSymbol]:
    """Group ``symbols`` under every key ``key_fn`` yields for them.

    A symbol contributes its ``count`` and ``size`` once per key it maps to
    and is skipped when it maps to none. Buckets come back in first-seen order.
    """
    reporter = ProgressReporter(stage, len(symbols), progress)
    buckets: dict[str, MergedSymbol] = {}
    merged: list[MergedSymbol] = []
    for done, symbol in enumerate(symbols, start=1):
        for key in key_fn(symbol):
            bucket = buckets.get(key)
            if bucket is None:
                bucket = MergedSymbol(id=key)
                buckets[key] = bucket
                merged.append(bucket)
            bucket.add(symbol)
        reporter.update(done)
    reporter.finish()
    return merged


def count_order_key(item: MergedSymbol) -> tuple[int, int, str]:
    return (-item.total_count, -item.total_size, item.id)


def size_order_key(item: MergedSymbol) -> tuple[int, int, str]:
    return (-item.total_size, -item.total_count, item.id)


def sort_by_count(merged: Iterable[MergedSymbol]) -> list[MergedSymbol]:
    """Total count descending, then total size descending, then key."""
    return sorted(merged, key=count_order_key)


def sort_by_size(merged: Iterable[MergedSymbol]) -> list[MergedSymbol]:
    """Total size descending, then total count descending, then key."""
    return sorted(merged, key=size_order_key)


def _field(item: MergedSymbol, field: str) -> int:
    if field == "count":
        return item.total_count
    if field == "size":
        return item.total_size
    raise ValueError(f"unknown merge field: {field!r}")


def increases(ordered: Sequence[MergedSymbol], field: str) -> Iterator[MergedSymbol]:
    """Yield entries whose ``field`` total grew, in the given descending order."""
    for item in ordered:
        if _field(item, field) > 0:
            yield item


def decreases(ordered: Sequence[MergedSymbol], field: str) -> Iterator[MergedSymbol]:
    """Yield entries whose ``field`` total shrank, largest decrease first.

    ``ordered`` is the same descending list used for ``increases``; walking it
    backwards puts the most negative totals first.
    """
    for item in reversed(ordered):
        if _field(item, field) < 0:
            yield item


def repeated(ordered: Iterable[MergedSymbol]) -> Iterator[MergedSymbol]:
    """Yield entries that merged something other than exactly one symbol."""
    for item in ordered:
        if item.total_count != 1:
            yield item

"""Plain-text report writer.

Produces the raw symbol listing, folder contributions and every merged view
for one symbol set. Difference runs (negated basis symbols mixed in) print
increases and decreases instead of plain sorted lists.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import TextIO

from ..collate.folders import FolderStats, PathReplacement, rollup_folders, rows_by_path, rows_by_size
from ..collate.merge import collate, decreases, increases, repeated, sort_by_count, sort_by_size
from ..collate.names import MERGE_VIEWS, MergeView
from ..model.types import MergedSymbol, Symbol, format_symbol_flags, total_count, total_size
from ..progress import ProgressCallback

logger = logging.getLogger(__name__)

DEFAULT_MAX_COUNT = 500
SEPARATOR_LINE = "-" * 38
SYMBOL_NAME_WIDTH = 120


@dataclass(frozen=True)
class ReportOptions:
    max_count: int = DEFAULT_MAX_COUNT
    show_differences: bool = False
    complete: bool = False
    path_replacements: tuple[PathReplacement, ...] = ()


def _line(writer: TextIO, text: str = "") -> None:
    writer.write(text + "\n")


def _limited(items: Iterable, max_count: int) -> Iterable:
    for idx, item in enumerate(items):
        if idx >= max_count:
            return
        yield item


def write_symbol_list(writer: TextIO, symbols: Iterable[Symbol], max_count: int) -> None:
    _line(writer, f"{'Size':>12} {'Section/Type':>12}  {'Name':<{SYMBOL_NAME_WIDTH}}  Source")
    for symbol in _limited(symbols, max_count):
        _line(
            writer,
            f"{symbol.size:>12} {symbol.section:>12}  {symbol.name:<{SYMBOL_NAME_WIDTH}}  {symbol.source_filename}",
        )
    _line(writer)


def write_address_list(writer: TextIO, symbols: Sequence[Symbol]) -> None:
    """Every symbol by start address, fillers included, without a row limit."""
    ordered = sorted(symbols, key=lambda symbol: (symbol.rva_start, symbol.rva_end, symbol.name))
    _line(writer, f"{'Address':>12} {'Size':>12} {'Section/Type':>12}  {'Name':<{SYMBOL_NAME_WIDTH}}  Flags")
    for symbol in ordered:
        _line(
            writer,
            f"{symbol.rva_start:>12x} {symbol.size:>12} {symbol.section:>12}  "
            f"{symbol.name:<{SYMBOL_NAME_WIDTH}}  {format_symbol_flags(symbol.flags)}",
        )
    _line(writer)


def write_merged_list(writer: TextIO, merged: Iterable[MergedSymbol], max_count: int) -> None:
    _line(writer, f"{'Total Size':>12} {'Total Count':>12}  Name")
    for item in _limited(merged, max_count):
        _line(writer, f"{item.total_size:>12} {item.total_count:>12}  {item.id}")
    _line(writer)


def write_folder_list(writer: TextIO, rows: Iterable[FolderStats], max_count: int) -> None:
    _line(writer, f"{'Size':>12}{'Count':>8}  Source Path")
    for row in _limited(rows, max_count):
        _line(writer, f"{row.size:>12}{row.count:>8}  {row.label}")
    _line(writer)


def write_raw_symbols(writer: TextIO, symbols: Sequence[Symbol], options: ReportOptions) -> None:
    if options.show_differences:
        _line(writer, "Raw Symbols Differences")
    else:
        _line(writer, "Raw Symbols")
    _line(writer, f"Total Count : {total_count(symbols)}")
    _line(writer, f"Total Size  : {total_size(symbols)}")
    if options.show_differences:
        _line(writer)
        return
    _line(writer, SEPARATOR_LINE)
    _line(writer, "Sorted by Size")
    write_symbol_list(writer, sorted(symbols, key=lambda symbol: -symbol.size), options.max_count)
    if options.complete:
        _line(writer, "Sorted by Address")
        write_address_list(writer, symbols)


def write_folder_stats(
    writer: TextIO,
    symbols: Sequence[Symbol],
    options: ReportOptions,
    progress: ProgressCallback | None = None,
) -> None:
    logger.info("Building folder stats...")
    stats = rollup_folders(symbols, options.path_replacements, progress=progress)
    by_size = rows_by_size(stats)

    _line(writer, "File Contributions")
    _line(writer, SEPARATOR_LINE)
    if options.show_differences:
        _line(writer, "Increases in Size")
        write_folder_list(
            writer,
            (row for row in by_size if not row.single_child and row.size > 0),
            options.max_count,
        )
        _line(writer, "Decreases in Size")
        write_folder_list(
            writer,
            (row for row in reversed(by_size) if not row.single_child and row.size < 0),
            options.max_count,
        )
    else:
        _line(writer, "Sorted by Size")
        write_folder_list(writer, (row for row in by_size if not row.single_child), options.max_count)

    _line(writer, "Sorted by Path")
    _line(writer, f"{'Size':>12}{'Count':>8}  Source Path")
    for row in rows_by_path(stats):
        if row.size != 0 or row.count != 0:
            _line(writer, f"{row.size:>12}{row.count:>8}  {row.label}")
    _line(writer)


def write_merged_view(
    writer: TextIO,
    symbols: Sequence[Symbol],
    view: MergeView,
    options: ReportOptions,
    progress: ProgressCallback | None = None,
) -> None:
    logger.info("%s...", view.progress_label)
    merged = collate(symbols, view.key_fn, progress=progress, stage=view.progress_label)

    _line(writer, view.title)
    _line(writer, f"Merged Count  : {len(merged)}")
    _line(writer, SEPARATOR_LINE)

    by_count = sort_by_count(merged)
    if options.show_differences:
        _line(writer, "Increases in Total Count")
        write_merged_list(writer, increases(by_count, "count"), options.max_count)
        _line(writer, "Decreases in Total Count")
        write_merged_list(writer, decreases(by_count, "count"), options.max_count)
    else:
        _line(writer, "Sorted by Total Count")
        write_merged_list(writer, repeated(by_count), options.max_count)

    by_size = sort_by_size(merged)
    if options.show_differences:
        _line(writer, "Increases in Total Size")
        write_merged_list(writer, increases(by_size, "size"), options.max_count)
        _line(writer, "Decreases in Total Size")
        write_merged_list(writer, decreases(by_size, "size"), options.max_count)
    else:
        _line(writer, "Sorted by Total Size")
        write_merged_list(writer, repeated(by_size), options.max_count)
    _line(writer)


def write_report(
    writer: TextIO,
    symbols: Sequence[Symbol],
    options: ReportOptions,
    views: Sequence[MergeView] = MERGE_VIEWS,
    progress: ProgressCallback | None = None,
) -> None:
    """Write the full report for ``symbols`` to ``writer``."""
    logger.info("Processing raw symbols...")
    write_raw_symbols(writer, symbols, options)
    write_folder_stats(writer, symbols, options, progress=progress)
    for view in views:
        write_merged_view(writer, symbols, view, options, progress=progress)

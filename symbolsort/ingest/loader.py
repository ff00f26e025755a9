"""Input loading: format dispatch, path cleanup and per-input resolution.

Every input file, and every object inside a multi-object nm listing, is its
own address space, so overlap resolution runs per address space before
difference inputs are negated and everything is concatenated.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, replace
from pathlib import Path

from ..engine.extents import fill_missing_ranges, resolve_extents
from ..engine.range_index import RangeIndex
from ..model.difference import combine_with_basis
from ..model.types import SYMBOL_FLAG_WEAK, Symbol
from ..progress import ProgressCallback
from .comdat import DUMP_OF_FILE_PREFIX, SECTION_HEADER_PREFIX, parse_comdat_lines
from .nm import parse_bsd_line, parse_nm_groups
from .paths import clean_source_paths
from .sections import classify_symbols, section_symbols

logger = logging.getLogger(__name__)

INPUT_AUTO = "auto"
INPUT_BSD = "bsd"
INPUT_SYSV = "sysv"
INPUT_COMDAT = "comdat"
INPUT_KINDS = (INPUT_AUTO, INPUT_BSD, INPUT_SYSV, INPUT_COMDAT)
ADDRESS_INPUT_KINDS = frozenset({INPUT_BSD, INPUT_SYSV})

RESOLVE_EXACT = "exact"
RESOLVE_FAST = "fast"
RESOLVE_NONE = "none"
RESOLVE_MODES = (RESOLVE_EXACT, RESOLVE_FAST, RESOLVE_NONE)

DETECT_SAMPLE_LINES = 64


class InputFormatError(ValueError):
    """An input file's format is unknown or cannot be detected."""


@dataclass(frozen=True)
class InputFile:
    path: Path
    kind: str = INPUT_AUTO


@dataclass(frozen=True)
class LoadOptions:
    """Knobs shared by every input of one run."""

    resolve_mode: str = RESOLVE_EXACT
    fill_gaps: bool = False
    sections: RangeIndex | None = None
    include_sections: bool = False


def read_text(path: Path) -> str:
    """Read text as UTF-8, dropping a leading byte-order mark, else latin-1."""
    try:
        return path.read_text(encoding="utf-8-sig")
    except UnicodeDecodeError:
        return path.read_text(encoding="latin-1")


def detect_input_kind(lines: Sequence[str]) -> str:
    """Guess the listing format from the first non-empty lines."""
    sample = [line for line in lines[: DETECT_SAMPLE_LINES * 4] if line.strip()][:DETECT_SAMPLE_LINES]
    if any(line.startswith((DUMP_OF_FILE_PREFIX, SECTION_HEADER_PREFIX)) for line in sample):
        return INPUT_COMDAT
    if any(line.count("|") >= 6 for line in sample):
        return INPUT_SYSV
    if any(parse_bsd_line(line) is not None for line in sample):
        return INPUT_BSD
    raise InputFormatError("cannot detect symbol listing format; pass an explicit input type")


def prioritize(symbols: Sequence[Symbol]) -> list[Symbol]:
    """Order strong listings before weak ones, keeping file order otherwise."""
    strong = [symbol for symbol in symbols if not symbol.flags & SYMBOL_FLAG_WEAK]
    weak = [symbol for symbol in symbols if symbol.flags & SYMBOL_FLAG_WEAK]
    return strong + weak


def resolve_symbols(
    symbols: Sequence[Symbol],
    options: LoadOptions,
    progress: ProgressCallback | None = None,
) -> list[Symbol]:
    if options.resolve_mode == RESOLVE_NONE:
        return list(symbols)
    if options.resolve_mode == RESOLVE_FAST:
        logger.info("Filling unmapped ranges...")
        return fill_missing_ranges(symbols, progress=progress)
    if options.resolve_mode == RESOLVE_EXACT:
        logger.info("Subtracting overlapping symbols...")
        return resolve_extents(symbols, fill_gaps=options.fill_gaps, progress=progress).symbols
    raise ValueError(f"unknown resolve mode: {options.resolve_mode!r}")


def load_symbols(
    input_file: InputFile,
    options: LoadOptions | None = None,
    progress: ProgressCallback | None = None,
) -> list[Symbol]:
    """Load, clean and resolve the symbols of one input file."""
    options = options or LoadOptions()
    lines = read_text(input_file.path).splitlines()
    kind = input_file.kind
    if kind == INPUT_AUTO:
        kind = detect_input_kind(lines)
    elif kind not in INPUT_KINDS:
        raise InputFormatError(f"unknown input type: {kind!r}")

    logger.info("Loading symbols from %s (%s)", input_file.path, kind)
    if kind == INPUT_COMDAT:
        groups = [parse_comdat_lines(lines, total=len(lines), progress=progress)]
    else:
        groups = parse_nm_groups(lines, sysv=kind == INPUT_SYSV, total=len(lines), progress=progress)

    logger.info("Cleaning up paths...")
    cleaned = clean_source_paths([symbol for group in groups for symbol in group])
    groups = _split_like(cleaned, groups)

    if kind not in ADDRESS_INPUT_KINDS:
        return cleaned
    if options.sections is not None and len(groups) > 1:
        logger.warning(
            "%s lists %d separate objects; ignoring the section table for object-relative addresses",
            input_file.path,
            len(groups),
        )
        options = replace(options, sections=None, include_sections=False)

    symbols: list[Symbol] = []
    for group in groups:
        if options.sections is not None:
            group = classify_symbols(group, options.sections)
        group = prioritize(group)
        if options.sections is not None and options.include_sections:
            group.extend(section_symbols(options.sections))
        symbols.extend(resolve_symbols(group, options, progress=progress))
    return symbols


def _split_like(symbols: list[Symbol], groups: list[list[Symbol]]) -> list[list[Symbol]]:
    """Cut ``symbols`` into consecutive runs as long as the lists in ``groups``."""
    split: list[list[Symbol]] = []
    start = 0
    for group in groups:
        split.append(symbols[start : start + len(group)])
        start += len(group)
    return split


def apply_exclusions(symbols: Iterable[Symbol], exclusions: Sequence[str]) -> list[Symbol]:
    """Drop symbols whose name contains any of ``exclusions``."""
    if not exclusions:
        return list(symbols)
    return [symbol for symbol in symbols if not any(exclusion in symbol.name for exclusion in exclusions)]


def load_symbol_set(
    inputs: Sequence[InputFile],
    differences: Sequence[InputFile] = (),
    options: LoadOptions | None = None,
    exclusions: Sequence[str] = (),
    progress: ProgressCallback | None = None,
) -> list[Symbol]:
    """Load all inputs, append negated difference inputs, apply exclusions."""
    symbols: list[Symbol] = []
    for input_file in inputs:
        symbols.extend(load_symbols(input_file, options, progress))
    basis: list[Symbol] = []
    for input_file in differences:
        basis.extend(load_symbols(input_file, options, progress))
    symbols = combine_with_basis(symbols, basis)
    if exclusions:
        logger.info("Removing exclusions...")
        symbols = apply_exclusions(symbols, exclusions)
    return symbols

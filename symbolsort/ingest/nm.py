"""Parsers for ``nm`` symbol listings.

Supports ``nm --format=bsd --print-size [-l]`` and ``nm --format=sysv [-l]``.
Both print hex addresses and sizes; ``-l`` appends ``<TAB>path:line``.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable

from ..model.types import (
    SYMBOL_FLAG_DATA,
    SYMBOL_FLAG_FUNCTION,
    SYMBOL_FLAG_WEAK,
    Symbol,
)
from ..progress import ProgressCallback, ProgressReporter

logger = logging.getLogger(__name__)

NM_UNDEFINED_TYPES = frozenset("U")

_OBJECT_HEADER_RE = re.compile(r"^(?:Symbols from )?(?P<name>[^\s|][^\t|]*):$")

_SECTION_BY_TYPE: dict[str, str] = {
    "t": "code",
    "d": "data",
    "g": "data",
    "b": "bss",
    "s": "bss",
    "r": "rdata",
}


def flags_for_nm_type(symbol_type: str) -> int:
    """Translate an nm type letter into symbol flags."""
    letter = symbol_type.lower()
    if letter == "t":
        return SYMBOL_FLAG_FUNCTION
    if letter in ("d", "g", "b", "s", "r"):
        return SYMBOL_FLAG_DATA
    if letter == "v":
        return SYMBOL_FLAG_WEAK | SYMBOL_FLAG_DATA
    if letter == "w":
        return SYMBOL_FLAG_WEAK
    return 0


def section_for_nm_type(symbol_type: str) -> str:
    """Section label for a bsd type letter; unknown letters pass through."""
    return _SECTION_BY_TYPE.get(symbol_type.lower(), symbol_type)


def _parse_hex(token: str) -> int | None:
    try:
        return int(token, 16)
    except ValueError:
        return None


def parse_bsd_line(line: str) -> Symbol | None:
    """Parse one ``address size type name[<TAB>source]`` line.

    The address and size columns are absent for undefined symbols; a column
    is treated as present when its token is longer than one character.
    """
    tokens = line.split(None, 1)
    if len(tokens) < 2:
        return None

    rva = 0
    if len(tokens[0]) > 1:
        parsed = _parse_hex(tokens[0])
        if parsed is None:
            return None
        rva = parsed
        tokens = tokens[1].split(None, 1)
        if len(tokens) < 2:
            return None

    size = 0
    if len(tokens[0]) > 1:
        size = _parse_hex(tokens[0]) or 0
        tokens = tokens[1].split(None, 1)
        if len(tokens) < 2:
            return None

    symbol_type = tokens[0]
    if symbol_type in NM_UNDEFINED_TYPES:
        return None
    fields = [field for field in tokens[1].split("\t") if field.strip()]
    if not fields:
        return None
    name = fields[0].strip()
    source_filename = fields[1].strip() if len(fields) > 1 else ""
    return Symbol.at(
        rva,
        size,
        name,
        section=section_for_nm_type(symbol_type),
        source_filename=source_filename,
        flags=flags_for_nm_type(symbol_type),
    )


def parse_sysv_line(line: str) -> Symbol | None:
    """Parse one ``name|value|class|type|size|line|section`` row."""
    tokens = line.split("|", 6)
    if len(tokens) < 7:
        return None

    symbol_class = tokens[2].strip()
    if symbol_class in NM_UNDEFINED_TYPES:
        return None
    rva = 0
    if tokens[1].strip():
        parsed = _parse_hex(tokens[1].strip())
        if parsed is None:
            return None
        rva = parsed
    size = 0
    if tokens[4].strip():
        size = _parse_hex(tokens[4].strip()) or 0

    fields = [field.strip() for field in tokens[6].split("\t") if field.strip()]
    section = fields[0] if fields else ""
    source_filename = fields[1] if len(fields) > 1 else ""
    return Symbol.at(
        rva,
        size,
        tokens[0].strip(),
        section=section,
        source_filename=source_filename,
        flags=flags_for_nm_type(symbol_class),
    )


def object_header_name(line: str) -> str | None:
    """Return the object named by a per-object header line, else ``None``.

    ``nm`` prints ``file.o:`` (bsd) or ``Symbols from file.o:`` (sysv) before
    each member when listing several objects or an archive.
    """
    match = _OBJECT_HEADER_RE.match(line.strip())
    if match is None:
        return None
    return match.group("name")


def parse_nm_groups(
    lines: Iterable[str],
    sysv: bool,
    total: int = 0,
    progress: ProgressCallback | None = None,
) -> list[list[Symbol]]:
    """Parse a listing into one symbol list per object address space.

    Every object header starts a new group. Symbols before the first header
    form their own group; empty groups are dropped.
    """
    parse_line = parse_sysv_line if sysv else parse_bsd_line
    reporter = ProgressReporter("Reading symbols", total, progress)
    groups: list[list[Symbol]] = [[]]
    skipped = 0
    for done, raw in enumerate(lines, start=1):
        line = raw.rstrip("\r\n")
        if line.strip():
            symbol = parse_line(line)
            header = object_header_name(line) if symbol is None else None
            if symbol is not None:
                groups[-1].append(symbol)
            elif header is not None:
                logger.debug("Starting address space for %s", header)
                groups.append([])
            else:
                skipped += 1
                logger.debug("Skipping nm line: %r", line)
        reporter.update(done)
    reporter.finish()
    if skipped:
        logger.info("Skipped %d nm lines without a defined symbol", skipped)
    return [group for group in groups if group]

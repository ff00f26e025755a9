"""Parser for ``dumpbin /headers`` output of object files.

Each COMDAT section header becomes one point symbol (no address) sized by
its raw data. ``Dump of file`` lines set the source for following records.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Iterator

from ..model.types import SYMBOL_FLAG_DATA, SYMBOL_FLAG_FUNCTION, Symbol
from ..progress import ProgressCallback, ProgressReporter

logger = logging.getLogger(__name__)

DUMP_OF_FILE_PREFIX = "Dump of file "
SECTION_HEADER_PREFIX = "SECTION HEADER"

_NAME_RE = re.compile(r"\n[ \t]*([^ \t]+)[ \t]+name")
_SIZE_RE = re.compile(r"\n[ \t]*([A-Za-z0-9]+)[ \t]+size of raw data")
_COMDAT_RE = re.compile(r'\n[ \t]*COMDAT; sym= "([^\n"]+)')


def flags_for_section_name(section: str) -> int:
    if section.startswith(".text"):
        return SYMBOL_FLAG_FUNCTION
    if section.startswith((".data", ".rdata", ".bss")):
        return SYMBOL_FLAG_DATA
    return 0


def parse_section_header(record: str, source_filename: str) -> Symbol | None:
    """Build a symbol from one section-header record, or ``None`` if not COMDAT.

    ``record`` holds the header body with every line prefixed by a newline.
    """
    comdat = _COMDAT_RE.search(record)
    if comdat is None:
        return None
    size_match = _SIZE_RE.search(record)
    if size_match is None:
        return None
    try:
        size = int(size_match.group(1), 16)
    except ValueError:
        return None
    name_match = _NAME_RE.search(record)
    section = name_match.group(1) if name_match is not None else ""
    name = comdat.group(1)
    return Symbol(
        rva_start=0,
        rva_end=0,
        size=size,
        name=name,
        short_name=name,
        section=section,
        source_filename=source_filename,
        flags=flags_for_section_name(section),
    )


def _read_record(lines: Iterator[str]) -> str:
    parts: list[str] = []
    for raw in lines:
        line = raw.rstrip("\r\n")
        if not line:
            break
        parts.append("\n" + line)
    return "".join(parts)


def parse_comdat_lines(
    lines: Iterable[str],
    total: int = 0,
    progress: ProgressCallback | None = None,
) -> list[Symbol]:
    reporter = ProgressReporter("Reading symbols", total, progress)
    symbols: list[Symbol] = []
    current_source = ""
    iterator = iter(lines)
    consumed = 0
    for raw in iterator:
        consumed += 1
        line = raw.rstrip("\r\n")
        if line.startswith(SECTION_HEADER_PREFIX):
            record = _read_record(iterator)
            consumed += record.count("\n") + 1
            symbol = parse_section_header(record, current_source)
            if symbol is not None:
                symbols.append(symbol)
        elif line.startswith(DUMP_OF_FILE_PREFIX):
            current_source = line[len(DUMP_OF_FILE_PREFIX) :].strip()
            logger.debug("Reading COMDATs of %s", current_source)
        reporter.update(consumed)
    reporter.finish()
    return symbols

"""Section table ingestion from ``readelf -S -W`` output.

Allocated sections become ``SectionContribution`` entries owned by the
section name. They classify symbols by address and can be added as
lowest-priority section symbols so untracked bytes show up in reports.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Sequence
from dataclasses import replace

from ..engine.range_index import RangeIndex, SectionContribution, classify_section
from ..model.types import SYMBOL_FLAG_SECTION, SYMBOL_FLAG_WEAK, Symbol

logger = logging.getLogger(__name__)

_SECTION_ROW_RE = re.compile(
    r"^\s*\[\s*\d+\]\s+(?P<name>\S+)\s+(?P<type>\S+)\s+(?P<address>[0-9a-fA-F]+)\s+"
    r"(?P<offset>[0-9a-fA-F]+)\s+(?P<size>[0-9a-fA-F]+)\s+(?P<entsize>[0-9a-fA-F]+)\s+"
    r"(?P<flags>[A-Za-z]*)\s+\d+\s+\d+\s+\d+\s*$"
)


def parse_section_table(lines: Iterable[str]) -> list[SectionContribution]:
    """Parse allocated (``A`` flag) rows of a ``readelf -S -W`` section table."""
    contributions: list[SectionContribution] = []
    for raw in lines:
        match = _SECTION_ROW_RE.match(raw.rstrip("\r\n"))
        if match is None:
            continue
        flags = match.group("flags")
        if "A" not in flags:
            continue
        size = int(match.group("size"), 16)
        if size == 0:
            continue
        contributions.append(
            SectionContribution(
                start_rva=int(match.group("address"), 16),
                length=size,
                owner_id=match.group("name"),
                writable="W" in flags,
                uninitialized=match.group("type") == "NOBITS",
                executable="X" in flags,
            )
        )
    logger.debug("Parsed %d allocated sections", len(contributions))
    return contributions


def classify_symbols(symbols: Sequence[Symbol], index: RangeIndex) -> list[Symbol]:
    """Relabel address-bearing symbols with the class of their containing section.

    Symbols without an address, or whose address falls in a gap, keep the
    section label they were ingested with.
    """
    classified: list[Symbol] = []
    misses = 0
    for symbol in symbols:
        if symbol.rva_end > symbol.rva_start:
            contribution = index.find(symbol.rva_start)
            if contribution is None:
                misses += 1
            else:
                section = classify_section(contribution)
                if section != symbol.section:
                    symbol = replace(symbol, section=section)
        classified.append(symbol)
    if misses:
        logger.debug("%d symbols fall outside every allocated section", misses)
    return classified


def section_symbols(index: RangeIndex) -> list[Symbol]:
    """Whole-section symbols flagged ``SECTION | WEAK`` for padding accounting."""
    return [
        Symbol.at(
            entry.start_rva,
            entry.length,
            str(entry.owner_id),
            section="section",
            flags=SYMBOL_FLAG_SECTION | SYMBOL_FLAG_WEAK,
        )
        for entry in index.entries
    ]

"""Sorted contribution table mapping an address to its owner.

Contributions are built once per input source and queried once per symbol,
so lookups are a binary search over the start addresses.
"""

from __future__ import annotations

import logging
from bisect import bisect_right
from collections.abc import Iterable
from dataclasses import dataclass

from ..progress import ProgressCallback, ProgressReporter

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SectionContribution:
    """Address range ``[start_rva, start_rva + length)`` owned by ``owner_id``."""

    start_rva: int
    length: int
    owner_id: int | str
    writable: bool = False
    uninitialized: bool = False
    executable: bool = False

    @property
    def end_rva(self) -> int:
        return self.start_rva + self.length

    def contains(self, address: int) -> bool:
        return self.start_rva <= address < self.end_rva


class RangeIndex:
    """Immutable lookup table over start-sorted contributions.

    Entries that repeat an earlier entry's start address cannot be told apart
    by a start-keyed search; they are kept aside in ``duplicates`` and the
    first-added entry answers lookups for that start.
    """

    def __init__(
        self,
        entries: list[SectionContribution],
        duplicates: list[SectionContribution],
    ) -> None:
        self._entries = entries
        self._starts = [entry.start_rva for entry in entries]
        self.duplicates = duplicates

    @classmethod
    def build(
        cls,
        contributions: Iterable[SectionContribution],
        progress: ProgressCallback | None = None,
    ) -> RangeIndex:
        """Sort ``contributions`` by start address and build the index."""
        ordered = sorted(contributions, key=lambda entry: entry.start_rva)
        reporter = ProgressReporter("Building range index", len(ordered), progress)
        entries: list[SectionContribution] = []
        duplicates: list[SectionContribution] = []
        for done, entry in enumerate(ordered, start=1):
            if entries and entries[-1].start_rva == entry.start_rva:
                duplicates.append(entry)
            else:
                entries.append(entry)
            reporter.update(done)
        reporter.finish()
        if duplicates:
            logger.warning(
                "%d contributions share a start address with an earlier one; first-added entries win",
                len(duplicates),
            )
        return cls(entries, duplicates)

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def entries(self) -> tuple[SectionContribution, ...]:
        return tuple(self._entries)

    def find(self, address: int) -> SectionContribution | None:
        """Return the contribution containing ``address`` or ``None`` for a gap."""
        idx = bisect_right(self._starts, address) - 1
        if idx < 0:
            return None
        entry = self._entries[idx]
        if address < entry.end_rva:
            return entry
        return None


def classify_section(contribution: SectionContribution | None) -> str:
    """Map contribution classification bits to a report section label."""
    if contribution is None:
        return "data"
    if contribution.uninitialized:
        return "bss"
    if contribution.executable:
        return "code"
    if contribution.writable:
        return "data"
    return "rdata"

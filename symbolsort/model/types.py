"""Symbol record datatypes shared by ingestion, engine and report modules."""

from __future__ import annotations

from dataclasses import dataclass

SYMBOL_FLAG_FUNCTION = 1
SYMBOL_FLAG_DATA = 2
SYMBOL_FLAG_THUNK = 4
SYMBOL_FLAG_PUBLIC_SYMBOL = 8
SYMBOL_FLAG_SECTION = 16
SYMBOL_FLAG_UNMAPPED = 32
SYMBOL_FLAG_WEAK = 64

_FLAG_NAMES: tuple[tuple[int, str], ...] = (
    (SYMBOL_FLAG_FUNCTION, "function"),
    (SYMBOL_FLAG_DATA, "data"),
    (SYMBOL_FLAG_THUNK, "thunk"),
    (SYMBOL_FLAG_PUBLIC_SYMBOL, "public"),
    (SYMBOL_FLAG_SECTION, "section"),
    (SYMBOL_FLAG_UNMAPPED, "unmapped"),
    (SYMBOL_FLAG_WEAK, "weak"),
)

UNMAPPED_SYMBOL_NAME = "[unmapped]"
UNMAPPED_SECTION = "unmapped"


@dataclass(frozen=True)
class Symbol:
    """One attributed address range (or addressless point) of size.

    ``rva_end`` equals ``rva_start + size`` for address-range records and
    equals ``rva_start`` for point records such as COMDAT entries, which
    still carry their byte size. ``size`` and ``count`` go negative only in
    the basis half of a difference run.
    """

    rva_start: int
    rva_end: int
    size: int
    name: str
    short_name: str = ""
    section: str = ""
    source_filename: str = ""
    flags: int = 0
    count: int = 1

    @classmethod
    def at(
        cls,
        rva: int,
        size: int,
        name: str,
        short_name: str | None = None,
        section: str = "",
        source_filename: str = "",
        flags: int = 0,
    ) -> Symbol:
        """Build an address-range symbol covering ``[rva, rva + size)``."""
        return cls(
            rva_start=rva,
            rva_end=rva + size,
            size=size,
            name=name,
            short_name=name if short_name is None else short_name,
            section=section,
            source_filename=source_filename,
            flags=flags,
        )

    def has_flag(self, flag: int) -> bool:
        return bool(self.flags & flag)

    @property
    def is_weak(self) -> bool:
        return self.has_flag(SYMBOL_FLAG_WEAK)

    @property
    def is_unmapped(self) -> bool:
        return self.has_flag(SYMBOL_FLAG_UNMAPPED)


@dataclass
class MergedSymbol:
    """Aggregation bucket keyed by one merge key.

    Owned by a single collation pass; totals only ever grow by addition so
    difference runs net out correctly.
    """

    id: str
    total_count: int = 0
    total_size: int = 0

    def add(self, symbol: Symbol) -> None:
        self.total_count += symbol.count
        self.total_size += symbol.size


def unmapped_symbol(start: int, end: int) -> Symbol:
    """Synthesize a filler symbol covering ``[start, end)``."""
    return Symbol(
        rva_start=start,
        rva_end=end,
        size=end - start,
        name=UNMAPPED_SYMBOL_NAME,
        short_name=UNMAPPED_SYMBOL_NAME,
        section=UNMAPPED_SECTION,
        flags=SYMBOL_FLAG_UNMAPPED,
    )


def format_symbol_flags(flags: int) -> str:
    """Render a flag set as a comma-separated label list (``""`` when empty)."""
    return ",".join(label for flag, label in _FLAG_NAMES if flags & flag)


def total_size(symbols: list[Symbol]) -> int:
    return sum(symbol.size for symbol in symbols)


def total_count(symbols: list[Symbol]) -> int:
    return sum(symbol.count for symbol in symbols)

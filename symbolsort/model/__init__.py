"""Symbol record model and difference helpers."""

from __future__ import annotations

from .difference import combine_with_basis, negate
from .types import (
    SYMBOL_FLAG_DATA,
    SYMBOL_FLAG_FUNCTION,
    SYMBOL_FLAG_PUBLIC_SYMBOL,
    SYMBOL_FLAG_SECTION,
    SYMBOL_FLAG_THUNK,
    SYMBOL_FLAG_UNMAPPED,
    SYMBOL_FLAG_WEAK,
    UNMAPPED_SECTION,
    UNMAPPED_SYMBOL_NAME,
    MergedSymbol,
    Symbol,
    format_symbol_flags,
    total_count,
    total_size,
    unmapped_symbol,
)

__all__ = [
    "Symbol",
    "MergedSymbol",
    "SYMBOL_FLAG_FUNCTION",
    "SYMBOL_FLAG_DATA",
    "SYMBOL_FLAG_THUNK",
    "SYMBOL_FLAG_PUBLIC_SYMBOL",
    "SYMBOL_FLAG_SECTION",
    "SYMBOL_FLAG_UNMAPPED",
    "SYMBOL_FLAG_WEAK",
    "UNMAPPED_SECTION",
    "UNMAPPED_SYMBOL_NAME",
    "unmapped_symbol",
    "format_symbol_flags",
    "total_size",
    "total_count",
    "negate",
    "combine_with_basis",
]

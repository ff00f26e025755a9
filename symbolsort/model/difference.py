"""Sign inversion used to build difference reports.

Appending ``negate(basis)`` to the current symbols turns every additive
aggregation downstream into a net-change aggregation.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import replace

from .types import Symbol


def negate(symbols: Iterable[Symbol]) -> list[Symbol]:
    """Return copies of ``symbols`` with ``size`` and ``count`` sign-flipped."""
    return [replace(symbol, size=-symbol.size, count=-symbol.count) for symbol in symbols]


def combine_with_basis(current: Iterable[Symbol], basis: Iterable[Symbol]) -> list[Symbol]:
    """Concatenate ``current`` with the negated ``basis`` set."""
    combined = list(current)
    combined.extend(negate(basis))
    return combined

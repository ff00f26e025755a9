"""Performance budget tests for resolution, lookup and collation paths.

These tests use synthetic large symbol tables with conservative time budgets
so regressions are caught without depending on machine-specific
microbenchmarks.
"""

from __future__ import annotations

import time
import unittest

from symbolsort.collate.folders import rollup_folders
from symbolsort.collate.merge import collate, sort_by_size
from symbolsort.collate.names import overload_key, tag_words_key
from symbolsort.engine.extents import resolve_extents
from symbolsort.engine.range_index import RangeIndex, SectionContribution
from symbolsort.model.types import SYMBOL_FLAG_WEAK, Symbol


def _large_symbol_table(count: int) -> list[Symbol]:
    symbols: list[Symbol] = []
    for idx in range(count):
        flags = SYMBOL_FLAG_WEAK if idx % 7 == 0 else 0
        symbols.append(
            Symbol.at(
                idx * 24,
                32 if idx % 3 == 0 else 16,
                f"ns_{idx % 97}::Widget<int, Alloc<{idx % 11}>>::method_{idx % 503}(int, char const*)",
                section="code",
                source_filename=f"/src/module_{idx % 40:02d}/part_{idx % 9}/file_{idx % 211:03d}.cpp",
                flags=flags,
            )
        )
    return symbols


class PerformanceBudgetTests(unittest.TestCase):
    def test_resolve_budget_large_overlapping_table(self) -> None:
        symbols = _large_symbol_table(100_000)

        start = time.perf_counter()
        result = resolve_extents(symbols, fill_gaps=True)
        elapsed = time.perf_counter() - start

        self.assertEqual(sum(symbol.size for symbol in result.symbols), symbols[-1].rva_end)
        self.assertLess(elapsed, 5.0, f"resolve budget exceeded: {elapsed:.3f}s")

    def test_lookup_budget_large_range_index(self) -> None:
        contributions = [SectionContribution(start_rva=idx * 64, length=48, owner_id=idx) for idx in range(50_000)]
        index = RangeIndex.build(contributions)

        start = time.perf_counter()
        hits = sum(1 for address in range(0, 50_000 * 64, 16) if index.find(address) is not None)
        elapsed = time.perf_counter() - start

        self.assertEqual(hits, 50_000 * 3)
        self.assertLess(elapsed, 2.0, f"lookup budget exceeded: {elapsed:.3f}s")

    def test_collation_budget_large_table(self) -> None:
        symbols = _large_symbol_table(60_000)

        start = time.perf_counter()
        overloads = sort_by_size(collate(symbols, overload_key))
        tags = collate(symbols, tag_words_key)
        folders = rollup_folders(symbols)
        elapsed = time.perf_counter() - start

        self.assertEqual(sum(item.total_count for item in overloads), len(symbols))
        self.assertGreater(len(tags), 0)
        self.assertEqual(folders["/"].count, len(symbols))
        self.assertLess(elapsed, 5.0, f"collation budget exceeded: {elapsed:.3f}s")


if __name__ == "__main__":
    unittest.main()

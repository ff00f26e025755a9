"""Tests for input loading, format detection and per-input resolution."""

from __future__ import annotations

import tempfile
import unittest
from pathlib import Path

from symbolsort.engine.range_index import RangeIndex, SectionContribution
from symbolsort.ingest.loader import (
    INPUT_AUTO,
    INPUT_BSD,
    INPUT_COMDAT,
    INPUT_SYSV,
    RESOLVE_FAST,
    RESOLVE_NONE,
    InputFile,
    InputFormatError,
    LoadOptions,
    apply_exclusions,
    detect_input_kind,
    load_symbol_set,
    load_symbols,
    prioritize,
    read_text,
    resolve_symbols,
)
from symbolsort.model.types import SYMBOL_FLAG_SECTION, SYMBOL_FLAG_UNMAPPED, SYMBOL_FLAG_WEAK, Symbol

BSD_LISTING = """\
0000000000001000 0000000000000020 T main\t/src/app/main.c:10
0000000000001020 0000000000000010 W weak_helper\t/src/app/util.h:4
0000000000001020 0000000000000010 t helper\t/src/app/main.c:30
0000000000002000 0000000000000008 D counter\t/src/app/state.c:2
                 U printf
"""

SYSV_LISTING = """\


Symbols from a.out:

Name                  Value           Class        Type         Size             Line  Section

main                |0000000000001000|   T  |              FUNC|0000000000000020|     |.text
puts                |                |   U  |            NOTYPE|                |     |*UND*
"""

COMDAT_LISTING = """\
Dump of file obj\\foo.obj

SECTION HEADER #1
.text$mn name
      2A size of raw data
         COMDAT; sym= "int __cdecl foo(void)" (?foo@@YAHXZ)
"""


MULTI_OBJECT_LISTING = """\
a.o:
0000000000000000 0000000000000040 T alpha

b.o:
0000000000000000 0000000000000040 T beta
"""


def _by_name(symbols: list[Symbol]) -> dict[str, Symbol]:
    return {symbol.name: symbol for symbol in symbols}


class LoaderTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.root = Path(self._tmp.name)

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def write(self, name: str, text: str) -> Path:
        path = self.root / name
        path.write_text(text, encoding="utf-8")
        return path


class DetectInputKindTests(unittest.TestCase):
    def test_detects_each_format(self) -> None:
        self.assertEqual(detect_input_kind(BSD_LISTING.splitlines()), INPUT_BSD)
        self.assertEqual(detect_input_kind(SYSV_LISTING.splitlines()), INPUT_SYSV)
        self.assertEqual(detect_input_kind(COMDAT_LISTING.splitlines()), INPUT_COMDAT)

    def test_unknown_format_raises(self) -> None:
        with self.assertRaises(InputFormatError):
            detect_input_kind(["hello", "world"])
        with self.assertRaises(InputFormatError):
            detect_input_kind([])


class LoadSymbolsTests(LoaderTestCase):
    def test_bsd_listing_is_resolved_and_cleaned(self) -> None:
        path = self.write("app.nm", BSD_LISTING)

        symbols = load_symbols(InputFile(path, INPUT_BSD))

        by_name = _by_name(symbols)
        self.assertEqual(sorted(by_name), ["counter", "helper", "main"])
        self.assertEqual(by_name["helper"].size, 0x10)
        self.assertEqual(by_name["main"].source_filename, "/src/app/main.c")
        self.assertEqual(by_name["counter"].section, "data")

    def test_auto_detection_matches_explicit_kind(self) -> None:
        path = self.write("app.nm", BSD_LISTING)

        self.assertEqual(load_symbols(InputFile(path, INPUT_AUTO)), load_symbols(InputFile(path, INPUT_BSD)))

    def test_complete_mode_adds_unmapped_fillers(self) -> None:
        path = self.write("app.nm", BSD_LISTING)

        symbols = load_symbols(InputFile(path), LoadOptions(fill_gaps=True))

        fillers = [symbol for symbol in symbols if symbol.flags & SYMBOL_FLAG_UNMAPPED]
        self.assertEqual([(filler.rva_start, filler.rva_end) for filler in fillers], [(0x1030, 0x2000)])
        weak = _by_name(symbols)["weak_helper"]
        self.assertEqual(weak.size, 0)

    def test_keep_redundant_leaves_sizes_alone(self) -> None:
        path = self.write("app.nm", BSD_LISTING)

        symbols = load_symbols(InputFile(path), LoadOptions(resolve_mode=RESOLVE_NONE))

        self.assertEqual(_by_name(symbols)["weak_helper"].size, 0x10)
        self.assertEqual(len(symbols), 4)

    def test_sysv_listing(self) -> None:
        path = self.write("app.sysv", SYSV_LISTING)

        symbols = load_symbols(InputFile(path, INPUT_SYSV))

        self.assertEqual([(symbol.name, symbol.size, symbol.section) for symbol in symbols], [("main", 0x20, ".text")])

    def test_comdat_listing_is_not_resolved(self) -> None:
        path = self.write("foo.txt", COMDAT_LISTING)

        (symbol,) = load_symbols(InputFile(path))

        self.assertEqual((symbol.name, symbol.size), ("int __cdecl foo(void)", 0x2A))
        self.assertEqual(symbol.source_filename, "obj/foo.obj")

    def test_section_symbols_expose_padding(self) -> None:
        path = self.write("app.nm", BSD_LISTING)
        index = RangeIndex.build(
            [SectionContribution(0x1000, 0x100, ".text", executable=True), SectionContribution(0x2000, 0x10, ".data", writable=True)]
        )

        symbols = load_symbols(InputFile(path), LoadOptions(sections=index, include_sections=True))

        by_name = _by_name(symbols)
        self.assertEqual(by_name[".text"].size, 0x100 - 0x30)
        self.assertEqual(by_name[".data"].size, 0x8)
        self.assertTrue(by_name[".text"].flags & SYMBOL_FLAG_SECTION)
        self.assertEqual(by_name["main"].section, "code")

    def test_unknown_kind_raises(self) -> None:
        path = self.write("app.nm", BSD_LISTING)

        with self.assertRaises(InputFormatError):
            load_symbols(InputFile(path, "pdb"))

    def test_read_text_falls_back_to_latin1(self) -> None:
        path = self.root / "latin1.nm"
        path.write_bytes("0000000000001000 0000000000000004 T caf\xe9\n".encode("latin-1"))

        self.assertIn("caf\xe9", read_text(path))

    def test_read_text_drops_utf8_byte_order_mark(self) -> None:
        path = self.root / "bom.nm"
        path.write_text("\ufeff0000000000001000 0000000000000004 T first\n", encoding="utf-8")

        self.assertFalse(read_text(path).startswith("\ufeff"))
        self.assertEqual([symbol.name for symbol in load_symbols(InputFile(path))], ["first"])

    def test_each_object_is_its_own_address_space(self) -> None:
        path = self.write("objects.nm", MULTI_OBJECT_LISTING)

        symbols = load_symbols(InputFile(path))

        self.assertEqual({symbol.name: symbol.size for symbol in symbols}, {"alpha": 64, "beta": 64})

    def test_objects_fill_gaps_independently(self) -> None:
        path = self.write(
            "objects.nm",
            "a.o:\n"
            "0000000000000000 0000000000000010 T alpha\n"
            "0000000000000020 0000000000000010 T alpha_tail\n"
            "b.o:\n"
            "0000000000000000 0000000000000010 T beta\n",
        )

        symbols = load_symbols(InputFile(path), LoadOptions(fill_gaps=True))

        fillers = [(symbol.rva_start, symbol.rva_end) for symbol in symbols if symbol.flags & SYMBOL_FLAG_UNMAPPED]
        self.assertEqual(fillers, [(0x10, 0x20)])
        self.assertEqual(_by_name(symbols)["beta"].size, 0x10)

    def test_section_table_is_ignored_for_multiple_objects(self) -> None:
        path = self.write("objects.nm", MULTI_OBJECT_LISTING)
        index = RangeIndex.build([SectionContribution(0, 0x100, ".text", executable=True)])

        with self.assertLogs("symbolsort.ingest.loader", level="WARNING") as logs:
            symbols = load_symbols(InputFile(path), LoadOptions(sections=index, include_sections=True))

        self.assertIn("separate objects", logs.output[0])
        self.assertEqual(sorted(symbol.name for symbol in symbols), ["alpha", "beta"])


class LoadSymbolSetTests(LoaderTestCase):
    def test_difference_against_itself_nets_to_zero(self) -> None:
        path = self.write("app.nm", BSD_LISTING)
        input_file = InputFile(path)

        symbols = load_symbol_set([input_file], [input_file])

        self.assertEqual(sum(symbol.size for symbol in symbols), 0)
        self.assertEqual(sum(symbol.count for symbol in symbols), 0)
        self.assertEqual(len(symbols), 6)

    def test_exclusions_drop_matching_names(self) -> None:
        path = self.write("app.nm", BSD_LISTING)

        symbols = load_symbol_set([InputFile(path)], exclusions=["help"])

        self.assertEqual(sorted(symbol.name for symbol in symbols), ["counter", "main"])

    def test_inputs_concatenate_in_order(self) -> None:
        first = self.write("a.nm", "0000000000001000 0000000000000004 T a\n")
        second = self.write("b.nm", "0000000000001000 0000000000000008 T b\n")

        symbols = load_symbol_set([InputFile(first), InputFile(second)])

        self.assertEqual([(symbol.name, symbol.size) for symbol in symbols], [("a", 4), ("b", 8)])


class ResolutionHelperTests(unittest.TestCase):
    def test_prioritize_moves_weak_symbols_last(self) -> None:
        symbols = [Symbol.at(0, 1, "w1", flags=SYMBOL_FLAG_WEAK), Symbol.at(0, 1, "s1"), Symbol.at(0, 1, "s2")]

        self.assertEqual([symbol.name for symbol in prioritize(symbols)], ["s1", "s2", "w1"])

    def test_fast_fill_only_adds_fillers(self) -> None:
        symbols = [Symbol.at(0, 10, "a"), Symbol.at(5, 10, "b"), Symbol.at(20, 4, "c")]

        resolved = resolve_symbols(symbols, LoadOptions(resolve_mode=RESOLVE_FAST))

        self.assertEqual(resolved[:3], symbols)
        self.assertEqual([(symbol.rva_start, symbol.rva_end) for symbol in resolved[3:]], [(15, 20)])

    def test_unknown_resolve_mode_raises(self) -> None:
        with self.assertRaises(ValueError):
            resolve_symbols([], LoadOptions(resolve_mode="sometimes"))

    def test_apply_exclusions_without_patterns_copies(self) -> None:
        symbols = [Symbol.at(0, 1, "a")]

        result = apply_exclusions(symbols, [])

        self.assertEqual(result, symbols)
        self.assertIsNot(result, symbols)


if __name__ == "__main__":
    unittest.main()

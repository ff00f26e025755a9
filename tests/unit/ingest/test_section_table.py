"""Tests for readelf section-table parsing and section-based classification."""

from __future__ import annotations

import unittest

from symbolsort.engine.range_index import RangeIndex
from symbolsort.ingest.sections import classify_symbols, parse_section_table, section_symbols
from symbolsort.model.types import SYMBOL_FLAG_SECTION, SYMBOL_FLAG_WEAK, Symbol

READELF_OUTPUT = """\
There are 31 section headers, starting at offset 0x3698:

Section Headers:
  [Nr] Name              Type            Address          Off    Size   ES Flg Lk Inf Al
  [ 0]                   NULL            0000000000000000 000000 000000 00      0   0  0
  [ 1] .interp           PROGBITS        0000000000000318 000318 00001c 00   A  0   0  1
  [15] .text             PROGBITS        0000000000001060 001060 000185 00  AX  0   0 16
  [17] .rodata           PROGBITS        0000000000002000 002000 000012 00   A  0   0  4
  [19] .tbss             NOBITS          0000000000003db8 002db8 000000 00 WAT  0   0  4
  [24] .data             PROGBITS        0000000000004000 003000 000010 00  WA  0   0  8
  [25] .bss              NOBITS          0000000000004010 003010 000008 00  WA  0   0  1
  [26] .comment          PROGBITS        0000000000000000 003010 00002b 01  MS  0   0  1
Key to Flags:
  W (write), A (alloc), X (execute), M (merge), S (strings), I (info),
"""


class ParseSectionTableTests(unittest.TestCase):
    def test_only_allocated_non_empty_sections_are_kept(self) -> None:
        contributions = parse_section_table(READELF_OUTPUT.splitlines())

        self.assertEqual([entry.owner_id for entry in contributions], [".interp", ".text", ".rodata", ".data", ".bss"])

    def test_classification_bits(self) -> None:
        by_name = {entry.owner_id: entry for entry in parse_section_table(READELF_OUTPUT.splitlines())}

        text = by_name[".text"]
        self.assertEqual((text.start_rva, text.length), (0x1060, 0x185))
        self.assertTrue(text.executable)
        self.assertFalse(text.writable)
        self.assertTrue(by_name[".data"].writable)
        self.assertTrue(by_name[".bss"].uninitialized)
        self.assertFalse(by_name[".rodata"].uninitialized)


class ClassifySymbolsTests(unittest.TestCase):
    def setUp(self) -> None:
        self.index = RangeIndex.build(parse_section_table(READELF_OUTPUT.splitlines()))

    def test_symbols_take_their_section_class(self) -> None:
        symbols = [
            Symbol.at(0x1139, 0x1D, "main", section="T"),
            Symbol.at(0x2004, 4, "table", section="data"),
            Symbol.at(0x4000, 8, "counter", section="data"),
            Symbol.at(0x4010, 1, "done", section="data"),
        ]

        classified = classify_symbols(symbols, self.index)

        self.assertEqual([symbol.section for symbol in classified], ["code", "rdata", "data", "bss"])

    def test_unmatched_and_addressless_symbols_keep_their_section(self) -> None:
        symbols = [
            Symbol.at(0x9000, 4, "far", section="data"),
            Symbol(0, 0, 12, "comdat", section=".text$mn"),
        ]

        classified = classify_symbols(symbols, self.index)

        self.assertEqual(classified, symbols)

    def test_section_symbols_are_weak_section_records(self) -> None:
        records = section_symbols(self.index)

        self.assertEqual([record.name for record in records], [".interp", ".text", ".rodata", ".data", ".bss"])
        for record in records:
            self.assertEqual(record.flags, SYMBOL_FLAG_SECTION | SYMBOL_FLAG_WEAK)
            self.assertEqual(record.section, "section")
        self.assertEqual((records[1].rva_start, records[1].rva_end), (0x1060, 0x11E5))


if __name__ == "__main__":
    unittest.main()

"""Symbol ingestion from text dumps (nm, dumpbin COMDAT, readelf sections)."""

from __future__ import annotations

from .comdat import parse_comdat_lines, parse_section_header
from .loader import (
    INPUT_AUTO,
    INPUT_BSD,
    INPUT_COMDAT,
    INPUT_KINDS,
    INPUT_SYSV,
    RESOLVE_EXACT,
    RESOLVE_FAST,
    RESOLVE_MODES,
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
from .nm import flags_for_nm_type, object_header_name, parse_bsd_line, parse_nm_groups, parse_sysv_line
from .paths import canonicalize_path, clean_source_paths, is_rooted, strip_line_number
from .sections import classify_symbols, parse_section_table, section_symbols

__all__ = [
    "INPUT_AUTO",
    "INPUT_BSD",
    "INPUT_SYSV",
    "INPUT_COMDAT",
    "INPUT_KINDS",
    "RESOLVE_EXACT",
    "RESOLVE_FAST",
    "RESOLVE_NONE",
    "RESOLVE_MODES",
    "InputFile",
    "InputFormatError",
    "LoadOptions",
    "read_text",
    "detect_input_kind",
    "prioritize",
    "resolve_symbols",
    "load_symbols",
    "load_symbol_set",
    "apply_exclusions",
    "parse_bsd_line",
    "parse_sysv_line",
    "parse_nm_groups",
    "object_header_name",
    "flags_for_nm_type",
    "parse_comdat_lines",
    "parse_section_header",
    "canonicalize_path",
    "clean_source_paths",
    "is_rooted",
    "strip_line_number",
    "parse_section_table",
    "classify_symbols",
    "section_symbols",
]

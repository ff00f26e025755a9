"""Text report rendering for collated symbol sets."""

from __future__ import annotations

from .writer import (
    DEFAULT_MAX_COUNT,
    ReportOptions,
    write_address_list,
    write_folder_list,
    write_folder_stats,
    write_merged_list,
    write_merged_view,
    write_raw_symbols,
    write_report,
    write_symbol_list,
)

__all__ = [
    "DEFAULT_MAX_COUNT",
    "ReportOptions",
    "write_report",
    "write_raw_symbols",
    "write_folder_stats",
    "write_merged_view",
    "write_symbol_list",
    "write_address_list",
    "write_merged_list",
    "write_folder_list",
]

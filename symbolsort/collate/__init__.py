"""Symbol collation: merged views, merge-key strategies and folder rollups."""

from __future__ import annotations

from .folders import (
    PATH_SEPARATOR,
    UNKNOWN_SOURCE_LABEL,
    FolderStats,
    PathReplacement,
    PathReplacementError,
    apply_path_replacements,
    compile_path_replacements,
    parent_folder,
    rollup_folders,
    rows_by_path,
    rows_by_size,
)
from .merge import (
    collate,
    count_order_key,
    decreases,
    increases,
    repeated,
    size_order_key,
    sort_by_count,
    sort_by_size,
)
from .names import (
    MERGE_VIEWS,
    KeyFunction,
    MergeView,
    collapse_groups,
    name_key,
    normalize_overload_name,
    normalize_template_name,
    overload_key,
    section_key,
    tag_words_key,
    template_key,
)

__all__ = [
    "KeyFunction",
    "MergeView",
    "MERGE_VIEWS",
    "collapse_groups",
    "normalize_template_name",
    "normalize_overload_name",
    "section_key",
    "name_key",
    "template_key",
    "overload_key",
    "tag_words_key",
    "collate",
    "count_order_key",
    "size_order_key",
    "sort_by_count",
    "sort_by_size",
    "increases",
    "decreases",
    "repeated",
    "PATH_SEPARATOR",
    "UNKNOWN_SOURCE_LABEL",
    "FolderStats",
    "PathReplacement",
    "PathReplacementError",
    "compile_path_replacements",
    "apply_path_replacements",
    "parent_folder",
    "rollup_folders",
    "rows_by_size",
    "rows_by_path",
]

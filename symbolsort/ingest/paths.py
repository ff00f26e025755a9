"""Source-path cleanup for ingested symbols.

Paths are stripped of ``:line`` suffixes, canonicalized to ``/`` separators
with ``.``/``..`` resolved, and lower-cased. Relative paths are re-rooted
against the absolute directories seen in the same input when possible.
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import replace

from ..collate.folders import PATH_SEPARATOR, parent_folder
from ..model.types import Symbol

_SEPARATORS_RE = re.compile(r"[\\/]")
_DRIVE_RE = re.compile(r"^[A-Za-z]:[\\/]")
_LINE_SUFFIX_RE = re.compile(r":\d+$")


def canonicalize_path(path: str) -> str:
    """Resolve ``.``/``..`` segments and unify separators to ``/``.

    Leading ``..`` segments that cannot be resolved are kept, as are a leading
    and a trailing separator.
    """
    if not path:
        return path
    kept: list[str] = []
    skip = 0
    for part in reversed([part for part in _SEPARATORS_RE.split(path) if part]):
        if part == ".":
            continue
        if part == "..":
            skip += 1
        elif skip > 0:
            skip -= 1
        else:
            kept.append(part)
    segments = [".."] * skip + kept[::-1]
    prefix = PATH_SEPARATOR if path[0] in "\\/" else ""
    result = prefix + PATH_SEPARATOR.join(segments)
    if segments and path[-1] in "\\/":
        result += PATH_SEPARATOR
    return result


def is_rooted(path: str) -> bool:
    return bool(path) and (path[0] in "\\/" or _DRIVE_RE.match(path) is not None)


def strip_line_number(path: str) -> str:
    """Drop a trailing ``:<line>`` suffix as printed by ``nm -l``."""
    return _LINE_SUFFIX_RE.sub("", path)


def clean_source_paths(symbols: Sequence[Symbol]) -> list[Symbol]:
    """Return symbols with canonical, lower-cased source paths."""
    stripped = [strip_line_number(symbol.source_filename) for symbol in symbols]

    roots: set[str] = set()
    cleaned: list[str] = []
    for path in stripped:
        if path and is_rooted(path):
            path = canonicalize_path(path).lower()
            folder = parent_folder(path)
            if folder is not None:
                roots.add(folder)
        cleaned.append(path)

    ordered_roots = sorted(roots)
    resolved_relative: dict[str, str] = {}
    for idx, path in enumerate(cleaned):
        if not path or is_rooted(path):
            continue
        resolved = resolved_relative.get(path)
        if resolved is None:
            resolved = _rebase_relative(path, ordered_roots, roots)
            resolved_relative[path] = resolved
        cleaned[idx] = resolved

    out: list[Symbol] = []
    for symbol, path in zip(symbols, cleaned):
        if path != symbol.source_filename:
            symbol = replace(symbol, source_filename=path)
        out.append(symbol)
    return out


def _rebase_relative(path: str, ordered_roots: list[str], roots: set[str]) -> str:
    """Join ``path`` onto the first root whose result lands in a known folder."""
    for root in ordered_roots:
        candidate = canonicalize_path(root + PATH_SEPARATOR + path).lower()
        if parent_folder(candidate) in roots:
            return candidate
    return canonicalize_path(path).lower()

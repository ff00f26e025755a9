"""Per-file and per-folder size rollups.

Every symbol's size and count are added to its source file and to each
ancestor folder of that file. Optional regex substitutions run on each path
first, so equivalent build roots can be folded together.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

from ..model.types import Symbol
from ..progress import ProgressCallback, ProgressReporter

logger = logging.getLogger(__name__)

PATH_SEPARATOR = "/"
UNKNOWN_SOURCE_LABEL = "[unknown]"


class PathReplacementError(ValueError):
    """A configured path substitution pattern or template is invalid."""


@dataclass(frozen=True)
class PathReplacement:
    pattern: re.Pattern[str]
    replacement: str

    def apply(self, path: str) -> str:
        return self.pattern.sub(self.replacement, path)


def compile_path_replacements(pairs: Iterable[tuple[str, str]]) -> list[PathReplacement]:
    """Compile ``(pattern, replacement)`` pairs, failing fast on bad input.

    The replacement template is expanded once against an empty string, which
    parses it and checks its group references without needing a match.
    """
    compiled: list[PathReplacement] = []
    for pattern, replacement in pairs:
        try:
            regex = re.compile(pattern)
        except re.error as exc:
            raise PathReplacementError(f"invalid path pattern {pattern!r}: {exc}") from exc
        try:
            regex.sub(replacement, "")
        except (re.error, IndexError) as exc:
            raise PathReplacementError(f"invalid replacement {replacement!r} for pattern {pattern!r}: {exc}") from exc
        compiled.append(PathReplacement(regex, replacement))
    return compiled


def apply_path_replacements(path: str, replacements: Sequence[PathReplacement]) -> str:
    for replacement in replacements:
        path = replacement.apply(path)
    return path


@dataclass
class FolderStats:
    """Rolled-up totals for one file or folder path.

    ``direct`` marks paths that symbols name as their own source file.
    ``children`` holds the distinct paths one level below this one.
    """

    path: str
    count: int = 0
    size: int = 0
    direct: bool = False
    children: set[str] = field(default_factory=set)

    @property
    def single_child(self) -> bool:
        """Whether this row only repeats the totals of its one child."""
        return not self.direct and len(self.children) == 1

    @property
    def label(self) -> str:
        return self.path if self.path else UNKNOWN_SOURCE_LABEL


def parent_folder(path: str, separator: str = PATH_SEPARATOR) -> str | None:
    """Return ``path`` without its last segment, or ``None`` at the top."""
    if path == separator:
        return None
    pos = path.rfind(separator)
    if pos < 0:
        return None
    if pos == 0:
        return separator
    return path[:pos]


def rollup_folders(
    symbols: Sequence[Symbol],
    replacements: Sequence[PathReplacement] = (),
    separator: str = PATH_SEPARATOR,
    progress: ProgressCallback | None = None,
) -> dict[str, FolderStats]:
    """Accumulate count/size for every file and all of its ancestor folders."""
    reporter = ProgressReporter("Building folder stats", len(symbols), progress)
    stats: dict[str, FolderStats] = {}
    for done, symbol in enumerate(symbols, start=1):
        path: str | None = apply_path_replacements(symbol.source_filename, replacements)
        child: str | None = None
        while path is not None:
            entry = stats.get(path)
            if entry is None:
                entry = FolderStats(path)
                stats[path] = entry
            entry.count += symbol.count
            entry.size += symbol.size
            if child is None:
                entry.direct = True
            else:
                entry.children.add(child)
            child = path
            path = parent_folder(path, separator)
        reporter.update(done)
    reporter.finish()
    logger.debug("Rolled up %d symbols into %d paths", len(symbols), len(stats))
    return stats


def rows_by_size(stats: dict[str, FolderStats]) -> list[FolderStats]:
    """Size descending, then path ascending."""
    return sorted(stats.values(), key=lambda entry: (-entry.size, entry.path))


def rows_by_path(stats: dict[str, FolderStats]) -> list[FolderStats]:
    return sorted(stats.values(), key=lambda entry: entry.path)

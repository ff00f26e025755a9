"""Merge-key strategies for the collated report views."""

from __future__ import annotations

import re
from collections.abc import Callable, Iterable
from dataclasses import dataclass

from ..model.types import Symbol

KeyFunction = Callable[[Symbol], Iterable[str]]

TEMPLATE_PLACEHOLDER = "T"
ELLIPSIS_PLACEHOLDER = "..."
TAG_SEPARATORS = " ,.&*()<>:'`"

_TAG_SPLIT_RE = re.compile("[" + re.escape(TAG_SEPARATORS) + "]+")


def collapse_groups(name: str, open_char: str, close_char: str, placeholder: str) -> str:
    """Replace the contents of every outermost ``open_char``/``close_char`` group.

    Delimiters and text outside the groups are kept. A group is replaced
    only when its matching close returns the depth to zero; an unterminated
    group at the end of ``name`` is left as written. ``open_char`` and
    ``close_char`` may be the same character (quoted spans).
    """
    parts: list[str] = []
    depth = 0
    segment_start = 0
    for idx, char in enumerate(name):
        if char == close_char and depth > 0:
            depth -= 1
            if depth == 0:
                parts.append(placeholder)
                parts.append(char)
                segment_start = idx + 1
        elif char == open_char:
            if depth == 0:
                parts.append(name[segment_start : idx + 1])
                segment_start = idx + 1
            depth += 1
    parts.append(name[segment_start:])
    return "".join(parts)


_TEMPLATE_GROUPS = (("<", ">", TEMPLATE_PLACEHOLDER), ("'", "'", ELLIPSIS_PLACEHOLDER))
_OVERLOAD_GROUPS = _TEMPLATE_GROUPS + (("(", ")", ELLIPSIS_PLACEHOLDER),)


def _collapse_until_stable(name: str, groups: tuple[tuple[str, str, str], ...]) -> str:
    """Apply ``collapse_groups`` for each delimiter pair until nothing changes.

    Interleaved delimiters such as ``<a('<b)>`` only line up after an earlier
    pass removes the inner ones. A round that changes the name either drops
    a delimiter or only rewrites delimiter-free group contents, which the
    next round keeps, so the loop ends.
    """
    while True:
        collapsed = name
        for open_char, close_char, placeholder in groups:
            collapsed = collapse_groups(collapsed, open_char, close_char, placeholder)
        if collapsed == name:
            return name
        name = collapsed


def normalize_template_name(name: str) -> str:
    return _collapse_until_stable(name, _TEMPLATE_GROUPS)


def normalize_overload_name(name: str) -> str:
    return _collapse_until_stable(name, _OVERLOAD_GROUPS)


def section_key(symbol: Symbol) -> tuple[str, ...]:
    return (symbol.section,)


def name_key(symbol: Symbol) -> tuple[str, ...]:
    return (symbol.name,)


def template_key(symbol: Symbol) -> tuple[str, ...]:
    return (normalize_template_name(symbol.name),)


def overload_key(symbol: Symbol) -> tuple[str, ...]:
    return (normalize_overload_name(symbol.short_name),)


def tag_words_key(symbol: Symbol) -> list[str]:
    return [word for word in _TAG_SPLIT_RE.split(symbol.name) if word]


@dataclass(frozen=True)
class MergeView:
    """One merged report view: a heading and the key function feeding it."""

    title: str
    progress_label: str
    key_fn: KeyFunction


MERGE_VIEWS: tuple[MergeView, ...] = (
    MergeView("Merged Sections / Types", "Computing section stats", section_key),
    MergeView("Merged Duplicate Symbols", "Merging duplicate symbols", name_key),
    MergeView("Merged Template Symbols", "Merging template symbols", template_key),
    MergeView("Merged Overloaded Symbols", "Merging overloaded symbols", overload_key),
    MergeView("Symbol Tags", "Building tag cloud", tag_words_key),
)

"""JSON config helpers.

Reads the default row limit, name exclusions and path replacements from a
user-edited file. Malformed or missing config falls back safely.
"""

from __future__ import annotations

import json
from pathlib import Path

from platformdirs import user_config_dir

APP_NAME = "symbolsort"
CONFIG_FILENAME = "config.json"
DEFAULT_CONFIG_PATH = Path(user_config_dir(APP_NAME, appauthor=False)) / CONFIG_FILENAME
CONFIG_PATH = DEFAULT_CONFIG_PATH


def load_config() -> dict[str, object]:
    """Load the persisted JSON config object.

    Returns an empty dict when the file is missing, unreadable, malformed, or
    does not decode to a top-level JSON object.
    """
    try:
        data = json.loads(CONFIG_PATH.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        return {}
    return data if isinstance(data, dict) else {}


def load_max_count() -> int | None:
    """Load the default row limit; only positive non-boolean ints count."""
    value = load_config().get("count")
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        return None
    return value


def load_exclusions() -> list[str]:
    """Load name-substring exclusions, dropping empty and non-string items."""
    value = load_config().get("exclusions")
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, str) and item]


def load_path_replacements() -> list[tuple[str, str]]:
    """Load ``[pattern, replacement]`` pairs with strict shape validation.

    Patterns are returned uncompiled; compiling them is the caller's setup
    step so a bad pattern surfaces as a configuration error.
    """
    value = load_config().get("path_replacements")
    if not isinstance(value, list):
        return []
    pairs: list[tuple[str, str]] = []
    for item in value:
        if not isinstance(item, list) or len(item) != 2:
            continue
        pattern, replacement = item
        if not isinstance(pattern, str) or not pattern or not isinstance(replacement, str):
            continue
        pairs.append((pattern, replacement))
    return pairs

"""Public package surface for symbolsort.

Exports ``main`` for programmatic CLI invocation.
The engine lives in ``symbolsort.engine`` and ``symbolsort.collate``.
"""

from __future__ import annotations


def main(*args, **kwargs):
    """Lazily import CLI entrypoint to keep package imports lightweight."""
    from .cli import main as _main

    return _main(*args, **kwargs)

__all__ = ["main"]

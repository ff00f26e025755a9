"""Optional progress reporting for long-running passes.

Passes accept a ``ProgressCallback`` and report through ``ProgressReporter``,
which forwards at most one call per percentage point.
"""

from __future__ import annotations

from collections.abc import Callable

ProgressCallback = Callable[[str, int, int], None]


class ProgressReporter:
    """Throttle ``(stage, done, total)`` notifications to percent changes."""

    def __init__(self, stage: str, total: int, callback: ProgressCallback | None) -> None:
        self.stage = stage
        self.total = max(0, total)
        self.callback = callback
        self._last_percent = -1

    def update(self, done: int) -> None:
        """Report ``done`` items when the completed percentage moved."""
        if self.callback is None:
            return
        done = min(done, self.total)
        percent = 100 if self.total == 0 else (100 * done) // self.total
        if percent == self._last_percent:
            return
        self._last_percent = percent
        self.callback(self.stage, done, self.total)

    def finish(self) -> None:
        self.update(self.total)

"""Carriage-return progress output for long sequential loops."""

from __future__ import annotations

import sys
from typing import Optional, TextIO


def format_progress(index: int, total: int) -> str:
    """Render ``index/total (pct%)``; an empty loop reads as complete."""
    percent = 100.0 if total <= 0 else (index / total) * 100
    return f"Progress: {index}/{total} ({percent:.2f}%)"


class ProgressReporter:
    """Overwrites a single progress line on a text stream."""

    def __init__(self, stream: Optional[TextIO] = None, enabled: bool = True) -> None:
        self.stream = stream if stream is not None else sys.stdout
        self.enabled = enabled

    def update(self, index: int, total: int) -> None:
        if not self.enabled:
            return
        self.stream.write("\r" + format_progress(index, total))
        self.stream.flush()

    def finish(self, total: int) -> None:
        if not self.enabled:
            return
        self.stream.write("\r" + format_progress(total, total) + "\n")
        self.stream.flush()

"""Post-run line count check of the SQL output."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger("dims_backfill")


class VerificationMismatch(RuntimeError):
    """Raised on request when the output line count differs from the expected count."""


@dataclass(frozen=True)
class VerificationReport:
    actual: int
    expected: int

    @property
    def matches(self) -> bool:
        return self.actual == self.expected

    def raise_for_mismatch(self) -> None:
        if not self.matches:
            raise VerificationMismatch(
                f"Output has {self.actual} lines but {self.expected} were expected"
            )


def count_lines(path: Path) -> int:
    """Count newline-terminated lines; a missing file has none."""
    path = Path(path)
    if not path.exists():
        return 0
    count = 0
    with path.open("rb") as handle:
        for chunk in iter(lambda: handle.read(65536), b""):
            count += chunk.count(b"\n")
    return count


def verify_output(path: Path, expected: int) -> VerificationReport:
    report = VerificationReport(actual=count_lines(path), expected=expected)
    logger.info("Total lines: %d. Should be: %d.", report.actual, report.expected)
    if not report.matches:
        logger.warning(
            "Line count mismatch in %s: %d written vs %d expected",
            path,
            report.actual,
            report.expected,
        )
    return report

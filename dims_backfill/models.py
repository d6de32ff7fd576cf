"""Data models passed between the backfill stages."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

SENTINEL_DIMENSION = -1


@dataclass(frozen=True)
class ManifestRecord:
    """One manifest row describing an object to fetch."""

    id: str
    remote_path: str
    extension: str


@dataclass(frozen=True)
class DimensionResult:
    """Pixel dimensions read from a staged file."""

    id: str
    width: int
    height: int
    path: Optional[Path] = None

    @property
    def is_sentinel(self) -> bool:
        return self.width == SENTINEL_DIMENSION and self.height == SENTINEL_DIMENSION


@dataclass
class ScanResult:
    """Outcome of walking the staging directory."""

    enumerated: int = 0
    results: List[DimensionResult] = field(default_factory=list)
    invalid: List[Path] = field(default_factory=list)
    skipped_first: Optional[Path] = None

    @property
    def accepted(self) -> int:
        return len(self.results)

    @property
    def sentinel_count(self) -> int:
        return sum(1 for result in self.results if result.is_sentinel)


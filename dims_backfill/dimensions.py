"""Read pixel dimensions from staged files without decoding pixel data."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Iterator, List, Optional, Tuple

import filetype
from PIL import Image

from .models import SENTINEL_DIMENSION, DimensionResult, ScanResult
from .progress import ProgressReporter
from .utils import derive_record_id

logger = logging.getLogger("dims_backfill")


class DecodeFailure(ValueError):
    """Raised when a staged file cannot be interpreted as an image."""


class InvalidIdError(ValueError):
    """Raised when a staged file name yields an empty record id."""


def read_dimensions(path: Path) -> Tuple[int, int]:
    """Return ``(width, height)`` from the image header.

    ``Image.open`` is lazy, so only enough of the file to identify the
    format and size is read. Pixel data is never decoded, so Pillow's
    decompression-bomb limit is lifted for the call.
    """
    max_pixels = Image.MAX_IMAGE_PIXELS
    Image.MAX_IMAGE_PIXELS = None
    try:
        with Image.open(path) as img:
            width, height = img.size
    except (OSError, ValueError, SyntaxError) as exc:
        raise DecodeFailure(f"{path}: {exc}") from exc
    finally:
        Image.MAX_IMAGE_PIXELS = max_pixels
    return int(width), int(height)


def describe_content(path: Path) -> Optional[str]:
    """Best-effort MIME type from the file signature, for diagnostics."""
    try:
        kind = filetype.guess(str(path))
    except OSError:
        return None
    return kind.mime if kind else None


def record_id_for(path: Path) -> str:
    record_id = derive_record_id(path)
    if not record_id:
        raise InvalidIdError(f"Cannot derive an id from {path}")
    return record_id


def list_staged_entries(staging_dir: Path) -> List[Path]:
    """List staging entries in filesystem enumeration order."""
    staging_dir = Path(staging_dir)
    if not staging_dir.is_dir():
        logger.warning("Staging directory %s does not exist", staging_dir)
        return []
    return [staging_dir / name for name in os.listdir(staging_dir)]


def measure(path: Path, record_id: str) -> DimensionResult:
    """Measure one staged file, falling back to sentinel dimensions."""
    try:
        width, height = read_dimensions(path)
    except DecodeFailure as exc:
        logger.warning(
            "Could not read dimensions of %s (content: %s): %s",
            path,
            describe_content(path) if path.is_file() else "not a file",
            exc,
        )
        width = height = SENTINEL_DIMENSION
    return DimensionResult(id=record_id, width=width, height=height, path=path)


def iter_dimensions(
    entries: List[Path],
    scan: ScanResult,
    *,
    skip_first_entry: bool = False,
    progress: Optional[ProgressReporter] = None,
) -> Iterator[DimensionResult]:
    """Yield one result per accepted entry while filling in ``scan``.

    Every entry advances progress, including ones skipped for an empty id
    or by the first-entry policy.
    """
    total = len(entries)
    scan.enumerated = total

    for index, path in enumerate(entries, start=1):
        if skip_first_entry and index == 1:
            logger.info("Skipping first staged entry %s (skip_first_entry)", path)
            scan.skipped_first = path
        else:
            try:
                record_id = record_id_for(path)
            except InvalidIdError as exc:
                logger.warning("Invalid id, skipping: %s", exc)
                scan.invalid.append(path)
            else:
                result = measure(path, record_id)
                scan.results.append(result)
                logger.debug("%s -> %dx%d", result.id, result.width, result.height)
                yield result

        if progress is not None:
            progress.update(index, total)

    if progress is not None:
        progress.finish(total)


def extract_dimensions(
    staging_dir: Path,
    *,
    skip_first_entry: bool = False,
    progress: Optional[ProgressReporter] = None,
) -> ScanResult:
    """Measure every staged entry and collect the results."""
    scan = ScanResult()
    entries = list_staged_entries(staging_dir)
    for _ in iter_dimensions(
        entries, scan, skip_first_entry=skip_first_entry, progress=progress
    ):
        pass
    return scan

"""Sequential download of manifest objects into the staging directory."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional, Sequence, Union

from filetype import guess

from .models import ManifestRecord
from .progress import ProgressReporter
from .storage import ObjectStore

logger = logging.getLogger("dims_backfill")

_EXTENSION_ALIASES = {"jpeg": "jpg", "tiff": "tif"}


class DownloadError(RuntimeError):
    """Raised when a single object cannot be fetched; aborts the run."""

    def __init__(self, record: ManifestRecord, message: str) -> None:
        super().__init__(message)
        self.record = record


def _normalize_extension(ext: str) -> str:
    ext = ext.lower().lstrip(".")
    return _EXTENSION_ALIASES.get(ext, ext)


def detect_image_format(source: Union[bytes, str]) -> Optional[str]:
    """Detect image type from bytes or a file path; returns lowercase extension."""
    kind = guess(source)
    if kind and kind.mime.startswith("image/"):
        return _normalize_extension(kind.extension)
    return None


def staging_path_for(record: ManifestRecord, staging_dir: Path) -> Path:
    return Path(staging_dir) / f"{record.id}.{record.extension}"


def fetch_objects(
    records: Sequence[ManifestRecord],
    store: ObjectStore,
    staging_dir: Path,
    progress: Optional[ProgressReporter] = None,
) -> List[Path]:
    """Download each record in manifest order, one at a time.

    The first failure raises :class:`DownloadError` and removes any partial
    file for that record; objects already staged are left in place and
    later records are never requested.
    """
    staging_dir = Path(staging_dir)
    staging_dir.mkdir(parents=True, exist_ok=True)
    total = len(records)
    staged: List[Path] = []

    for index, record in enumerate(records, start=1):
        if not record.remote_path:
            raise DownloadError(
                record, f"Record {record.id!r} has no remote path to download"
            )
        destination = staging_path_for(record, staging_dir)
        try:
            store.download_to(record.remote_path, destination)
        except Exception as exc:  # pylint: disable=broad-except
            destination.unlink(missing_ok=True)
            raise DownloadError(
                record,
                f"Failed to download {record.remote_path} for record {record.id!r}: {exc}",
            ) from exc

        detected = detect_image_format(str(destination))
        if detected and detected != _normalize_extension(record.extension):
            logger.warning(
                "Object %s looks like %s but is staged as .%s",
                record.remote_path,
                detected,
                record.extension,
            )

        logger.debug(
            "Staged %s -> %s (%d bytes)",
            record.remote_path,
            destination,
            destination.stat().st_size,
        )
        staged.append(destination)
        if progress is not None:
            progress.update(index, total)

    if progress is not None:
        progress.finish(total)
    return staged

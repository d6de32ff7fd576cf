"""Manifest parsing for the backfill input CSV."""

from __future__ import annotations

import csv
import logging
from pathlib import Path
from typing import Dict, List, Optional

from .models import ManifestRecord

logger = logging.getLogger("dims_backfill")

ID_FIELD = "id"
PATH_FIELD = "gcloudPath"
EXTENSION_FIELD = "fileExtension"


class ManifestParseError(ValueError):
    """Raised when the manifest cannot be read or is structurally malformed."""


def _cell(row: Dict[Optional[str], object], key: str) -> str:
    value = row.get(key)
    if not isinstance(value, str):
        return ""
    return value.strip()


def _is_blank(row: Dict[Optional[str], object]) -> bool:
    for value in row.values():
        if isinstance(value, str) and value.strip():
            return False
        if isinstance(value, list) and any(v.strip() for v in value):
            return False
    return True


def load_manifest(manifest_path: Path) -> List[ManifestRecord]:
    """Parse the manifest CSV into records, preserving file order.

    Only the header row is required. A missing ``id``, ``gcloudPath`` or
    ``fileExtension`` column is not rejected here: the affected field is an
    empty string and surfaces later as a broken staging path or download.
    """
    manifest_path = Path(manifest_path)
    records: List[ManifestRecord] = []
    try:
        with manifest_path.open("r", encoding="utf-8-sig", newline="") as handle:
            reader = csv.DictReader(handle, strict=True)
            if reader.fieldnames is None:
                logger.warning("Manifest %s has no header row; nothing to do", manifest_path)
                return records

            missing = [
                name
                for name in (ID_FIELD, PATH_FIELD, EXTENSION_FIELD)
                if name not in reader.fieldnames
            ]
            if missing:
                logger.warning(
                    "Manifest %s is missing columns %s; values will be empty",
                    manifest_path,
                    ", ".join(missing),
                )

            for row in reader:
                if _is_blank(row):
                    continue
                records.append(
                    ManifestRecord(
                        id=_cell(row, ID_FIELD),
                        remote_path=_cell(row, PATH_FIELD),
                        extension=_cell(row, EXTENSION_FIELD),
                    )
                )
    except csv.Error as exc:
        raise ManifestParseError(f"Malformed manifest {manifest_path}: {exc}") from exc
    except (OSError, UnicodeDecodeError) as exc:
        raise ManifestParseError(f"Cannot read manifest {manifest_path}: {exc}") from exc

    logger.debug("Loaded %d manifest records from %s", len(records), manifest_path)
    return records

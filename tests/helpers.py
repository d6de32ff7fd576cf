"""Shared fixtures for the backfill tests."""

from __future__ import annotations

import io
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from PIL import Image

from dims_backfill.storage import ObjectStore


class FakeStore(ObjectStore):
    """In-memory bucket that records every requested path."""

    def __init__(self, objects: Dict[str, bytes], bucket: str = "test-bucket") -> None:
        self.bucket = bucket
        self.objects = dict(objects)
        self.requested: List[str] = []

    def download(self, remote_path: str) -> bytes:
        self.requested.append(remote_path)
        if remote_path not in self.objects:
            raise KeyError(f"No such object: {remote_path}")
        return self.objects[remote_path]


def image_bytes(width: int, height: int, fmt: str = "PNG") -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", (width, height), color=(200, 30, 30)).save(buffer, format=fmt)
    return buffer.getvalue()


def write_manifest(
    path: Path,
    rows: Iterable[Iterable[str]],
    header: Optional[Iterable[str]] = ("id", "gcloudPath", "fileExtension"),
) -> Path:
    lines = []
    if header is not None:
        lines.append(",".join(header))
    lines.extend(",".join(row) for row in rows)
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return path

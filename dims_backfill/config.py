"""Configuration objects and constants for the backfill run."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

DEFAULT_BUCKET = "bucket-name"
DEFAULT_INPUT_PATH = Path("files.csv")
DEFAULT_OUTPUT_PATH = Path("result.txt")
DEFAULT_STAGING_DIR = Path("tmp")
DEFAULT_TABLE = "CustomFile"
DEFAULT_COLUMN = "metadata"
DEFAULT_BATCH_SIZE = 200
DEFAULT_HTTP_TIMEOUT = 30.0

EXPECTED_COUNT_POLICIES = ("enumerated", "accepted")
STORE_KINDS = ("gcs", "http")


@dataclass
class BackfillConfig:
    """Settings that control where objects come from and where SQL goes."""

    bucket: str = DEFAULT_BUCKET
    input_path: Path = DEFAULT_INPUT_PATH
    output_path: Path = DEFAULT_OUTPUT_PATH
    staging_dir: Path = DEFAULT_STAGING_DIR
    table: str = DEFAULT_TABLE
    column: str = DEFAULT_COLUMN
    batch_size: int = DEFAULT_BATCH_SIZE
    skip_first_entry: bool = False
    expected_count: str = "enumerated"
    truncate_output: bool = False
    store_kind: str = "gcs"
    http_timeout: float = DEFAULT_HTTP_TIMEOUT

    def __post_init__(self) -> None:
        self.input_path = Path(self.input_path)
        self.output_path = Path(self.output_path)
        self.staging_dir = Path(self.staging_dir)

    def validate(self) -> None:
        """Raise ``ValueError`` for settings the pipeline cannot honour."""
        if self.batch_size < 1:
            raise ValueError(f"batch_size must be positive, got {self.batch_size}")
        if self.expected_count not in EXPECTED_COUNT_POLICIES:
            raise ValueError(
                f"expected_count must be one of {EXPECTED_COUNT_POLICIES}, "
                f"got {self.expected_count!r}"
            )
        if self.store_kind not in STORE_KINDS:
            raise ValueError(
                f"store_kind must be one of {STORE_KINDS}, got {self.store_kind!r}"
            )

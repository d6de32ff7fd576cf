"""SQL statement formatting and batched, append-only output."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import List

from .config import DEFAULT_BATCH_SIZE, DEFAULT_COLUMN, DEFAULT_TABLE
from .models import DimensionResult
from .utils import sql_literal

logger = logging.getLogger("dims_backfill")


def format_update_statement(
    result: DimensionResult,
    table: str = DEFAULT_TABLE,
    column: str = DEFAULT_COLUMN,
) -> str:
    """Build one ``UPDATE`` line setting the jsonb dimensions for ``result.id``."""
    payload = json.dumps({"width": result.width, "height": result.height})
    return (
        f'UPDATE "{table}" SET "{column}" = \'{payload}\'::jsonb '
        f"WHERE id = '{sql_literal(result.id)}';\n"
    )


class SqlBatchWriter:
    """Buffers statements and appends them to ``path`` in fixed-size batches.

    The file is only ever appended to; running twice against the same path
    duplicates its content.
    """

    def __init__(self, path: Path, batch_size: int = DEFAULT_BATCH_SIZE) -> None:
        if batch_size < 1:
            raise ValueError(f"batch_size must be positive, got {batch_size}")
        self.path = Path(path)
        self.batch_size = batch_size
        self.pending: List[str] = []
        self.written = 0
        self.flushes = 0

    def __enter__(self) -> "SqlBatchWriter":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def add(self, statement: str) -> None:
        self.pending.append(statement)
        if len(self.pending) >= self.batch_size:
            self.flush()

    def flush(self) -> None:
        if not self.pending:
            return
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.path.open("a", encoding="utf-8", newline="") as handle:
            handle.write("".join(self.pending))
        self.written += len(self.pending)
        self.flushes += 1
        logger.debug("Appended %d statements to %s", len(self.pending), self.path)
        self.pending.clear()

    def close(self) -> None:
        self.flush()
        if not self.path.exists():
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.touch()

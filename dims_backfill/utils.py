"""Utility helpers for id derivation and SQL text handling."""

from __future__ import annotations

from pathlib import Path
from typing import Union


def derive_record_id(entry: Union[str, Path]) -> str:
    """Strip the directory prefix and everything from the first dot onwards."""
    name = Path(entry).name
    return name.split(".", 1)[0]


def sql_literal(value: str) -> str:
    """Escape a value for use inside a single-quoted SQL string literal."""
    return value.replace("'", "''")

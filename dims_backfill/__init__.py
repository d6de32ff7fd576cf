"""Backfill image dimensions from Cloud Storage objects into SQL updates."""

__version__ = "0.1.0"

"""Command-line entry point for the dimensions backfill."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from .config import (
    DEFAULT_BATCH_SIZE,
    DEFAULT_BUCKET,
    DEFAULT_COLUMN,
    DEFAULT_HTTP_TIMEOUT,
    DEFAULT_INPUT_PATH,
    DEFAULT_OUTPUT_PATH,
    DEFAULT_STAGING_DIR,
    DEFAULT_TABLE,
    EXPECTED_COUNT_POLICIES,
    STORE_KINDS,
    BackfillConfig,
)
from .fetcher import DownloadError
from .manifest import ManifestParseError
from .pipeline import run_backfill
from .progress import ProgressReporter
from .storage import create_object_store
from .verify import VerificationMismatch

logger = logging.getLogger("dims_backfill.cli")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description=(
            "Download images listed in a CSV manifest from Cloud Storage and emit "
            "SQL statements recording their pixel dimensions."
        ),
    )
    parser.add_argument(
        "--bucket",
        default=DEFAULT_BUCKET,
        help="Name of the bucket holding the objects",
    )
    parser.add_argument(
        "--input",
        default=DEFAULT_INPUT_PATH,
        type=Path,
        help="Manifest CSV with id, gcloudPath and fileExtension columns",
    )
    parser.add_argument(
        "--output",
        default=DEFAULT_OUTPUT_PATH,
        type=Path,
        help="File the SQL statements are appended to",
    )
    parser.add_argument(
        "--staging-dir",
        default=DEFAULT_STAGING_DIR,
        type=Path,
        help="Directory downloaded objects are written to (not cleaned up)",
    )
    parser.add_argument(
        "--table",
        default=DEFAULT_TABLE,
        help="Table updated by the generated statements",
    )
    parser.add_argument(
        "--column",
        default=DEFAULT_COLUMN,
        help="jsonb column receiving the dimensions",
    )
    parser.add_argument(
        "--batch-size",
        type=int,
        default=DEFAULT_BATCH_SIZE,
        help="Number of statements buffered before each append",
    )
    parser.add_argument(
        "--store",
        choices=STORE_KINDS,
        default="gcs",
        help="Download via the Cloud Storage client or plain HTTPS for public buckets",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=DEFAULT_HTTP_TIMEOUT,
        help="Request timeout in seconds for the HTTP store",
    )
    parser.add_argument(
        "--skip-first-entry",
        action="store_true",
        help="Ignore the first entry listed in the staging directory",
    )
    parser.add_argument(
        "--expected-count",
        choices=EXPECTED_COUNT_POLICIES,
        default="enumerated",
        help="Compare output lines against staged entries or emitted statements",
    )
    parser.add_argument(
        "--truncate",
        action="store_true",
        help="Empty the output file before writing instead of appending",
    )
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Exit with an error when the line count check fails",
    )
    parser.add_argument(
        "--no-progress",
        action="store_true",
        help="Do not print progress lines to stdout",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )
    return parser


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    return build_parser().parse_args(argv)


def config_from_args(args: argparse.Namespace) -> BackfillConfig:
    return BackfillConfig(
        bucket=args.bucket,
        input_path=args.input,
        output_path=args.output,
        staging_dir=args.staging_dir,
        table=args.table,
        column=args.column,
        batch_size=args.batch_size,
        skip_first_entry=args.skip_first_entry,
        expected_count=args.expected_count,
        truncate_output=args.truncate,
        store_kind=args.store,
        http_timeout=args.timeout,
    )


def main(argv: Optional[Sequence[str]] = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        force=True,
    )

    config = config_from_args(args)
    try:
        config.validate()
    except ValueError as exc:
        parser.error(str(exc))

    store = create_object_store(config.store_kind, config.bucket, timeout=config.http_timeout)
    progress = ProgressReporter(sys.stdout, enabled=not args.no_progress)

    try:
        summary = run_backfill(config, store, progress)
    except (ManifestParseError, DownloadError) as exc:
        logger.error("%s", exc)
        raise SystemExit(1) from exc

    if args.strict:
        try:
            summary.verification.raise_for_mismatch()
        except VerificationMismatch as exc:
            logger.error("%s", exc)
            raise SystemExit(1) from exc


if __name__ == "__main__":
    main()

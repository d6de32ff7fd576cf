"""High-level orchestration of a backfill run."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Optional, Tuple

from .config import BackfillConfig
from .dimensions import iter_dimensions, list_staged_entries
from .fetcher import fetch_objects
from .manifest import load_manifest
from .models import ScanResult
from .progress import ProgressReporter
from .sql import SqlBatchWriter, format_update_statement
from .storage import ObjectStore
from .verify import VerificationReport, verify_output

logger = logging.getLogger("dims_backfill")


@dataclass
class BackfillSummary:
    """Counters collected over a full run."""

    manifest_records: int
    downloaded: int
    enumerated: int
    accepted: int
    sentinels: int
    invalid: int
    flushes: int
    verification: VerificationReport
    total_seconds: float


def expected_line_count(config: BackfillConfig, scan: ScanResult) -> int:
    """Number of output lines the verifier should find for this run."""
    if config.expected_count == "accepted":
        return scan.accepted
    return scan.enumerated - (1 if scan.skipped_first is not None else 0)


def generate_sql(
    config: BackfillConfig,
    progress: Optional[ProgressReporter] = None,
) -> Tuple[ScanResult, SqlBatchWriter]:
    """Measure the staging directory and append one statement per accepted entry."""
    scan = ScanResult()
    entries = list_staged_entries(config.staging_dir)
    with SqlBatchWriter(config.output_path, config.batch_size) as writer:
        for result in iter_dimensions(
            entries,
            scan,
            skip_first_entry=config.skip_first_entry,
            progress=progress,
        ):
            writer.add(format_update_statement(result, config.table, config.column))
    return scan, writer


def run_backfill(
    config: BackfillConfig,
    store: ObjectStore,
    progress: Optional[ProgressReporter] = None,
) -> BackfillSummary:
    """Load, download, measure, emit and verify, strictly in that order."""
    config.validate()
    overall_start = time.perf_counter()

    logger.info("Reading input file %s", config.input_path)
    records = load_manifest(config.input_path)

    logger.info("Downloading %d files from bucket %s", len(records), store.bucket)
    staged = fetch_objects(records, store, config.staging_dir, progress)

    if config.truncate_output and config.output_path.exists():
        logger.info("Truncating existing output %s", config.output_path)
        config.output_path.write_text("", encoding="utf-8")

    logger.info("Generating SQL into %s", config.output_path)
    scan, writer = generate_sql(config, progress)

    logger.info("Checking the line count")
    report = verify_output(config.output_path, expected_line_count(config, scan))

    summary = BackfillSummary(
        manifest_records=len(records),
        downloaded=len(staged),
        enumerated=scan.enumerated,
        accepted=scan.accepted,
        sentinels=scan.sentinel_count,
        invalid=len(scan.invalid),
        flushes=writer.flushes,
        verification=report,
        total_seconds=time.perf_counter() - overall_start,
    )
    if summary.sentinels:
        logger.warning(
            "%d statements carry sentinel dimensions (-1, -1)", summary.sentinels
        )
    logger.info(
        "Done in %.2fs (%d downloaded, %d statements written)",
        summary.total_seconds,
        summary.downloaded,
        writer.written,
    )
    return summary

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Any
from urllib.parse import quote_plus

from dotenv import load_dotenv

from ..clients import get_dynamodb_client, get_s3_client
from ..config.loader import ConfigError, LoaderConfig, load_config
from ..errors import IngestError
from ..excel.reader import open_workbook, sheet_to_raw_rows
from ..logging.error_log import ErrorLogBuffer
from ..logging.init import set_debug, set_level, setup_logging
from ..models.run_result import BatchStatsAccumulator, RunResult, RunStatus
from ..services.pipeline import BatchWriter, run_pipeline
from ..services.report import report_result
from ..storage.s3_source import LocalFileSource, ObjectSource, S3ObjectSource
from ..store.dynamodb import DryRunTable, UserTable

"""Command line runner.

Runs the same pipeline as the Lambda handler, against S3 (--bucket/--key) or a
local workbook (--file). The local file is wrapped in a synthetic S3 event so
key decoding behaves exactly as in Lambda.

Exit codes:
    0  every row written
    2  partial: rows skipped, items unprocessed, or no valid rows
    1  fatal: config / event / fetch / decode / store failure, empty input
"""

EXIT_SUCCESS_ALL = 0
EXIT_FATAL = 1
EXIT_PARTIAL_FAILURE = 2

LOCAL_BUCKET = "local"
INSPECT_ROWS = 5


def _load_env_file(path: Path, override: bool = False) -> None:
    """Load .env via python-dotenv (existing environment wins unless override)."""
    if path.exists():
        load_dotenv(dotenv_path=path, override=override)


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Excel (S3) -> DynamoDB user loader")
    src = p.add_mutually_exclusive_group(required=True)
    src.add_argument("--file", type=Path, help="Local .xlsx workbook")
    src.add_argument("--bucket", help="Source S3 bucket (requires --key)")
    p.add_argument("--key", help="Source S3 object key (unencoded)")
    p.add_argument("--config", type=Path, default=None, help="YAML config file")
    p.add_argument("--dry-run", action="store_true", help="Validate only, do not write")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    p.add_argument("--inspect-data", action="store_true", help="Print first sheet rows then exit")
    args = p.parse_args(argv)
    if args.bucket and not args.key:
        p.error("--bucket requires --key")
    return args


def build_event(bucket: str, key: str) -> dict[str, Any]:
    """Synthetic ObjectCreated event with the key encoded as S3 sends it."""
    return {
        "Records": [
            {"s3": {"bucket": {"name": bucket}, "object": {"key": quote_plus(key)}}}
        ]
    }


def exit_code_for(result: RunResult) -> int:
    s = result.summary
    if result.status is RunStatus.COMPLETED:
        if s.rows_invalid or s.items_unprocessed:
            return EXIT_PARTIAL_FAILURE
        return EXIT_SUCCESS_ALL
    if result.status is RunStatus.NO_VALID_ROWS:
        return EXIT_PARTIAL_FAILURE
    return EXIT_FATAL


def _inspect_data(source: ObjectSource, bucket: str, key: str) -> int:
    try:
        workbook = open_workbook(source.fetch(bucket, key), key)
        if not workbook.sheet_names:
            print("inspect: no sheets")
            return EXIT_FATAL
        name = workbook.sheet_names[0]
        rows = sheet_to_raw_rows(workbook.parse(name))
    except IngestError as e:
        print(f"inspect: {e}")
        return EXIT_FATAL
    print(f"SHEET: {name} rows={len(rows)} (other sheets: {workbook.sheet_names[1:]})")
    for r in rows[:INSPECT_ROWS]:
        # datetime は isoformat で表示
        print("  ", {k: (v.isoformat() if hasattr(v, "isoformat") else v) for k, v in r.as_dict().items()})
    return EXIT_SUCCESS_ALL


def _build_table(cfg: LoaderConfig, dry_run: bool, stats: BatchStatsAccumulator) -> BatchWriter:
    if dry_run:
        return DryRunTable(cfg.table_name)
    return UserTable(
        get_dynamodb_client(cfg.aws_region),
        cfg.table_name,
        metrics_callback=lambda m: stats.add_batch_time(m.elapsed_seconds),
    )


def main(argv: list[str] | None = None) -> int:
    logger = setup_logging()

    # [] を渡された場合に sys.argv が混入しないよう None のときだけ読む
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    _load_env_file(Path(".env"))

    try:
        cfg = load_config(args.config)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    set_level(logger, cfg.log_level)
    if args.debug:
        set_debug(logger)
        logger.debug("debug mode enabled")

    if args.file is not None:
        source: ObjectSource = LocalFileSource()
        bucket, key = LOCAL_BUCKET, str(args.file)
    else:
        source = S3ObjectSource(get_s3_client(cfg.aws_region))
        bucket, key = args.bucket, args.key

    if args.inspect_data:
        return _inspect_data(source, bucket, key)

    stats = BatchStatsAccumulator()
    table = _build_table(cfg, args.dry_run, stats)
    error_log = ErrorLogBuffer(Path(cfg.error_log_dir) if cfg.error_log_dir else None)
    mode = "dry-run" if args.dry_run else f"table={cfg.table_name}"
    logger.info(f"Processing {bucket}/{key} ({mode})")

    result = run_pipeline(
        build_event(bucket, key),
        source,
        table,
        batch_size=cfg.batch_size,
        error_log=error_log,
        batch_stats=stats,
        show_progress=True,
    )
    report_result(result, logger)
    return exit_code_for(result)

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Any

from .clients import get_dynamodb_client, get_s3_client
from .config.loader import LoaderConfig, load_config
from .logging.error_log import ErrorLogBuffer
from .logging.init import set_level, setup_logging
from .models.run_result import BatchStatsAccumulator, RunResult
from .services.pipeline import run_pipeline
from .services.report import MSG_FAILED, report_result
from .storage.s3_source import S3ObjectSource
from .store.dynamodb import UserTable

"""AWS Lambda entrypoint (S3 ObjectCreated trigger).

The handler always returns normally: a failed invocation is logged, never
raised, so S3 does not redeliver the event and partially written batches are
not written twice.
"""

__all__ = [
    "lambda_handler",
]


@lru_cache(maxsize=1)
def _config() -> LoaderConfig:
    return load_config(None)


def process_event(event: Any, cfg: LoaderConfig) -> RunResult:
    stats = BatchStatsAccumulator()
    table = UserTable(
        get_dynamodb_client(cfg.aws_region),
        cfg.table_name,
        metrics_callback=lambda m: stats.add_batch_time(m.elapsed_seconds),
    )
    error_log = ErrorLogBuffer(Path(cfg.error_log_dir) if cfg.error_log_dir else None)
    return run_pipeline(
        event,
        S3ObjectSource(get_s3_client(cfg.aws_region)),
        table,
        batch_size=cfg.batch_size,
        error_log=error_log,
        batch_stats=stats,
    )


def lambda_handler(event: Any, context: Any) -> None:
    logger = setup_logging()
    try:
        cfg = _config()
        set_level(logger, cfg.log_level)
        result = process_event(event, cfg)
        report_result(result, logger)
    except Exception as e:
        # fire-and-forget: 失敗を呼び出し元に返さない (再配信させない)
        logger.error(f"{MSG_FAILED}: {e}", exc_info=True)

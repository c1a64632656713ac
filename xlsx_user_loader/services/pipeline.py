from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import UTC, datetime
from typing import Any, Protocol

from ..errors import MalformedEventError, ObjectFetchError, StoreWriteError, WorkbookDecodeError
from ..excel.reader import open_workbook, sheet_to_raw_rows
from ..logging.error_log import ErrorLogBuffer
from ..models.error_record import OBJECT_LEVEL_ROW, ErrorRecord
from ..models.run_result import (
    BatchOutcome,
    BatchStatsAccumulator,
    BatchStatus,
    RunResult,
    RunStatus,
    RunSummary,
)
from ..models.user_record import WriteItem
from ..models.validation import Invalid, Valid
from ..storage.s3_source import ObjectSource
from ..store.dynamodb import BatchWriteResult
from .event import ObjectRef, parse_trigger_event
from .partition import MAX_BATCH_SIZE, partition
from .progress import BatchProgress
from .validator import REASON_CODES, validate_rows

"""Pipeline orchestration: event → fetch → decode → validate → batch write.

``run_pipeline`` returns a RunResult for every expected outcome and never logs
user-facing messages itself; the host adapter (Lambda handler / CLI) does that.
Only programming errors and non-store exceptions propagate.

Failure policy:
- row validation failures are collected, never fatal
- no valid rows → nothing is written
- a failed batch stops the run; earlier batches stay committed, later ones are
  recorded as skipped in the batch ledger
"""

__all__ = [
    "BatchWriter",
    "run_pipeline",
]

logger = logging.getLogger(__name__)


class BatchWriter(Protocol):
    @property
    def table_name(self) -> str: ...

    def write_batch(self, items: Sequence[WriteItem]) -> BatchWriteResult: ...


def _object_error(
    error_log: ErrorLogBuffer, key: str, sheet: str, error_type: str, message: str
) -> None:
    error_log.append(ErrorRecord.create(key, sheet, OBJECT_LEVEL_ROW, error_type, message))


def _flush_error_log(error_log: ErrorLogBuffer) -> None:
    # 出力先未設定ならプロセスログのみ
    if not error_log.enabled:
        return
    pending = len(error_log)
    try:
        path = error_log.flush()
    except OSError as e:
        # エラーログ書き込み失敗で run 自体は失敗させない
        logger.warning(f"failed to write error log: {e}")
        return
    logger.debug(f"error log: {pending} records -> {path}")


def run_pipeline(
    event: Any,
    source: ObjectSource,
    table: BatchWriter,
    *,
    batch_size: int = MAX_BATCH_SIZE,
    error_log: ErrorLogBuffer | None = None,
    batch_stats: BatchStatsAccumulator | None = None,
    show_progress: bool = False,
) -> RunResult:
    """Run one invocation end to end.

    Args:
        event: S3 ObjectCreated notification (only the first record is used)
        source: object source returning whole-object bytes
        table: batch writer (one call per batch)
        batch_size: max items per batch (1..25)
        error_log: buffer receiving ErrorRecords; flushed before returning
        batch_stats: accumulator fed by the table's metrics callback; its
            statistics are copied into the summary
        show_progress: display a tqdm bar for batch writes (TTY only)

    Returns:
        RunResult describing the terminal state, counts, diagnostics and the
        per-batch ledger
    """
    start_time = datetime.now(UTC)
    if error_log is None:
        error_log = ErrorLogBuffer()

    ref: ObjectRef | None = None
    counts: dict[str, int] = {}
    errors: list[str] = []
    ledger: list[BatchOutcome] = []

    def finish(status: RunStatus, cause: str | None = None) -> RunResult:
        _flush_error_log(error_log)
        total_batches, avg_batch, p95_batch = (
            batch_stats.get_stats() if batch_stats is not None else (0, 0.0, 0.0)
        )
        summary = RunSummary(
            rows_read=counts.get("rows_read", 0),
            rows_valid=counts.get("rows_valid", 0),
            rows_invalid=counts.get("rows_invalid", 0),
            batches_written=sum(1 for b in ledger if b.status is BatchStatus.WRITTEN),
            items_written=counts.get("items_written", 0),
            items_unprocessed=counts.get("items_unprocessed", 0),
            errors=list(errors),
            total_batches=total_batches or len(ledger),
            avg_batch_seconds=avg_batch,
            p95_batch_seconds=p95_batch,
        )
        logger.debug(f"run finished status={status.value} cause={cause}")
        return RunResult(
            status=status,
            bucket=ref.bucket if ref else None,
            key=ref.key if ref else None,
            summary=summary,
            start_time=start_time,
            end_time=datetime.now(UTC),
            batches=list(ledger),
            cause=cause,
        )

    # 1. event
    try:
        ref = parse_trigger_event(event)
    except MalformedEventError as e:
        return finish(RunStatus.MALFORMED_EVENT, cause=str(e))
    logger.debug(f"processing s3://{ref.bucket}/{ref.key}")

    # 2. fetch
    try:
        data = source.fetch(ref.bucket, ref.key)
    except ObjectFetchError as e:
        _object_error(error_log, ref.key, "", "FETCH_ERROR", str(e))
        return finish(RunStatus.FAILED, cause=str(e))

    # 3. decode (先頭シートのみ)
    try:
        workbook = open_workbook(data, ref.key)
    except WorkbookDecodeError as e:
        _object_error(error_log, ref.key, "", "DECODE_ERROR", str(e))
        return finish(RunStatus.FAILED, cause=str(e))
    if not workbook.sheet_names:
        return finish(RunStatus.EMPTY_WORKBOOK)
    sheet_name = workbook.sheet_names[0]

    # 4. rows
    try:
        rows = sheet_to_raw_rows(workbook.parse(sheet_name))
    except WorkbookDecodeError as e:
        _object_error(error_log, ref.key, sheet_name, "DECODE_ERROR", str(e))
        return finish(RunStatus.FAILED, cause=str(e))
    counts["rows_read"] = len(rows)
    if not rows:
        return finish(RunStatus.EMPTY_SHEET)

    # 5. validate
    valid_items: list[WriteItem] = []
    for outcome in validate_rows(rows):
        if isinstance(outcome, Valid):
            valid_items.append(outcome.record.to_write_item())
        elif isinstance(outcome, Invalid):
            errors.append(outcome.message)
            error_log.append(
                ErrorRecord.create(
                    ref.key, sheet_name, outcome.row, REASON_CODES[outcome.reason], outcome.message
                )
            )
    counts["rows_valid"] = len(valid_items)
    counts["rows_invalid"] = len(errors)
    if not valid_items:
        return finish(RunStatus.NO_VALID_ROWS)

    # 6-7. partition & sequential write
    batches = partition(valid_items, batch_size)
    written = 0
    unprocessed = 0
    failure: str | None = None
    progress = BatchProgress(len(batches)) if show_progress else None
    try:
        for index, batch in enumerate(batches):
            bounds = {"first_user_id": batch[0].user_id, "last_user_id": batch[-1].user_id}
            if failure is not None:
                ledger.append(BatchOutcome(index, len(batch), BatchStatus.SKIPPED, **bounds))
                continue
            try:
                res = table.write_batch(batch)
            except StoreWriteError as e:
                failure = str(e)
                ledger.append(
                    BatchOutcome(index, len(batch), BatchStatus.FAILED, error=failure, **bounds)
                )
                _object_error(error_log, ref.key, sheet_name, "STORE_WRITE_ERROR",
                              f"batch {index}: {failure}")
                continue
            written += res.written
            unprocessed += res.unprocessed
            ledger.append(
                BatchOutcome(index, len(batch), BatchStatus.WRITTEN,
                             unprocessed=res.unprocessed, **bounds)
            )
            if progress is not None:
                progress.advance(written)
    finally:
        if progress is not None:
            progress.close()

    counts["items_written"] = written
    counts["items_unprocessed"] = unprocessed
    if failure is not None:
        return finish(RunStatus.FAILED, cause=failure)
    return finish(RunStatus.COMPLETED)

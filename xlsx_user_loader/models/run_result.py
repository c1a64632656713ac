from __future__ import annotations

import statistics
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

"""Run result models for one pipeline invocation.

The orchestrator never raises for expected failures; it returns a RunResult and
lets the host adapter decide how to report it.

State transitions (linear):
    start → event validated → object fetched → decoded → rows extracted →
    validated → (no valid rows | batches written) → done
Any failure jumps straight to done with status FAILED / MALFORMED_EVENT.
"""

__all__ = [
    "RunStatus",
    "BatchStatus",
    "BatchOutcome",
    "RunSummary",
    "RunResult",
    "BatchStatsAccumulator",
]


class RunStatus(Enum):
    """Terminal status of a run.

    - COMPLETED: every batch was written (rows may still have been skipped)
    - MALFORMED_EVENT: trigger lacked bucket/key
    - EMPTY_WORKBOOK: workbook has no sheets
    - EMPTY_SHEET: first sheet has no data rows
    - NO_VALID_ROWS: all rows failed validation, nothing written
    - FAILED: fetch/decode/store failure (see ``cause``)
    """
    COMPLETED = "completed"
    MALFORMED_EVENT = "malformed_event"
    EMPTY_WORKBOOK = "empty_workbook"
    EMPTY_SHEET = "empty_sheet"
    NO_VALID_ROWS = "no_valid_rows"
    FAILED = "failed"


class BatchStatus(Enum):
    WRITTEN = "written"
    FAILED = "failed"
    SKIPPED = "skipped"  # 先行バッチ失敗のため未送信


@dataclass(frozen=True)
class BatchOutcome:
    """Ledger entry for one batch write."""
    index: int  # 0-based batch number
    size: int
    status: BatchStatus
    first_user_id: str | None = None
    last_user_id: str | None = None
    unprocessed: int = 0  # UnprocessedItems 件数 (再送しない)
    error: str | None = None


@dataclass(frozen=True)
class RunSummary:
    rows_read: int = 0
    rows_valid: int = 0
    rows_invalid: int = 0
    batches_written: int = 0
    items_written: int = 0
    items_unprocessed: int = 0
    errors: list[str] = field(default_factory=list)
    # batch timing
    total_batches: int = 0
    avg_batch_seconds: float = 0.0
    p95_batch_seconds: float = 0.0


@dataclass(frozen=True)
class RunResult:
    status: RunStatus
    bucket: str | None
    key: str | None
    summary: RunSummary
    start_time: datetime
    end_time: datetime
    batches: list[BatchOutcome] = field(default_factory=list)
    cause: str | None = None  # FAILED 時の原因

    @property
    def ok(self) -> bool:
        return self.status is RunStatus.COMPLETED

    @property
    def elapsed_seconds(self) -> float:
        return (self.end_time - self.start_time).total_seconds()


class BatchStatsAccumulator:
    """Collects per-batch timings and reduces them to summary statistics."""

    def __init__(self) -> None:
        self.batch_times: list[float] = []

    def add_batch_time(self, elapsed_seconds: float) -> None:
        self.batch_times.append(elapsed_seconds)

    def get_stats(self) -> tuple[int, float, float]:
        """Return ``(total_batches, avg_batch_seconds, p95_batch_seconds)``."""
        if not self.batch_times:
            return (0, 0.0, 0.0)

        total_batches = len(self.batch_times)
        avg_batch_seconds = statistics.mean(self.batch_times)

        if total_batches == 1:
            p95_batch_seconds = self.batch_times[0]
        else:
            # 20 分位の 19 番目 = p95
            p95_batch_seconds = statistics.quantiles(
                self.batch_times, n=20, method='inclusive'
            )[18]

        return (total_batches, avg_batch_seconds, p95_batch_seconds)

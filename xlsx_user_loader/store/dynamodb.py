from __future__ import annotations

import logging
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any

from botocore.exceptions import BotoCoreError, ClientError

from ..errors import StoreWriteError
from ..models.user_record import WriteItem
from ..services.partition import MAX_BATCH_SIZE

"""DynamoDB batch writer.

One BatchWriteItem call per batch of at most 25 put requests. Puts are upserts
keyed by ``userId`` (last write wins). A rejected call raises StoreWriteError;
items DynamoDB returns as UnprocessedItems are counted, not retried.

``metrics_callback`` receives BatchMetrics for every attempted call (also on
failure), e.g. to feed BatchStatsAccumulator:

    acc = BatchStatsAccumulator()
    table = UserTable(client, "userTable",
                      metrics_callback=lambda m: acc.add_batch_time(m.elapsed_seconds))
"""

__all__ = [
    "BatchMetrics",
    "BatchWriteResult",
    "UserTable",
    "DryRunTable",
]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BatchMetrics:
    """Timing for a single batch write call."""
    batch_size: int
    elapsed_seconds: float
    start_time: float  # time.time()
    end_time: float


@dataclass(frozen=True)
class BatchWriteResult:
    written: int
    unprocessed: int = 0


class UserTable:
    """Thin wrapper over a shared boto3 DynamoDB client for one table."""

    def __init__(
        self,
        client: Any,
        table_name: str,
        metrics_callback: Callable[[BatchMetrics], None] | None = None,
    ) -> None:
        self._ddb = client
        self._table_name = table_name
        self._metrics_callback = metrics_callback

    @property
    def table_name(self) -> str:
        return self._table_name

    def write_batch(self, items: Sequence[WriteItem]) -> BatchWriteResult:
        if not items:
            return BatchWriteResult(written=0)
        if len(items) > MAX_BATCH_SIZE:
            raise ValueError(f"batch of {len(items)} exceeds {MAX_BATCH_SIZE} items")

        request = {self._table_name: [item.to_put_request() for item in items]}
        start_time = time.time()
        try:
            resp = self._ddb.batch_write_item(RequestItems=request)
        except (ClientError, BotoCoreError) as e:
            raise StoreWriteError(f"batch_write_item on {self._table_name}: {e}") from e
        finally:
            end_time = time.time()
            if self._metrics_callback is not None:
                self._metrics_callback(
                    BatchMetrics(
                        batch_size=len(items),
                        elapsed_seconds=end_time - start_time,
                        start_time=start_time,
                        end_time=end_time,
                    )
                )

        unprocessed = len((resp or {}).get("UnprocessedItems", {}).get(self._table_name, []))
        if unprocessed:
            logger.debug("batch_write_item left %d unprocessed items", unprocessed)
        return BatchWriteResult(written=len(items) - unprocessed, unprocessed=unprocessed)


class DryRunTable:
    """Accepts every batch without contacting the store (CLI --dry-run)."""

    def __init__(self, table_name: str = "dry-run") -> None:
        self._table_name = table_name
        self.batches: list[list[WriteItem]] = []

    @property
    def table_name(self) -> str:
        return self._table_name

    def write_batch(self, items: Sequence[WriteItem]) -> BatchWriteResult:
        self.batches.append(list(items))
        return BatchWriteResult(written=len(items))

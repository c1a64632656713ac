from __future__ import annotations

from ..models.run_result import RunResult

"""SUMMARY line rendering.

Format:
SUMMARY status={status} rows={read} valid={valid} invalid={invalid}
batches={written}/{total} written={items} unprocessed={n} elapsed_sec={elapsed}
"""


def _format_seconds(value: float) -> str:
    if value == 0:
        return "0"
    if value == int(value):
        return str(int(value))
    if value < 0.01:
        # 指数表記回避
        return f"{value:.6f}".rstrip('0').rstrip('.')
    return f"{value:.3f}".rstrip('0').rstrip('.')


def render_summary_line(result: RunResult) -> str:
    """Render the one-line run summary (including the ``SUMMARY`` label).

    Examples:
        >>> from datetime import datetime, timezone
        >>> from xlsx_user_loader.models.run_result import RunStatus, RunSummary
        >>> t0 = datetime(2024, 1, 1, 10, 0, 0, tzinfo=timezone.utc)
        >>> t1 = datetime(2024, 1, 1, 10, 0, 2, tzinfo=timezone.utc)
        >>> summary = RunSummary(rows_read=3, rows_valid=2, rows_invalid=1,
        ...                      batches_written=1, items_written=2, total_batches=1)
        >>> r = RunResult(RunStatus.COMPLETED, "b", "k.xlsx", summary, t0, t1)
        >>> render_summary_line(r)
        'SUMMARY status=completed rows=3 valid=2 invalid=1 batches=1/1 written=2 unprocessed=0 elapsed_sec=2'
    """
    s = result.summary
    total_batches = len(result.batches) if result.batches else s.total_batches
    return (
        f"SUMMARY status={result.status.value} "
        f"rows={s.rows_read} "
        f"valid={s.rows_valid} "
        f"invalid={s.rows_invalid} "
        f"batches={s.batches_written}/{total_batches} "
        f"written={s.items_written} "
        f"unprocessed={s.items_unprocessed} "
        f"elapsed_sec={_format_seconds(result.elapsed_seconds)}"
    )

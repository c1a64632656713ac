from __future__ import annotations

import logging

from ..logging.init import log_summary
from ..models.run_result import BatchStatus, RunResult, RunStatus
from .summary import render_summary_line

"""Log a RunResult the way operators read it in CloudWatch.

The message texts for the structural outcomes are what existing log filters and
alarms match on; keep them stable.
"""

__all__ = [
    "report_result",
]

MSG_INVALID_EVENT = "Invalid event format"
MSG_NO_SHEETS = "No sheets found in Excel file."
MSG_EMPTY_SHEET = "Excel sheet is empty."
MSG_NO_VALID = "No valid records found."
MSG_FAILED = "Lambda failed"


def _log_skipped(logger: logging.Logger, errors: list[str]) -> None:
    if errors:
        logger.warning(f"skipped {len(errors)} rows: {errors}")


def report_result(result: RunResult, logger: logging.Logger) -> None:
    s = result.summary
    status = result.status

    if status is RunStatus.MALFORMED_EVENT:
        logger.error(MSG_INVALID_EVENT)
    elif status is RunStatus.EMPTY_WORKBOOK:
        logger.error(MSG_NO_SHEETS)
    elif status is RunStatus.EMPTY_SHEET:
        logger.error(MSG_EMPTY_SHEET)
    elif status is RunStatus.NO_VALID_ROWS:
        logger.warning(MSG_NO_VALID)
        # 全行不正でも診断一覧を出力
        _log_skipped(logger, s.errors)
    elif status is RunStatus.COMPLETED:
        logger.info(f"Uploaded {s.items_written} records to DynamoDB.")
        if s.items_unprocessed:
            logger.warning(f"{s.items_unprocessed} items were left unprocessed by DynamoDB")
        _log_skipped(logger, s.errors)
    else:
        if s.items_written:
            logger.info(f"Uploaded {s.items_written} records to DynamoDB before failure.")
        for b in result.batches:
            if b.status is BatchStatus.FAILED:
                logger.error(
                    f"batch {b.index} failed ({b.size} items, userId "
                    f"{b.first_user_id}..{b.last_user_id}): {b.error}"
                )
            elif b.status is BatchStatus.SKIPPED:
                logger.warning(
                    f"batch {b.index} not attempted ({b.size} items, userId "
                    f"{b.first_user_id}..{b.last_user_id})"
                )
        logger.error(f"{MSG_FAILED}: {result.cause}")
        _log_skipped(logger, s.errors)

    # log_summary が "SUMMARY " ラベルを付与する
    log_summary(render_summary_line(result)[len("SUMMARY "):])

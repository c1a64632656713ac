from __future__ import annotations

from datetime import UTC, datetime

from xlsx_user_loader.logging.init import setup_logging
from xlsx_user_loader.models.run_result import (
    BatchOutcome,
    BatchStatus,
    RunResult,
    RunStatus,
    RunSummary,
)
from xlsx_user_loader.services.report import report_result

T0 = datetime(2024, 1, 1, tzinfo=UTC)


def _result(status: RunStatus, **summary) -> RunResult:
    batches = summary.pop("batches", [])
    cause = summary.pop("cause", None)
    return RunResult(status, "uploads", "users.xlsx", RunSummary(**summary), T0, T0,
                     batches=batches, cause=cause)


def _report(result: RunResult, capsys) -> list[str]:
    report_result(result, setup_logging())
    return capsys.readouterr().out.strip().splitlines()


def test_completed(capsys):
    lines = _report(_result(RunStatus.COMPLETED, rows_read=3, rows_valid=3,
                            items_written=3, batches_written=1), capsys)
    assert lines[0] == "INFO Uploaded 3 records to DynamoDB."
    assert lines[-1].startswith("SUMMARY status=completed rows=3 valid=3 invalid=0")


def test_completed_with_skipped_rows(capsys):
    lines = _report(_result(RunStatus.COMPLETED, rows_read=3, rows_valid=2, rows_invalid=1,
                            items_written=2, errors=["Row 4: Invalid 'email'"]), capsys)
    assert lines[0] == "INFO Uploaded 2 records to DynamoDB."
    assert lines[1] == "WARN skipped 1 rows: [\"Row 4: Invalid 'email'\"]"


def test_completed_with_unprocessed(capsys):
    lines = _report(_result(RunStatus.COMPLETED, items_written=24, items_unprocessed=1), capsys)
    assert "WARN 1 items were left unprocessed by DynamoDB" in lines


def test_structural_messages(capsys):
    assert _report(_result(RunStatus.MALFORMED_EVENT), capsys)[0] == "ERROR Invalid event format"
    assert _report(_result(RunStatus.EMPTY_WORKBOOK), capsys)[0] == "ERROR No sheets found in Excel file."
    assert _report(_result(RunStatus.EMPTY_SHEET), capsys)[0] == "ERROR Excel sheet is empty."


def test_no_valid_rows_surfaces_diagnostics(capsys):
    lines = _report(_result(RunStatus.NO_VALID_ROWS, rows_read=1, rows_invalid=1,
                            errors=["Row 2: Empty row"]), capsys)
    assert lines[0] == "WARN No valid records found."
    assert lines[1] == "WARN skipped 1 rows: ['Row 2: Empty row']"


def test_failed_reports_ledger(capsys):
    batches = [
        BatchOutcome(0, 25, BatchStatus.WRITTEN, "1", "25"),
        BatchOutcome(1, 25, BatchStatus.FAILED, "26", "50", error="throttled"),
        BatchOutcome(2, 3, BatchStatus.SKIPPED, "51", "53"),
    ]
    lines = _report(_result(RunStatus.FAILED, items_written=25, batches_written=1,
                            batches=batches, cause="throttled"), capsys)
    assert lines[0] == "INFO Uploaded 25 records to DynamoDB before failure."
    assert lines[1] == "ERROR batch 1 failed (25 items, userId 26..50): throttled"
    assert lines[2] == "WARN batch 2 not attempted (3 items, userId 51..53)"
    assert lines[3] == "ERROR Lambda failed: throttled"
    assert lines[-1].startswith("SUMMARY status=failed")
    assert "batches=1/3" in lines[-1]

from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import UTC, datetime

"""ErrorRecord model for structured error logging.

Each skipped row (and each object-level failure) becomes one record. ``row`` is
the spreadsheet row number as displayed to users; -1 marks object-level errors
where no row applies.
"""

__all__ = [
    "ErrorRecord",
    "OBJECT_LEVEL_ROW",
]

OBJECT_LEVEL_ROW = -1


@dataclass(frozen=True)
class ErrorRecord:
    """Structured error record for JSON Lines logging.

    Attributes:
        timestamp: ISO8601 UTC timestamp with 'Z' suffix
        object_key: Object key of the workbook being processed
        sheet: Sheet name (empty when the failure precedes decoding)
        row: Displayed row number, or -1 for object-level errors
        error_type: Error classification in UPPER_SNAKE_CASE format
        message: Diagnostic text
    """
    timestamp: str
    object_key: str
    sheet: str
    row: int
    error_type: str
    message: str

    @staticmethod
    def create(object_key: str, sheet: str, row: int, error_type: str, message: str) -> ErrorRecord:
        ts = datetime.now(UTC).isoformat().replace("+00:00", "Z")
        return ErrorRecord(
            timestamp=ts,
            object_key=object_key,
            sheet=sheet,
            row=row,
            error_type=error_type,
            message=message,
        )

    def to_json_line(self) -> str:
        # 追加キー禁止: dataclass のフィールドのみ出力
        return json.dumps(asdict(self), ensure_ascii=False)

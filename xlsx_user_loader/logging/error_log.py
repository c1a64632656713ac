from __future__ import annotations

from datetime import UTC, datetime
from pathlib import Path

from ..models.error_record import ErrorRecord

"""Error log buffering.

Records are buffered for the whole run and written once as JSON Lines to
``<dir>/errors-YYYYMMDD-HHMMSS.log`` (UTC). Without a directory the buffer only
collects (Lambda default; the diagnostics still reach the process log).
"""

__all__ = [
    "ErrorRecord",
    "ErrorLogBuffer",
]

TIMESTAMP_FMT = "%Y%m%d-%H%M%S"


class ErrorLogBuffer:
    """In-memory buffer for error records. Flush appends JSON Lines.

    - ファイルパスは初回 flush で決定 (以後同じファイルへ追記)
    - シリアル実行前提 (スレッド安全性なし)
    """
    def __init__(self, directory: Path | None = None) -> None:
        self._directory = directory
        self._records: list[ErrorRecord] = []
        self._file_path: Path | None = None

    @property
    def enabled(self) -> bool:
        return self._directory is not None

    @property
    def file_path(self) -> Path | None:
        if self._directory is None:
            return None
        if self._file_path is None:
            self._directory.mkdir(parents=True, exist_ok=True)
            stamp = datetime.now(UTC).strftime(TIMESTAMP_FMT)
            self._file_path = self._directory / f"errors-{stamp}.log"
        return self._file_path

    def append(self, record: ErrorRecord) -> None:
        self._records.append(record)

    def __len__(self) -> int:
        return len(self._records)

    def flush(self) -> Path | None:
        """Write buffered records; returns the file path (None when disabled)."""
        fp = self.file_path
        if fp is None or not self._records:
            return fp
        with fp.open("a", encoding="utf-8") as f:
            for r in self._records:
                f.write(r.to_json_line() + "\n")
        self._records.clear()
        return fp

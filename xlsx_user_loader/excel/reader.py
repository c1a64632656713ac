from __future__ import annotations

import io
from dataclasses import dataclass, field
from pathlib import PurePosixPath
from typing import Any

import pandas as pd

from ..errors import WorkbookDecodeError
from ..models.raw_row import COLUMNS, RawRow

"""Workbook decoding on top of pandas.

- 1行目はヘッダ行としてスキップ (内容は参照せず固定列順を適用)
- 2行目以降がデータ行。全セル空の行はスキップ
- 列 A..D = userId, name, email, profileImageUrl。E 以降は無視

Cells are read with ``dtype=object`` so integers stay integers, and only truly
empty cells become missing ("NA" / "null" strings are kept as text).

xlsx is read with openpyxl and legacy xls with xlrd (pandas picks the engine
from the content). Objects whose name ends in ``.csv`` are read as a single
sheet named ``Sheet1``; every CSV cell is text.
"""

__all__ = [
    "CSV_SHEET_NAME",
    "Workbook",
    "open_workbook",
    "sheet_to_raw_rows",
]

HEADER_ROWS = 1
CSV_SHEET_NAME = "Sheet1"

# 全シート共通の読み取りオプション
_READ_OPTIONS: dict[str, Any] = {
    "header": None,
    "dtype": object,
    "keep_default_na": False,
    "na_values": [""],
}


@dataclass
class Workbook:
    """Decoded workbook: ordered sheet names plus lazy per-sheet parsing."""
    sheet_names: list[str]
    _xls: Any = None
    _frames: dict[str, pd.DataFrame] = field(default_factory=dict)

    def parse(self, sheet_name: str) -> pd.DataFrame:
        """Parse one sheet as a raw, header-less DataFrame."""
        if sheet_name in self._frames:
            return self._frames[sheet_name]
        try:
            return self._xls.parse(sheet_name, **_READ_OPTIONS)
        except Exception as e:
            raise WorkbookDecodeError(f"failed to parse sheet '{sheet_name}': {e}") from e


def _read_csv(data: bytes) -> Workbook:
    try:
        df = pd.read_csv(
            io.BytesIO(data),
            encoding="utf-8-sig",
            skip_blank_lines=False,
            **_READ_OPTIONS,
        )
    except pd.errors.EmptyDataError:
        df = pd.DataFrame()
    except ValueError as e:
        raise WorkbookDecodeError(f"failed to read csv: {e}") from e
    return Workbook(sheet_names=[CSV_SHEET_NAME], _frames={CSV_SHEET_NAME: df})


def open_workbook(data: bytes, name: str | None = None) -> Workbook:
    """Decode an in-memory workbook buffer.

    Args:
        data: whole object bytes
        name: object key or file name; a ``.csv`` suffix selects the CSV reader

    Raises:
        WorkbookDecodeError: the buffer is not a readable workbook
    """
    if name is not None and PurePosixPath(name).suffix.lower() == ".csv":
        return _read_csv(data)
    try:
        xls = pd.ExcelFile(io.BytesIO(data))
    except Exception as e:
        raise WorkbookDecodeError(f"failed to read workbook: {e}") from e
    return Workbook(sheet_names=[str(n) for n in xls.sheet_names], _xls=xls)


def _to_python(value: Any) -> Any:
    if value is None:
        return None
    if not isinstance(value, str) and pd.isna(value):
        return None
    if isinstance(value, pd.Timestamp):
        return value.to_pydatetime()
    # numpy scalar -> python scalar
    if hasattr(value, "item") and not isinstance(value, (str, bytes)):
        try:
            return value.item()
        except (TypeError, ValueError):
            return value
    return value


def sheet_to_raw_rows(df: pd.DataFrame) -> list[RawRow]:
    """Convert a raw sheet DataFrame into RawRows (header row skipped)."""
    rows: list[RawRow] = []
    data_part = df.iloc[HEADER_ROWS:]
    for _, raw in data_part.iterrows():
        cells = [_to_python(v) for v in raw.tolist()[:len(COLUMNS)]]
        if all(c is None for c in cells):
            continue
        cells += [None] * (len(COLUMNS) - len(cells))
        rows.append(RawRow(*cells))
    return rows

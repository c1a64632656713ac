from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from .user_record import UserRecord

"""Validation outcome variants returned by the row validator."""

__all__ = [
    "Valid",
    "Invalid",
    "ValidationOutcome",
    "display_row",
]

# データ行 index 0 はシート 2 行目 (1 行目はヘッダ)
HEADER_OFFSET = 2


def display_row(index: int) -> int:
    """Spreadsheet row number shown to users for a 0-based data row index."""
    return index + HEADER_OFFSET


@dataclass(frozen=True)
class Valid:
    index: int
    record: UserRecord

    ok = True


@dataclass(frozen=True)
class Invalid:
    index: int
    reason: str

    ok = False

    @property
    def row(self) -> int:
        return display_row(self.index)

    @property
    def message(self) -> str:
        return f"Row {self.row}: {self.reason}"


ValidationOutcome = Union[Valid, Invalid]

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

"""RawRow model: one decoded sheet row before validation.

Values are whatever the workbook decoder produced (str, int, float, bool,
datetime ...) or ``None`` for an absent/empty cell. No coercion happens here;
the validator decides what is acceptable.
"""

__all__ = [
    "COLUMNS",
    "RawRow",
]

# 固定列順 (ヘッダ行の内容は参照しない)
COLUMNS: tuple[str, ...] = ("userId", "name", "email", "profileImageUrl")

@dataclass(frozen=True)
class RawRow:
    """Typed optional-field view of a sheet row (fixed column order)."""
    user_id: Any = None
    name: Any = None
    email: Any = None
    profile_image_url: Any = None

    def values(self) -> tuple[Any, ...]:
        return (self.user_id, self.name, self.email, self.profile_image_url)

    def as_dict(self) -> dict[str, Any]:
        return dict(zip(COLUMNS, self.values()))

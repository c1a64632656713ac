from __future__ import annotations

from dataclasses import dataclass
from typing import Any

"""UserRecord / WriteItem models.

UserRecord is a row that passed validation; WriteItem is its store-ready form
with every attribute stringified. The DynamoDB attribute names (``userId``,
``name``, ``email``, ``profileImage``) are the table's existing schema.
"""

__all__ = [
    "UserRecord",
    "WriteItem",
]


def _stringify_user_id(value: str | int | float) -> str:
    # Excel は数値を float で返すことがある: 7.0 -> "7"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


@dataclass(frozen=True)
class UserRecord:
    user_id: str | int | float
    name: str
    email: str
    profile_image_url: str | None = None

    def to_write_item(self) -> WriteItem:
        return WriteItem(
            user_id=_stringify_user_id(self.user_id),
            name=self.name,
            email=self.email,
            profile_image=self.profile_image_url or "",
        )


@dataclass(frozen=True)
class WriteItem:
    """Store-ready user item; all attributes are strings."""
    user_id: str
    name: str
    email: str
    profile_image: str = ""

    def to_attribute_map(self) -> dict[str, dict[str, str]]:
        """Low-level DynamoDB attribute-value map (string attributes only)."""
        return {
            "userId": {"S": self.user_id},
            "name": {"S": self.name},
            "email": {"S": self.email},
            "profileImage": {"S": self.profile_image},
        }

    def to_put_request(self) -> dict[str, Any]:
        return {"PutRequest": {"Item": self.to_attribute_map()}}

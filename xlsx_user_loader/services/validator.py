from __future__ import annotations

import math
import re
from collections.abc import Iterable
from typing import Any

from ..models.raw_row import RawRow
from ..models.user_record import UserRecord
from ..models.validation import Invalid, Valid, ValidationOutcome

"""Row validator: RawRow -> Valid | Invalid.

Checks run in a fixed order and the first failure decides the reason:

1. empty row
2. userId  (non-empty str or number)
3. name    (non-empty str)
4. email   (local@domain.tld shape)
5. profileImageUrl (only when set; http/https URL)

Truthiness follows spreadsheet semantics: None, "", 0 and NaN count as unset.
bool is never accepted as a number.
"""

__all__ = [
    "EMPTY_ROW",
    "INVALID_USER_ID",
    "INVALID_NAME",
    "INVALID_EMAIL",
    "INVALID_PROFILE_IMAGE_URL",
    "REASON_CODES",
    "is_row_empty",
    "is_valid_email",
    "is_valid_url",
    "validate_row",
    "validate_rows",
]

EMPTY_ROW = "Empty row"
INVALID_USER_ID = "Missing or invalid 'userId'"
INVALID_NAME = "Missing or invalid 'name'"
INVALID_EMAIL = "Invalid 'email'"
INVALID_PROFILE_IMAGE_URL = "Invalid 'profileImageUrl'"

# reason -> ErrorRecord.error_type
REASON_CODES = {
    EMPTY_ROW: "EMPTY_ROW",
    INVALID_USER_ID: "INVALID_USER_ID",
    INVALID_NAME: "INVALID_NAME",
    INVALID_EMAIL: "INVALID_EMAIL",
    INVALID_PROFILE_IMAGE_URL: "INVALID_PROFILE_IMAGE_URL",
}

_EMAIL_RE = re.compile(r"[^\s@]+@[^\s@]+\.[^\s@]+")
_URL_RE = re.compile(r"https?://[^\s]+")


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _is_set(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, float) and math.isnan(value):
        return False
    if isinstance(value, (str, int, float)):
        return bool(value)
    return True


def is_row_empty(row: RawRow) -> bool:
    return all(v is None or v == "" for v in row.values())


def is_valid_email(value: str) -> bool:
    return _EMAIL_RE.fullmatch(value) is not None


def is_valid_url(value: str) -> bool:
    return _URL_RE.fullmatch(value) is not None


def validate_row(row: RawRow, index: int) -> ValidationOutcome:
    """Validate one data row.

    Parameters
    ----------
    row: decoded row
    index: 0-based position among data rows (header excluded)
    """
    if is_row_empty(row):
        return Invalid(index, EMPTY_ROW)

    user_id = row.user_id
    if not _is_set(user_id) or not (isinstance(user_id, str) or _is_number(user_id)):
        return Invalid(index, INVALID_USER_ID)

    name = row.name
    if not _is_set(name) or not isinstance(name, str):
        return Invalid(index, INVALID_NAME)

    email = row.email
    if not _is_set(email) or not isinstance(email, str) or not is_valid_email(email):
        return Invalid(index, INVALID_EMAIL)

    url = row.profile_image_url
    if _is_set(url) and not (isinstance(url, str) and is_valid_url(url)):
        return Invalid(index, INVALID_PROFILE_IMAGE_URL)

    return Valid(
        index,
        UserRecord(
            user_id=user_id,
            name=name,
            email=email,
            profile_image_url=url if _is_set(url) else None,
        ),
    )


def validate_rows(rows: Iterable[RawRow]) -> list[ValidationOutcome]:
    """One outcome per row, input order preserved."""
    return [validate_row(row, i) for i, row in enumerate(rows)]

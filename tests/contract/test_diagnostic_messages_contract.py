from __future__ import annotations

import re

import pytest

from xlsx_user_loader.models.raw_row import RawRow
from xlsx_user_loader.services.validator import validate_row

"""Contract: per-row diagnostic strings.

Downstream alerting parses ``Row <n>: <reason>`` where n is the spreadsheet row
(header = row 1, first data row = row 2). The reason texts are fixed.
"""

DIAGNOSTIC_PATTERN = re.compile(
    r"^Row (?P<row>[0-9]+): (?P<reason>Empty row|Missing or invalid 'userId'|"
    r"Missing or invalid 'name'|Invalid 'email'|Invalid 'profileImageUrl')$"
)

CASES = [
    (RawRow(), "Empty row"),
    (RawRow(None, "A", "a@b.co"), "Missing or invalid 'userId'"),
    (RawRow(1, None, "a@b.co"), "Missing or invalid 'name'"),
    (RawRow(1, "A", "foo@bar"), "Invalid 'email'"),
    (RawRow(1, "A", "a@b.co", "ftp://x.com"), "Invalid 'profileImageUrl'"),
]


@pytest.mark.parametrize("row,reason", CASES)
@pytest.mark.parametrize("index", [0, 1, 98])
def test_diagnostic_format(row, reason, index):
    message = validate_row(row, index).message
    m = DIAGNOSTIC_PATTERN.match(message)
    assert m, message
    assert int(m.group("row")) == index + 2
    assert m.group("reason") == reason


def test_first_data_row_is_row_2():
    assert validate_row(RawRow(), 0).message == "Row 2: Empty row"

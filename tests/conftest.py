# Shared pytest fixtures
from __future__ import annotations

import io
from collections.abc import Sequence
from typing import Any

import pandas as pd
import pytest

from xlsx_user_loader.errors import ObjectFetchError
from xlsx_user_loader.logging.init import reset_logging
from xlsx_user_loader.store.dynamodb import BatchWriteResult

HEADER = ["userId", "name", "email", "profileImageUrl"]


def make_workbook_bytes(sheets: dict[str, list[list[object]]]) -> bytes:
    """Build a real .xlsx in memory. Rows are written verbatim (no header added)."""
    buf = io.BytesIO()
    with pd.ExcelWriter(buf, engine="openpyxl") as writer:
        for sheet_name, rows in sheets.items():
            pd.DataFrame(rows).to_excel(writer, sheet_name=sheet_name, header=False, index=False)
    return buf.getvalue()


def users_sheet(*rows: list[object]) -> bytes:
    return make_workbook_bytes({"Users": [HEADER, *rows]})


def s3_event(bucket: str | None = "uploads", key: str | None = "users.xlsx") -> dict[str, Any]:
    s3: dict[str, Any] = {"bucket": {}, "object": {}}
    if bucket is not None:
        s3["bucket"]["name"] = bucket
    if key is not None:
        s3["object"]["key"] = key
    return {"Records": [{"eventName": "ObjectCreated:Put", "s3": s3}]}


class FakeSource:
    """In-memory object source keyed by (bucket, key)."""

    def __init__(self, objects: dict[tuple[str, str], bytes] | None = None) -> None:
        self.objects = objects or {}
        self.calls: list[tuple[str, str]] = []

    def fetch(self, bucket: str, key: str) -> bytes:
        self.calls.append((bucket, key))
        try:
            return self.objects[(bucket, key)]
        except KeyError:
            raise ObjectFetchError(f"s3://{bucket}/{key}: NoSuchKey") from None


class FakeTable:
    """Records every batch; optionally fails on a given call number (0-based)."""

    def __init__(self, fail_on: int | None = None, unprocessed: int = 0) -> None:
        self.batches: list[list[Any]] = []
        self.fail_on = fail_on
        self.unprocessed = unprocessed

    @property
    def table_name(self) -> str:
        return "userTable"

    def write_batch(self, items: Sequence[Any]) -> BatchWriteResult:
        from xlsx_user_loader.errors import StoreWriteError

        if self.fail_on is not None and len(self.batches) == self.fail_on:
            self.batches.append(list(items))
            raise StoreWriteError("ProvisionedThroughputExceededException")
        self.batches.append(list(items))
        return BatchWriteResult(written=len(items) - self.unprocessed, unprocessed=self.unprocessed)


@pytest.fixture(autouse=True)
def _reset_logging():
    reset_logging()
    yield
    reset_logging()


@pytest.fixture()
def fake_table() -> FakeTable:
    return FakeTable()


@pytest.fixture()
def make_workbook():
    return make_workbook_bytes


@pytest.fixture()
def users_workbook():
    """users_workbook(row, row, ...) -> xlsx bytes with the standard header row."""
    return users_sheet


@pytest.fixture()
def make_event():
    return s3_event


@pytest.fixture()
def source() -> FakeSource:
    return FakeSource()


@pytest.fixture()
def table_factory():
    """table_factory(fail_on=..., unprocessed=...) -> FakeTable."""
    return FakeTable

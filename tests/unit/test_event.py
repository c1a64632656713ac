from __future__ import annotations

import pytest

from xlsx_user_loader.errors import MalformedEventError
from xlsx_user_loader.services.event import ObjectRef, parse_trigger_event


def test_parse_first_record(make_event):
    assert parse_trigger_event(make_event("uploads", "users.xlsx")) == ObjectRef("uploads", "users.xlsx")


def test_key_plus_and_percent_decoding(make_event):
    ref = parse_trigger_event(make_event("b", "incoming/July+users%2B%28v2%29.xlsx"))
    assert ref.key == "incoming/July users+(v2).xlsx"


def test_non_ascii_key(make_event):
    ref = parse_trigger_event(make_event("b", "%E3%83%A6%E3%83%BC%E3%82%B6.xlsx"))
    assert ref.key == "ユーザ.xlsx"


def test_additional_records_ignored(make_event):
    event = make_event("first", "a.xlsx")
    event["Records"].append(make_event("second", "b.xlsx")["Records"][0])
    assert parse_trigger_event(event).bucket == "first"


@pytest.mark.parametrize("bucket,key", [(None, "a.xlsx"), ("b", None), ("", "a.xlsx"), ("b", "")])
def test_missing_bucket_or_key(make_event, bucket, key):
    with pytest.raises(MalformedEventError):
        parse_trigger_event(make_event(bucket, key))


@pytest.mark.parametrize("event", [
    {}, {"Records": []}, {"Records": [{}]}, {"Records": [{"s3": None}]}, None,
    {"Records": {"s3": {}}}, {"Records": "x"},
])
def test_structurally_broken_events(event):
    with pytest.raises(MalformedEventError):
        parse_trigger_event(event)

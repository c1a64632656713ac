from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any
from urllib.parse import unquote_plus

from ..errors import MalformedEventError

"""S3 ObjectCreated event parsing.

Only the first record is used; any further records in the same notification
are ignored. Object keys arrive URL-encoded with '+' for spaces.
"""

__all__ = [
    "ObjectRef",
    "parse_trigger_event",
]


@dataclass(frozen=True)
class ObjectRef:
    bucket: str
    key: str


def _dig(data: Any, *path: str) -> Any:
    for part in path:
        if not isinstance(data, Mapping):
            return None
        data = data.get(part)
    return data


def parse_trigger_event(event: Any) -> ObjectRef:
    """Extract bucket and decoded key from the first record.

    Raises:
        MalformedEventError: Records missing, not a list or empty, or bucket
            name / object key missing
    """
    records = event.get("Records") if isinstance(event, Mapping) else None
    if not isinstance(records, list) or not records:
        raise MalformedEventError("event has no Records")
    record = records[0]
    bucket = _dig(record, "s3", "bucket", "name")
    raw_key = _dig(record, "s3", "object", "key")
    if not bucket or not raw_key or not isinstance(bucket, str) or not isinstance(raw_key, str):
        raise MalformedEventError("event record lacks s3.bucket.name or s3.object.key")
    # unquote_plus: '+' -> ' ' を先に行ってから %XX をデコード
    return ObjectRef(bucket=bucket, key=unquote_plus(raw_key))

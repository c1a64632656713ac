from __future__ import annotations

from functools import lru_cache
from typing import Any

import boto3

"""Process-wide boto3 clients.

Built lazily on first use and reused for the lifetime of the process (across
warm Lambda invocations). boto3 clients are thread-safe; resources are not, so
only clients are shared.
"""

__all__ = [
    "get_s3_client",
    "get_dynamodb_client",
]


@lru_cache(maxsize=None)
def get_s3_client(region: str | None = None) -> Any:
    return boto3.client("s3", region_name=region)


@lru_cache(maxsize=None)
def get_dynamodb_client(region: str | None = None) -> Any:
    return boto3.client("dynamodb", region_name=region)

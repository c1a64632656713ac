from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Protocol

from botocore.exceptions import BotoCoreError, ClientError

from ..errors import ObjectFetchError

"""Object sources: whole-object reads returning raw bytes.

S3ObjectSource wraps a shared boto3 S3 client. LocalFileSource serves the CLI
when running against a workbook on disk (bucket is ignored, key is the path).
"""

__all__ = [
    "ObjectSource",
    "S3ObjectSource",
    "LocalFileSource",
]

logger = logging.getLogger(__name__)


class ObjectSource(Protocol):
    def fetch(self, bucket: str, key: str) -> bytes: ...


class S3ObjectSource:
    """Single GetObject read; no range requests, no resumption."""

    def __init__(self, client: Any) -> None:
        self._s3 = client

    def fetch(self, bucket: str, key: str) -> bytes:
        try:
            resp = self._s3.get_object(Bucket=bucket, Key=key)
            data = resp["Body"].read()
        except (ClientError, BotoCoreError) as e:
            logger.debug("S3 get_object failed bucket=%s key=%s", bucket, key, exc_info=True)
            raise ObjectFetchError(f"s3://{bucket}/{key}: {e}") from e
        logger.debug("fetched s3://%s/%s (%d bytes)", bucket, key, len(data))
        return data


class LocalFileSource:
    def fetch(self, bucket: str, key: str) -> bytes:
        path = Path(key)
        try:
            return path.read_bytes()
        except OSError as e:
            raise ObjectFetchError(f"{path}: {e}") from e

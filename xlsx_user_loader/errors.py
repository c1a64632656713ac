from __future__ import annotations

"""Typed exceptions for the loader.

Every failure that ends a run is an ``IngestError`` so the host adapter can tell
expected failures (logged with a short cause) from programming errors.
"""

__all__ = [
    "IngestError",
    "ConfigError",
    "MalformedEventError",
    "ObjectFetchError",
    "WorkbookDecodeError",
    "StoreWriteError",
]


class IngestError(Exception):
    """Base class for run-ending failures."""


class ConfigError(IngestError):
    """Configuration missing/invalid."""


class MalformedEventError(IngestError):
    """Trigger event lacks bucket name or object key."""


class ObjectFetchError(IngestError):
    """Object storage read failed (network, permission, not found)."""


class WorkbookDecodeError(IngestError):
    """Bytes could not be decoded as a workbook."""


class StoreWriteError(IngestError):
    """A batch write call was rejected by the store."""

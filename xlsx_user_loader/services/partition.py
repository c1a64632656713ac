from __future__ import annotations

from collections.abc import Sequence
from typing import TypeVar

"""Contiguous fixed-size batching.

DynamoDB BatchWriteItem accepts at most 25 put requests per call.
"""

__all__ = [
    "MAX_BATCH_SIZE",
    "partition",
]

MAX_BATCH_SIZE = 25

T = TypeVar("T")


def partition(items: Sequence[T], max_size: int = MAX_BATCH_SIZE) -> list[list[T]]:
    """Split ``items`` into ordered chunks of at most ``max_size``.

    Item ``i`` lands in batch ``i // max_size``; only the last batch may be
    smaller. Empty input gives an empty list.
    """
    if max_size < 1:
        raise ValueError(f"max_size must be >= 1 (got {max_size})")
    return [list(items[i:i + max_size]) for i in range(0, len(items), max_size)]

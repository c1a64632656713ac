from __future__ import annotations

import sys
from typing import Any

from tqdm import tqdm
from tqdm.std import tqdm as TqdmType

"""Batch write progress display with tqdm (TTY only).

In non-TTY environments (Lambda, CI) no bar is created, so no ANSI control
sequences end up in the log stream.
"""

__all__ = [
    "BatchProgress",
    "is_tty_enabled",
]


def is_tty_enabled() -> bool:
    return sys.stdout.isatty()


class BatchProgress:
    """One tick per batch write; postfix shows items written so far."""

    def __init__(self, total_batches: int, *, description: str = "Writing batches") -> None:
        self.total_batches = total_batches
        self.description = description
        self.completed = 0

        self.enabled = is_tty_enabled()
        self.pbar: TqdmType[Any] | None
        if self.enabled:
            self.pbar = tqdm(
                total=total_batches,
                desc=description,
                unit="batch",
                disable=False,
                leave=True,
                position=0,
                ncols=80,
                ascii=True,
            )
        else:
            self.pbar = None

    def advance(self, items_written: int) -> None:
        self.completed += 1
        if self.enabled and self.pbar is not None:
            self.pbar.update(1)
            self.pbar.set_postfix(written=items_written)

    def close(self) -> None:
        if self.enabled and self.pbar is not None:
            self.pbar.close()
            self.pbar = None

    def __enter__(self) -> BatchProgress:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()

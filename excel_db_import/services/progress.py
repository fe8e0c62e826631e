from __future__ import annotations

import sys
from typing import Any

from tqdm import tqdm
from tqdm.std import tqdm as TqdmType

from ..models.processing_result import BatchOutcome, BatchState

"""Insert progress display with tqdm (TTY only).

In non-TTY environments (CI, redirected output) no bar is created so the
labeled log lines stay clean.
"""

__all__ = [
    "BatchProgress",
    "is_tty_enabled",
]


def is_tty_enabled() -> bool:
    return sys.stdout.isatty()


class BatchProgress:
    """Progress bar over accepted rows, advanced once per finished batch.

    Usable as the ``on_batch`` callback of the batch inserter.
    """

    def __init__(self, total_rows: int, *, description: str = "Inserting rows") -> None:
        self.total_rows = total_rows
        self.description = description
        self.failed_batches = 0
        self.inserted_rows = 0

        self.enabled = is_tty_enabled()
        self.pbar: TqdmType[Any] | None
        if self.enabled:
            self.pbar = tqdm(
                total=total_rows,
                desc=description,
                unit="row",
                disable=False,
                leave=True,
                position=0,
                ncols=80,
                ascii=True,
            )
        else:
            self.pbar = None

    def __call__(self, outcome: BatchOutcome) -> None:
        if outcome.state is BatchState.FAILED:
            self.failed_batches += 1
        self.inserted_rows += outcome.inserted_rows
        if self.enabled and self.pbar is not None:
            self.pbar.update(outcome.size)
            self.pbar.set_postfix(inserted=self.inserted_rows, failed_batches=self.failed_batches)

    def close(self) -> None:
        if self.enabled and self.pbar is not None:
            self.pbar.close()
            self.pbar = None

    def __enter__(self) -> BatchProgress:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()

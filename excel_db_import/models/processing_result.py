from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

"""Result models for the insert step and for a whole import run.

A batch moves NOT_STARTED -> IN_FLIGHT -> (COMMITTED | FAILED). A FAILED
batch only makes the run *partial*; it never fails the run.
"""

__all__ = [
    "BatchState",
    "BatchOutcome",
    "InsertSummary",
    "ImportResult",
]


class BatchState(Enum):
    NOT_STARTED = "not_started"
    IN_FLIGHT = "in_flight"
    COMMITTED = "committed"
    FAILED = "failed"


@dataclass(frozen=True)
class BatchOutcome:
    """Outcome of one committed (or rolled back) batch."""
    index: int  # 1-based batch number
    first_row: int  # 0-based offset into the accepted rows
    size: int
    state: BatchState
    inserted_rows: int = 0
    error: str | None = None
    elapsed_seconds: float = 0.0


@dataclass(frozen=True)
class InsertSummary:
    """What the batch inserter did with the accepted rows."""
    statement: str
    batches: tuple[BatchOutcome, ...] = ()

    @property
    def inserted_rows(self) -> int:
        return sum(b.inserted_rows for b in self.batches if b.state is BatchState.COMMITTED)

    @property
    def committed_batches(self) -> int:
        return sum(1 for b in self.batches if b.state is BatchState.COMMITTED)

    @property
    def failed_batches(self) -> tuple[BatchOutcome, ...]:
        return tuple(b for b in self.batches if b.state is BatchState.FAILED)

    @property
    def partial(self) -> bool:
        return bool(self.failed_batches)


@dataclass(frozen=True)
class ImportResult:
    """Aggregated result of one run, rendered as the SUMMARY line."""
    read_rows: int
    accepted_rows: int
    rejected_rows: int
    start_time: datetime
    end_time: datetime
    insert: InsertSummary | None = None  # None when nothing was inserted
    reject_file: str | None = None
    error_log_file: str | None = None
    warnings: tuple[str, ...] = field(default_factory=tuple)

    @property
    def inserted_rows(self) -> int:
        return self.insert.inserted_rows if self.insert is not None else 0

    @property
    def elapsed_seconds(self) -> float:
        return (self.end_time - self.start_time).total_seconds()

    @property
    def throughput_rows_per_sec(self) -> float:
        elapsed = self.elapsed_seconds
        if elapsed <= 0:
            return 0.0
        return self.inserted_rows / elapsed

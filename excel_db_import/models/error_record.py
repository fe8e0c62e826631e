from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import UTC, datetime

"""ErrorRecord model for the structured error log.

Every rejected cell and every failed insert batch produces one record. Row
``-1`` marks records that do not belong to a single spreadsheet row (batch
failures).
"""

__all__ = [
    "ErrorRecord",
    "BATCH_SHEET",
]

BATCH_SHEET = "<BATCH>"


@dataclass(frozen=True)
class ErrorRecord:
    """Structured error record for JSON Lines logging.

    Attributes:
        timestamp: ISO8601 UTC timestamp with 'Z' suffix
        file: spreadsheet file name being imported
        sheet: sheet name, or ``<BATCH>`` for insert failures
        row: 1-based sheet row number, -1 when not row specific
        error_type: UPPER_SNAKE_CASE classification
        message: human readable detail (validation issue or driver message)
    """
    timestamp: str
    file: str
    sheet: str
    row: int
    error_type: str
    message: str

    @staticmethod
    def create(file: str, sheet: str, row: int, error_type: str, message: str) -> ErrorRecord:
        ts = datetime.now(UTC).isoformat().replace("+00:00", "Z")
        return ErrorRecord(
            timestamp=ts,
            file=file,
            sheet=sheet,
            row=row,
            error_type=error_type,
            message=message,
        )

    def to_json_line(self) -> str:
        return json.dumps(asdict(self), ensure_ascii=False)

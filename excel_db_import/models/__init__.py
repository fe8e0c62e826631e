"""Domain models for the Excel -> database import tool.

Column typing and mapping, row models produced by validation, error log
records, and insert/run results.
"""

from .column_mapping import ColumnMapping, Schema, SchemaError, decode_column_symbol
from .column_type import ColumnType
from .error_record import ErrorRecord
from .processing_result import BatchOutcome, BatchState, ImportResult, InsertSummary
from .row_data import AcceptedRow, CellIssue, RawRow, RejectedRow

__all__ = [
    # Schema models
    "ColumnType",
    "ColumnMapping",
    "Schema",
    "SchemaError",
    "decode_column_symbol",
    # Row models
    "RawRow",
    "AcceptedRow",
    "RejectedRow",
    "CellIssue",
    # Results
    "BatchState",
    "BatchOutcome",
    "InsertSummary",
    "ImportResult",
    "ErrorRecord",
]

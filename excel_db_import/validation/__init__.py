from .row_validator import ValidationOutcome, coerce_cell, partition_rows, validate_row

__all__ = [
    "ValidationOutcome",
    "coerce_cell",
    "partition_rows",
    "validate_row",
]

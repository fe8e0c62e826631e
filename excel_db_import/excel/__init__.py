from .reader import (
    InputAccessError,
    InputCloseError,
    InputReadError,
    SpreadsheetFormatError,
    read_workbook_rows,
)
from .reject_writer import reject_file_path, write_reject_workbook

__all__ = [
    "InputAccessError",
    "InputCloseError",
    "InputReadError",
    "SpreadsheetFormatError",
    "read_workbook_rows",
    "reject_file_path",
    "write_reject_workbook",
]

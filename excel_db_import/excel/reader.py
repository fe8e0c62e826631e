from __future__ import annotations

import logging
import zipfile
from pathlib import Path

import pandas as pd

from ..models.row_data import RawRow

"""Spreadsheet reader.

Every sheet is read without a header and with every cell as text. Text is
the str() of the stored cell value, not the number format shown in Excel:
formula cells carry their cached value, dates read as
``2024-01-02 00:00:00``, booleans as ``True``/``False``, blank cells are ""
and NA-looking strings are kept verbatim. Sheets are
concatenated in workbook order; the first row of each sheet is a header and
skipped unless ``read_first_line`` is set.
"""

__all__ = [
    "InputAccessError",
    "InputReadError",
    "SpreadsheetFormatError",
    "InputCloseError",
    "read_workbook_rows",
    "sheet_rows",
]

logger = logging.getLogger(__name__)


class InputAccessError(Exception):
    """Raised when the spreadsheet file is missing or cannot be opened."""


class InputReadError(Exception):
    """Raised on an I/O failure while reading the spreadsheet."""


class SpreadsheetFormatError(Exception):
    """Raised when the file is not a readable workbook."""


class InputCloseError(Exception):
    """Raised when the workbook cannot be closed cleanly."""


_FORMAT_ERRORS = (ValueError, KeyError, zipfile.BadZipFile)


def _trim_trailing_blanks(cells: list[str]) -> tuple[str, ...]:
    end = len(cells)
    while end and cells[end - 1] == "":
        end -= 1
    return tuple(cells[:end])


def sheet_rows(df: pd.DataFrame, sheet_name: str, read_first_line: bool = False) -> list[RawRow]:
    """Turn one raw sheet DataFrame into RawRows (1-based row numbers)."""
    if df.empty:
        return []
    values = df.fillna("").astype(str).values.tolist()
    start = 0 if read_first_line else 1
    return [
        RawRow(_trim_trailing_blanks(cells), sheet=sheet_name, row_number=i + 1)
        for i, cells in enumerate(values)
        if i >= start
    ]


def read_workbook_rows(path: Path, read_first_line: bool = False) -> list[RawRow]:
    """Read all sheets of ``path`` into one list of RawRows.

    Raises:
        InputAccessError: file missing or not accessible
        InputReadError: I/O failure while reading
        SpreadsheetFormatError: content is not a workbook pandas can parse
        InputCloseError: closing the workbook failed
    """
    if not path.exists():
        raise InputAccessError(f"file not found: {path}")
    try:
        xls = pd.ExcelFile(path)
    except (FileNotFoundError, PermissionError, IsADirectoryError) as e:
        raise InputAccessError(f"cannot open {path}: {e}") from e
    except OSError as e:
        raise InputReadError(f"cannot read {path}: {e}") from e
    except _FORMAT_ERRORS as e:
        raise SpreadsheetFormatError(f"invalid format {path}: {e}") from e

    rows: list[RawRow] = []
    try:
        for name in xls.sheet_names:
            df = xls.parse(name, header=None, dtype=str, keep_default_na=False, na_filter=False)
            sheet = sheet_rows(df, str(name), read_first_line)
            logger.debug("sheet=%s rows=%d", name, len(sheet))
            rows.extend(sheet)
    except OSError as e:
        xls.close()
        raise InputReadError(f"cannot read {path}: {e}") from e
    except _FORMAT_ERRORS as e:
        xls.close()
        raise SpreadsheetFormatError(f"invalid format {path}: {e}") from e

    try:
        xls.close()
    except OSError as e:
        raise InputCloseError(f"cannot close {path}: {e}") from e
    return rows

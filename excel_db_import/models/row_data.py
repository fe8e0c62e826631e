from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Union

from .column_type import ColumnType

"""Row models for the validation pipeline.

RawRow is a spreadsheet row exactly as read (cell strings, blanks are "").
Validation turns it into either an AcceptedRow (coerced values in schema
order) or a RejectedRow (the untouched raw row plus the failing cells).
"""

__all__ = [
    "RawRow",
    "CellIssue",
    "AcceptedRow",
    "RejectedRow",
    "RowResult",
    "CoercedValue",
]

CoercedValue = Union[int, float, str]


@dataclass(frozen=True)
class RawRow:
    """One physical spreadsheet row.

    ``cells`` may be shorter than the widest row of the sheet: trailing blank
    cells are not kept. ``row_number`` is 1-based within ``sheet``.
    """
    cells: tuple[str, ...]
    sheet: str = ""
    row_number: int = -1  # unknown when built by hand

    @classmethod
    def of(cls, cells: Sequence[str] | None, sheet: str = "", row_number: int = -1) -> RawRow:
        # an absent row is treated like a row of blank cells
        return cls(tuple(cells or ()), sheet, row_number)

    def cell(self, index: int) -> str:
        if 0 <= index < len(self.cells):
            return self.cells[index]
        return ""


@dataclass(frozen=True)
class CellIssue:
    """Why a single cell failed coercion."""
    source_symbol: str
    target_name: str
    column_type: ColumnType
    value: str

    @property
    def error_type(self) -> str:
        return f"INVALID_{self.column_type.name}"

    def describe(self) -> str:
        return (
            f"column {self.source_symbol} ({self.target_name}): "
            f"{self.value!r} is not a valid {self.column_type.name.lower()}"
        )


@dataclass(frozen=True)
class AcceptedRow:
    values: tuple[CoercedValue, ...]  # one per mapping, schema order
    source: RawRow


@dataclass(frozen=True)
class RejectedRow:
    source: RawRow
    issues: tuple[CellIssue, ...]

    @property
    def cells(self) -> tuple[str, ...]:
        return self.source.cells


RowResult = Union[AcceptedRow, RejectedRow]

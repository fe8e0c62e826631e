from __future__ import annotations

import logging
import re
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass

from ..config.schema_resolver import parse_strict_int
from ..models.column_mapping import ColumnMapping, Schema
from ..models.column_type import BOOLEAN_LENGTH, BOOLEAN_TOKENS, DATE_LENGTH, ColumnType
from ..models.row_data import AcceptedRow, CellIssue, CoercedValue, RawRow, RejectedRow, RowResult

"""Row validation and coercion.

Each column type owns an ordered list of coercion attempts. An attempt
returns the coerced value or None; the first non-None result wins. A row is
accepted only when every mapped cell coerces, otherwise the untouched raw
row goes to the reject path.
"""

__all__ = [
    "Coercer",
    "COERCERS",
    "coerce_cell",
    "validate_row",
    "partition_rows",
    "ValidationOutcome",
]

logger = logging.getLogger(__name__)

Coercer = Callable[[str, ColumnMapping], "CoercedValue | None"]

# decimal float literal, optional NaN/Infinity and f/d suffix
_FLOAT_RE = re.compile(
    r"^[+-]?(NaN|Infinity|(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][+-]?[0-9]+)?[fFdD]?)$"
)
# surrounding control characters and spaces (<= U+0020) are ignored
_BLANK_CHARS = "".join(chr(c) for c in range(0x21))


def _int32(text: str, mapping: ColumnMapping) -> int | None:
    return parse_strict_int(text, bits=32)


def _int64(text: str, mapping: ColumnMapping) -> int | None:
    return parse_strict_int(text, bits=64)


def _floating(text: str, mapping: ColumnMapping) -> float | None:
    # single and double precision accept the same text; the double value is kept
    match = _FLOAT_RE.fullmatch(text.strip(_BLANK_CHARS))
    if match is None:
        return None
    literal = match.group(0)
    if literal[-1] in "fFdD":
        literal = literal[:-1]
    return float(literal)


def _string(text: str, mapping: ColumnMapping) -> str:
    return text[: mapping.max_length]


def _date(text: str, mapping: ColumnMapping) -> str:
    return text[:DATE_LENGTH]


def _boolean(text: str, mapping: ColumnMapping) -> str | None:
    value = text[:BOOLEAN_LENGTH]
    return value if value.lower() in BOOLEAN_TOKENS else None


COERCERS: dict[ColumnType, tuple[Coercer, ...]] = {
    ColumnType.INTEGER: (_int32, _int64),
    ColumnType.NUMBER: (_int32, _int64, _floating),
    ColumnType.STRING: (_string,),
    ColumnType.DATE: (_date,),
    ColumnType.BOOLEAN: (_boolean,),
}


def coerce_cell(text: str, mapping: ColumnMapping) -> CoercedValue | None:
    """Coerce one cell for ``mapping``; None when every attempt fails."""
    for attempt in COERCERS[mapping.column_type]:
        value = attempt(text, mapping)
        if value is not None:
            return value
    return None


def validate_row(row: RawRow | Sequence[str] | None, schema: Schema) -> RowResult:
    """Validate one raw row against ``schema``.

    Cells beyond the end of the row read as "". All mapped columns are
    checked so a rejected row reports every failing cell.
    """
    raw = row if isinstance(row, RawRow) else RawRow.of(row)
    values: list[CoercedValue] = []
    issues: list[CellIssue] = []
    for mapping in schema:
        text = raw.cell(mapping.source_index)
        value = coerce_cell(text, mapping)
        if value is None:
            issues.append(
                CellIssue(
                    source_symbol=mapping.source_symbol,
                    target_name=mapping.target_name,
                    column_type=mapping.column_type,
                    value=text,
                )
            )
        else:
            values.append(value)
    if issues:
        return RejectedRow(source=raw, issues=tuple(issues))
    return AcceptedRow(values=tuple(values), source=raw)


@dataclass(frozen=True)
class ValidationOutcome:
    accepted: tuple[AcceptedRow, ...]
    rejected: tuple[RejectedRow, ...]

    @property
    def total(self) -> int:
        return len(self.accepted) + len(self.rejected)


def partition_rows(rows: Iterable[RawRow | Sequence[str] | None], schema: Schema) -> ValidationOutcome:
    """Split rows into accepted and rejected, keeping input order in both."""
    accepted: list[AcceptedRow] = []
    rejected: list[RejectedRow] = []
    for row in rows:
        result = validate_row(row, schema)
        if isinstance(result, AcceptedRow):
            accepted.append(result)
        else:
            rejected.append(result)
            logger.debug(
                "rejected sheet=%s row=%d issues=%s",
                result.source.sheet,
                result.source.row_number,
                "; ".join(i.describe() for i in result.issues),
            )
    return ValidationOutcome(accepted=tuple(accepted), rejected=tuple(rejected))

from __future__ import annotations

import re
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping

from .column_type import DEFAULT_STRING_LENGTH, ColumnType

"""Spreadsheet column -> database column mapping.

A ColumnMapping ties one spreadsheet column (addressed by its letter code,
e.g. ``"A"`` or ``"AB"``) to one target column of the database table. The
Schema is the ordered, immutable set of mappings used for a whole run.
"""

__all__ = [
    "ColumnMapping",
    "Schema",
    "SchemaError",
    "decode_column_symbol",
    "is_column_symbol",
]

_SYMBOL_RE = re.compile(r"^[A-Z]+$")


class SchemaError(ValueError):
    """Raised when a set of mappings cannot form a valid Schema."""


def is_column_symbol(symbol: str) -> bool:
    return bool(_SYMBOL_RE.fullmatch(symbol))


def decode_column_symbol(symbol: str) -> int:
    """Convert a spreadsheet column code to a zero-based column index.

    >>> [decode_column_symbol(s) for s in ("A", "Z", "AA", "AZ", "BA")]
    [0, 25, 26, 51, 52]
    """
    code = symbol.strip().upper()
    if not is_column_symbol(code):
        raise SchemaError(f"invalid column symbol: {symbol!r}")
    index = 0
    for ch in code:
        index = index * 26 + (ord(ch) - ord("A") + 1)
    return index - 1


@dataclass(frozen=True)
class ColumnMapping:
    """One imported spreadsheet column.

    ``source_index`` is derived from ``source_symbol`` and never set by hand.
    ``max_length`` only matters for STRING columns.
    """
    source_symbol: str
    target_name: str
    column_type: ColumnType = ColumnType.STRING
    max_length: int = DEFAULT_STRING_LENGTH
    source_index: int = field(init=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "source_index", decode_column_symbol(self.source_symbol))

    def has_symbol(self, symbol: str) -> bool:
        return self.source_symbol.upper() == symbol.strip().upper()


@dataclass(frozen=True)
class Schema:
    """Mappings sorted ascending by ``source_index``.

    The order defines both the coerced row layout and the insert column order.
    The index lookup table is built once here.
    """
    mappings: tuple[ColumnMapping, ...] = ()
    _by_index: Mapping[int, ColumnMapping] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        by_index: dict[int, ColumnMapping] = {}
        previous = -1
        for m in self.mappings:
            if m.source_index in by_index:
                raise SchemaError(
                    f"column {m.source_symbol} is mapped twice "
                    f"({by_index[m.source_index].target_name!r}, {m.target_name!r})"
                )
            if m.source_index < previous:
                raise SchemaError("mappings must be sorted by source index")
            by_index[m.source_index] = m
            previous = m.source_index
        object.__setattr__(self, "_by_index", MappingProxyType(by_index))

    @classmethod
    def from_mappings(cls, mappings: Iterable[ColumnMapping]) -> Schema:
        return cls(tuple(sorted(mappings, key=lambda m: m.source_index)))

    def __iter__(self) -> Iterator[ColumnMapping]:
        return iter(self.mappings)

    def __len__(self) -> int:
        return len(self.mappings)

    def is_imported(self, index: int) -> bool:
        """Is the spreadsheet column at ``index`` mapped into the database?"""
        return index in self._by_index

    def mapping_at(self, index: int) -> ColumnMapping | None:
        return self._by_index.get(index)

    def type_at(self, index: int) -> ColumnType | None:
        m = self._by_index.get(index)
        return m.column_type if m is not None else None

    def mapping_for_symbol(self, symbol: str) -> ColumnMapping | None:
        for m in self.mappings:
            if m.has_symbol(symbol):
                return m
        return None

    @property
    def column_names(self) -> list[str]:
        return [m.target_name for m in self.mappings]

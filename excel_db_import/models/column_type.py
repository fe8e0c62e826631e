from __future__ import annotations

from enum import Enum

"""Column types supported by the importer and their database counterparts.

Type code : Python value : SQL type

- INT  : int                     : BIGINT
- NUM  : int or float            : DOUBLE PRECISION
- STR  : str (truncated to len)  : VARCHAR(len), len defaults to 256
- DATE : str (truncated to 64)   : VARCHAR(64)
- BOOL : str (truncated to 5)    : VARCHAR(5)

DATE cells are accepted verbatim; they are never parsed.
"""

__all__ = [
    "ColumnType",
    "DEFAULT_STRING_LENGTH",
    "DATE_LENGTH",
    "BOOLEAN_LENGTH",
    "BOOLEAN_TOKENS",
]

DEFAULT_STRING_LENGTH = 256
DATE_LENGTH = 64
BOOLEAN_LENGTH = 5

# compared case-insensitively
BOOLEAN_TOKENS = frozenset({"true", "false", "t", "f", "yes", "no", "y", "n"})


class ColumnType(Enum):
    """Declared type of an imported column (default STRING)."""
    INTEGER = "INT"
    NUMBER = "NUM"
    STRING = "STR"
    DATE = "DAT"
    BOOLEAN = "BOO"

    @classmethod
    def from_code(cls, text: str | None) -> ColumnType:
        """Look up a type from its configuration text.

        Only the first three characters count (``"integer"`` -> INTEGER,
        ``"bool"`` -> BOOLEAN). Codes shorter than three characters and
        unknown codes fall back to STRING.
        """
        code = (text or "").strip().upper()
        if len(code) < 3:
            return cls.STRING
        try:
            return cls(code[:3])
        except ValueError:
            return cls.STRING

    @property
    def is_numeric(self) -> bool:
        return self in (ColumnType.INTEGER, ColumnType.NUMBER)

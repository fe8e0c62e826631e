from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import replace

from ..models.column_mapping import ColumnMapping, Schema, SchemaError, is_column_symbol
from ..models.column_type import DEFAULT_STRING_LENGTH, ColumnType

"""Build the column Schema from raw configuration keys.

Key convention (case-insensitive, separator ``_`` or ``.``):

- ``COL_<SYM>``        target column name; blank value = column not imported
- ``COL_<SYM>_TYPE``   INT / NUM / STR / DATE / BOOL (first three letters count)
- ``COL_<SYM>_LEN``    max length for STR columns, default 256

Type and length keys for a column that is not imported are ignored, as are
all keys outside the convention.
"""

__all__ = [
    "ConfigError",
    "resolve_schema",
    "split_column_key",
    "parse_strict_int",
]

_SEPARATOR_RE = re.compile(r"[_.]")
_STRICT_INT_RE = re.compile(r"^[+-]?[0-9]+$")


class ConfigError(Exception):
    """Raised for an unreadable or invalid configuration (file, keys, column mappings)."""


def parse_strict_int(text: str, bits: int = 32) -> int | None:
    """Parse a signed decimal integer of at most ``bits`` bits.

    No surrounding whitespace, no underscores, range checked against ``bits``.
    Returns None when the text is not such an integer.
    """
    if not _STRICT_INT_RE.fullmatch(text):
        return None
    value = int(text)
    limit = 2 ** (bits - 1)
    if not -limit <= value <= limit - 1:
        return None
    return value


def split_column_key(key: str) -> list[str] | None:
    """Split a ``COL`` key into its tokens, or None for any other key."""
    tokens = _SEPARATOR_RE.split(key)
    while tokens and tokens[-1] == "":
        tokens.pop()
    if len(tokens) < 2 or tokens[0].upper() != "COL":
        return None
    return tokens


def _parse_length(text: str) -> int:
    value = parse_strict_int(text)
    if value is None or value < 0:
        return DEFAULT_STRING_LENGTH
    return value


def resolve_schema(config: Mapping[str, str]) -> Schema:
    """Resolve column mappings from configuration key/value pairs.

    Args:
        config: flat configuration mapping (unrelated keys are allowed)

    Returns:
        Schema sorted by spreadsheet column index

    Raises:
        ConfigError: a symbol is not made of letters A-Z, or the same
            column is mapped twice (``COL_A`` and ``col.a``)
    """
    base: dict[str, ColumnMapping] = {}
    attributes: list[tuple[str, str, str]] = []

    for key, value in config.items():
        tokens = split_column_key(key)
        if tokens is None:
            continue
        if len(tokens) == 2:
            if value is None or not value.strip():
                continue  # opt-in by non-empty value
            symbol = tokens[1].strip().upper()
            if not is_column_symbol(symbol):
                raise ConfigError(f"malformed column symbol in key {key!r}")
            if symbol in base:
                raise ConfigError(f"column {symbol} is configured more than once")
            base[symbol] = ColumnMapping(source_symbol=symbol, target_name=value)
        elif len(tokens) == 3:
            suffix = tokens[2].strip().lower()
            if suffix in ("type", "len"):
                attributes.append((tokens[1].strip().upper(), suffix, value or ""))

    for symbol, suffix, value in attributes:
        m = base.get(symbol)
        if m is None:
            continue
        if suffix == "type":
            base[symbol] = replace(m, column_type=ColumnType.from_code(value))
        else:
            base[symbol] = replace(m, max_length=_parse_length(value))

    try:
        return Schema.from_mappings(base.values())
    except SchemaError as e:
        raise ConfigError(str(e)) from e

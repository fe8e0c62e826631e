from __future__ import annotations

import json
import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

from ..models.column_mapping import Schema
from .schema_resolver import ConfigError, resolve_schema

"""Init file loader.

Responsibilities:
- Read the init file: properties (key=value), or YAML for .yml/.yaml files
- Let DB_* environment variables override the file (see ENV_OVERRIDE_KEYS)
- Validate the flat key/value mapping against config_schema.json
- Apply defaults and resolve the column Schema
"""

__all__ = [
    "ConfigError",
    "DatabaseConfig",
    "ImportConfig",
    "load_config",
    "read_config_file",
    "parse_properties",
]

SCHEMA_PATH = Path(__file__).with_name("config_schema.json")

DB_URL = "DB_URL"
DB_USER_NAME = "DB_USER_NAME"
DB_PASSWORD = "DB_PASSWORD"
DB_NAME = "DB_NAME"
DB_TABLE = "DB_TABLE"
EXCEL_FILE_PATH = "EXCEL_FILE_PATH"
EXCEL_ERROR_FILE_PATH = "EXCEL_ERROR_FILE_PATH"
IS_READ_FIRST_LINE = "IS_READ_FIRST_LINE"
BULK_SIZE = "BULK_SIZE"

ENV_OVERRIDE_KEYS = (DB_URL, DB_USER_NAME, DB_PASSWORD, DB_NAME)

DEFAULT_BULK_SIZE = 1000
YAML_SUFFIXES = {".yml", ".yaml"}

_ESCAPES = {"t": "\t", "n": "\n", "r": "\r", "f": "\f"}


@dataclass(frozen=True)
class DatabaseConfig:
    """Connection settings; None means "not configured"."""
    url: str
    user: str | None
    password: str | None
    name: str | None


@dataclass(frozen=True)
class ImportConfig:
    database: DatabaseConfig
    table: str
    excel_file_path: Path
    error_file_path: Path
    read_first_line: bool
    bulk_size: int
    schema: Schema


def _unescape(text: str) -> str:
    out: list[str] = []
    i = 0
    while i < len(text):
        ch = text[i]
        if ch == "\\" and i + 1 < len(text):
            nxt = text[i + 1]
            if nxt == "u" and i + 6 <= len(text):
                try:
                    out.append(chr(int(text[i + 2 : i + 6], 16)))
                    i += 6
                    continue
                except ValueError:
                    pass
            out.append(_ESCAPES.get(nxt, nxt))
            i += 2
            continue
        out.append(ch)
        i += 1
    return "".join(out)


def _logical_lines(text: str) -> list[str]:
    """Join backslash-continued lines, dropping blanks and comments."""
    lines: list[str] = []
    pending: str | None = None
    for raw in text.splitlines():
        line = raw.lstrip()
        if pending is None and (not line or line[0] in "#!"):
            continue
        trailing = len(line) - len(line.rstrip("\\"))
        continued = trailing % 2 == 1
        if continued:
            line = line[:-1]
        pending = line if pending is None else pending + line
        if not continued:
            lines.append(pending)
            pending = None
    if pending is not None:
        lines.append(pending)
    return lines


def parse_properties(text: str) -> dict[str, str]:
    """Parse ``.properties`` text into a dict (later keys win).

    Key and value are separated by ``=``, ``:`` or whitespace. Leading
    whitespace of the value is skipped, trailing whitespace is kept.
    """
    result: dict[str, str] = {}
    for line in _logical_lines(text):
        i = 0
        while i < len(line):
            ch = line[i]
            if ch == "\\":
                i += 2
                continue
            if ch in "=: \t\f":
                break
            i += 1
        key = line[:i]
        rest = line[i:].lstrip(" \t\f")
        if rest[:1] in ("=", ":"):
            rest = rest[1:].lstrip(" \t\f")
        result[_unescape(key)] = _unescape(rest)
    return result


def _stringify(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def read_config_file(path: Path) -> dict[str, str]:
    """Read the init file into a flat str -> str mapping."""
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigError(f"cannot read config file {path}: {e}") from e

    if path.suffix.lower() not in YAML_SUFFIXES:
        return parse_properties(text)

    try:
        data = yaml.safe_load(text) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"config must be a mapping, got {type(data).__name__}")
    return {str(k): _stringify(v) for k, v in data.items()}


def _validate_config_schema(data: Mapping[str, str]) -> None:
    """Validate the flat mapping against config_schema.json.

    Raises:
        ConfigError: the schema file is missing/invalid, or validation fails
    """
    if not SCHEMA_PATH.exists():
        raise ConfigError(f"config schema not found: {SCHEMA_PATH}")
    try:
        schema = json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))
        jsonschema.validate(dict(data), schema)
    except json.JSONDecodeError as e:
        raise ConfigError(f"invalid schema file: {e}") from e
    except ValidationError as e:
        raise ConfigError(f"config validation failed: {e.message}") from e


def apply_env_overrides(data: Mapping[str, str], environ: Mapping[str, str]) -> dict[str, str]:
    merged = dict(data)
    for key in ENV_OVERRIDE_KEYS:
        value = environ.get(key)
        if value:
            merged[key] = value
    return merged


def _parse_boolean(text: str | None) -> bool:
    # anything but "true" (any case) is false
    return (text or "").strip().lower() == "true"


def _default_error_path(excel_path: Path) -> Path:
    return excel_path.with_name(f"{excel_path.stem}_error.xlsx")


def load_config(path: Path, environ: Mapping[str, str] | None = None) -> ImportConfig:
    """Load, validate and resolve the init file.

    Args:
        path: init file (properties, or YAML by suffix)
        environ: environment used for DB_* overrides, ``os.environ`` if None

    Returns:
        ImportConfig with the resolved column Schema

    Raises:
        ConfigError: unreadable file, failed validation or bad column keys
    """
    raw = read_config_file(path)
    data = apply_env_overrides(raw, os.environ if environ is None else environ)
    _validate_config_schema(data)

    schema = resolve_schema(data)
    if not len(schema):
        raise ConfigError("no spreadsheet column is mapped (set at least one COL_<X>=<column>)")

    def optional(key: str) -> str | None:
        value = data.get(key)
        return value if value else None

    excel_path = Path(data[EXCEL_FILE_PATH].strip())
    error_path_text = (data.get(EXCEL_ERROR_FILE_PATH) or "").strip()
    bulk_text = (data.get(BULK_SIZE) or "").strip()

    return ImportConfig(
        database=DatabaseConfig(
            url=data[DB_URL],
            user=optional(DB_USER_NAME),
            password=optional(DB_PASSWORD),
            name=optional(DB_NAME),
        ),
        table=data[DB_TABLE].strip(),
        excel_file_path=excel_path,
        error_file_path=Path(error_path_text) if error_path_text else _default_error_path(excel_path),
        read_first_line=_parse_boolean(data.get(IS_READ_FIRST_LINE)),
        bulk_size=int(bulk_text) if bulk_text else DEFAULT_BULK_SIZE,
        schema=schema,
    )

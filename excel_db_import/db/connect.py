from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

import psycopg2

from ..config.loader import DatabaseConfig

"""PostgreSQL connection handling (psycopg2).

``DB_URL`` is handed to libpq as DSN or URI. ``DB_USER_NAME``,
``DB_PASSWORD`` and ``DB_NAME`` override the matching DSN parts when set.
"""

__all__ = [
    "DatabaseConnectionError",
    "PARAMSTYLE",
    "connect",
    "db_connection",
]

PARAMSTYLE = psycopg2.paramstyle


class DatabaseConnectionError(Exception):
    """Raised when the database connection cannot be opened."""


def _connect_kwargs(cfg: DatabaseConfig) -> dict[str, str]:
    kwargs: dict[str, str] = {}
    if cfg.user:
        kwargs["user"] = cfg.user
    if cfg.password:
        kwargs["password"] = cfg.password
    if cfg.name:
        kwargs["dbname"] = cfg.name
    return kwargs


def connect(cfg: DatabaseConfig) -> Any:
    """Open a psycopg2 connection; auto-commit is left to the caller."""
    try:
        return psycopg2.connect(cfg.url, **_connect_kwargs(cfg))
    except psycopg2.Error as e:
        raise DatabaseConnectionError(f"cannot connect to database: {str(e).strip()}") from e


@contextmanager
def db_connection(cfg: DatabaseConfig) -> Iterator[Any]:
    """Scoped connection: closed on every exit path."""
    conn = connect(cfg)
    try:
        yield conn
    finally:
        conn.close()

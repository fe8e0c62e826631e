from __future__ import annotations

import logging
import time
from collections.abc import Callable, Sequence
from contextlib import closing
from typing import Any

from ..models.column_mapping import Schema
from ..models.column_type import ColumnType
from ..models.processing_result import BatchOutcome, BatchState, InsertSummary
from ..models.row_data import AcceptedRow, CoercedValue
from .connect import DatabaseConnectionError

"""Batched INSERT of accepted rows over a DB-API 2.0 connection.

One parameterized statement is built per run. Rows are sent in chunks of
``batch_size`` through ``cursor.executemany`` and every chunk is committed on
its own. A chunk that raises the driver's ``Error`` is rolled back and
recorded as FAILED; earlier commits stay applied and later chunks still run.
"""

__all__ = [
    "BatchCallback",
    "build_insert_statement",
    "placeholder_for",
    "bind_row",
    "insert_rows",
]

logger = logging.getLogger(__name__)

BatchCallback = Callable[[BatchOutcome], None]

_PLACEHOLDERS: dict[str, Callable[[int], str]] = {
    "qmark": lambda n: "?",
    "format": lambda n: "%s",
    "pyformat": lambda n: "%s",
    "numeric": lambda n: f":{n}",
    "named": lambda n: f":c{n}",
}


def placeholder_for(paramstyle: str) -> Callable[[int], str]:
    """Placeholder renderer for a DB-API ``paramstyle`` (1-based position)."""
    try:
        return _PLACEHOLDERS[paramstyle]
    except KeyError:
        raise ValueError(f"unsupported paramstyle: {paramstyle}") from None


def build_insert_statement(schema: Schema, table: str, paramstyle: str = "qmark") -> str:
    """Render the INSERT statement with columns in schema order.

    e.g. ``INSERT INTO t (id,name) VALUES (?,?)`` for qmark drivers.
    """
    if not len(schema):
        raise ValueError("schema has no imported columns")
    render = placeholder_for(paramstyle)
    columns = ",".join(schema.column_names)
    values = ",".join(render(n) for n in range(1, len(schema) + 1))
    return f"INSERT INTO {table} ({columns}) VALUES ({values})"


def bind_row(row: AcceptedRow, schema: Schema, paramstyle: str = "qmark") -> Sequence[Any] | dict[str, Any]:
    """Bind coerced values: INTEGER as int, NUMBER as float, the rest as text."""
    bound: list[CoercedValue] = []
    for mapping, value in zip(schema, row.values, strict=True):
        if not mapping.column_type.is_numeric:
            bound.append(str(value))
        elif mapping.column_type is ColumnType.INTEGER:
            bound.append(int(value))
        else:
            bound.append(float(value))
    if paramstyle == "named":
        return {f"c{n}": v for n, v in enumerate(bound, start=1)}
    return tuple(bound)


def _rollback(connection: Any, db_errors: tuple[type[BaseException], ...] | type[BaseException]) -> None:
    try:
        connection.rollback()
    except db_errors as e:
        logger.warning("rollback failed: %s", e)


def insert_rows(
    connection: Any,
    table: str,
    schema: Schema,
    rows: Sequence[AcceptedRow],
    batch_size: int,
    *,
    paramstyle: str = "qmark",
    on_batch: BatchCallback | None = None,
) -> InsertSummary:
    """Insert ``rows`` into ``table`` in committed batches of ``batch_size``.

    Parameters
    ----------
    connection: DB-API 2.0 connection exposing ``autocommit`` and ``Error``
    table: target table (taken verbatim from configuration)
    schema: resolved column schema; defines column order
    rows: accepted rows, values in schema order
    batch_size: rows per batch, must be positive
    paramstyle: placeholder style of the driver behind ``connection``
    on_batch: called with every BatchOutcome (progress display)

    Only the driver's ``Error`` hierarchy is absorbed per batch. Auto-commit
    is turned off for the run and turned back on before returning.
    """
    if batch_size <= 0:
        raise ValueError(f"batch_size must be positive, got {batch_size}")

    statement = build_insert_statement(schema, table, paramstyle)
    db_errors = getattr(connection, "Error", Exception)
    outcomes: list[BatchOutcome] = []

    logger.debug("insert statement: %s", statement)
    try:
        connection.autocommit = False
        cursor = connection.cursor()
    except db_errors as e:
        raise DatabaseConnectionError(f"cannot prepare insert: {str(e).strip()}") from e
    try:
        with closing(cursor):
            for index, start in enumerate(range(0, len(rows), batch_size), start=1):
                chunk = rows[start : start + batch_size]
                params = [bind_row(r, schema, paramstyle) for r in chunk]
                logger.debug(
                    "batch %d %s -> %s rows=%d",
                    index,
                    BatchState.NOT_STARTED.value,
                    BatchState.IN_FLIGHT.value,
                    len(chunk),
                )

                started = time.time()
                try:
                    cursor.executemany(statement, params)
                    count = cursor.rowcount
                    connection.commit()
                except db_errors as e:
                    _rollback(connection, db_errors)
                    outcome = BatchOutcome(
                        index=index,
                        first_row=start,
                        size=len(chunk),
                        state=BatchState.FAILED,
                        error=str(e).strip() or type(e).__name__,
                        elapsed_seconds=time.time() - started,
                    )
                    logger.error(
                        "batch %d (rows %d-%d) failed: %s",
                        index,
                        start + 1,
                        start + len(chunk),
                        outcome.error,
                    )
                else:
                    # unknown (-1) counts are not added to the total
                    outcome = BatchOutcome(
                        index=index,
                        first_row=start,
                        size=len(chunk),
                        state=BatchState.COMMITTED,
                        inserted_rows=count if count and count > 0 else 0,
                        elapsed_seconds=time.time() - started,
                    )
                    logger.debug("batch %d committed inserted=%d", index, outcome.inserted_rows)

                outcomes.append(outcome)
                if on_batch is not None:
                    on_batch(outcome)
    finally:
        # nothing is pending after the last commit; this only matters on an
        # unexpected exception mid batch
        _rollback(connection, db_errors)
        try:
            connection.autocommit = True
        except db_errors as e:
            logger.warning("cannot re-enable autocommit: %s", e)

    summary = InsertSummary(statement=statement, batches=tuple(outcomes))
    logger.info(
        "inserted %d rows in %d/%d batches",
        summary.inserted_rows,
        summary.committed_batches,
        len(outcomes),
    )
    return summary

from __future__ import annotations

import logging
from collections.abc import Callable
from contextlib import AbstractContextManager
from datetime import UTC, datetime
from typing import Any

from ..config.loader import DatabaseConfig, ImportConfig
from ..db.batch_insert import insert_rows
from ..db.connect import PARAMSTYLE, db_connection
from ..excel.reader import read_workbook_rows
from ..excel.reject_writer import write_reject_workbook
from ..logging.error_log import ErrorLogBuffer
from ..models.error_record import BATCH_SHEET, ErrorRecord
from ..models.processing_result import ImportResult, InsertSummary
from ..validation.row_validator import ValidationOutcome, partition_rows
from .progress import BatchProgress
from .summary import mask_url

"""Service orchestration for one import run.

read workbook -> validate rows -> insert accepted rows -> write rejected rows
-> flush error log. Fatal errors (spreadsheet access/format, database
connection) propagate to the caller; rejected rows and failed batches are
absorbed into the ImportResult and the error log.
"""

__all__ = [
    "ConnectionFactory",
    "run_import",
]

logger = logging.getLogger(__name__)

ConnectionFactory = Callable[[DatabaseConfig], AbstractContextManager[Any]]


def _record_rejects(outcome: ValidationOutcome, file_name: str, error_log: ErrorLogBuffer) -> None:
    for rejected in outcome.rejected:
        for issue in rejected.issues:
            error_log.append(
                ErrorRecord.create(
                    file=file_name,
                    sheet=rejected.source.sheet,
                    row=rejected.source.row_number,
                    error_type=issue.error_type,
                    message=issue.describe(),
                )
            )


def _record_failed_batches(summary: InsertSummary, file_name: str, error_log: ErrorLogBuffer) -> None:
    for batch in summary.failed_batches:
        error_log.append(
            ErrorRecord.create(
                file=file_name,
                sheet=BATCH_SHEET,
                row=-1,
                error_type="BATCH_INSERT_ERROR",
                message=(
                    f"batch {batch.index} (accepted rows {batch.first_row + 1}-"
                    f"{batch.first_row + batch.size}): {batch.error}"
                ),
            )
        )


def run_import(
    cfg: ImportConfig,
    *,
    connection_factory: ConnectionFactory = db_connection,
    paramstyle: str = PARAMSTYLE,
    error_log: ErrorLogBuffer | None = None,
) -> ImportResult:
    """Run one import described by ``cfg``.

    Args:
        cfg: loaded configuration with the resolved schema
        connection_factory: context manager factory yielding a DB-API connection
        paramstyle: placeholder style of the connections it yields
        error_log: buffer for structured error records (new one if None)

    Returns:
        ImportResult with row counts, insert summary and written artifacts

    Raises:
        InputAccessError / InputReadError / SpreadsheetFormatError /
        InputCloseError: spreadsheet could not be read
        DatabaseConnectionError: the database connection could not be opened
    """
    start_time = datetime.now(UTC)
    if error_log is None:
        error_log = ErrorLogBuffer()
    file_name = cfg.excel_file_path.name
    warnings: list[str] = []

    logger.info("Reading excel file content from %s", cfg.excel_file_path)
    raw_rows = read_workbook_rows(cfg.excel_file_path, cfg.read_first_line)

    outcome = partition_rows(raw_rows, cfg.schema)
    _record_rejects(outcome, file_name, error_log)
    logger.info(
        "rows=%d accepted=%d rejected=%d",
        outcome.total,
        len(outcome.accepted),
        len(outcome.rejected),
    )

    insert_summary: InsertSummary | None = None
    if outcome.accepted:
        logger.info("Inserting valid rows into DB table %s/%s", mask_url(cfg.database.url), cfg.table)
        with connection_factory(cfg.database) as conn:
            with BatchProgress(len(outcome.accepted)) as progress:
                insert_summary = insert_rows(
                    conn,
                    cfg.table,
                    cfg.schema,
                    outcome.accepted,
                    cfg.bulk_size,
                    paramstyle=paramstyle,
                    on_batch=progress,
                )
        _record_failed_batches(insert_summary, file_name, error_log)
        if insert_summary.partial:
            logger.warning(
                "%d of %d batches failed; their rows were not inserted",
                len(insert_summary.failed_batches),
                len(insert_summary.batches),
            )
    else:
        logger.info("There is no valid row to insert")

    reject_file = None
    if outcome.rejected:
        try:
            reject_file = write_reject_workbook(outcome.rejected, cfg.error_file_path)
            logger.info("%d invalid rows found. Saved to %s", len(outcome.rejected), reject_file)
        except (OSError, ValueError) as e:
            msg = f"cannot write reject file for {len(outcome.rejected)} invalid rows: {e}"
            logger.error(msg)
            warnings.append(msg)
    else:
        logger.info("There is no invalid row")

    error_log_file = None
    try:
        error_log_file = error_log.flush()
    except OSError as e:
        msg = f"cannot write error log: {e}"
        logger.warning(msg)
        warnings.append(msg)

    return ImportResult(
        read_rows=outcome.total,
        accepted_rows=len(outcome.accepted),
        rejected_rows=len(outcome.rejected),
        start_time=start_time,
        end_time=datetime.now(UTC),
        insert=insert_summary,
        reject_file=str(reject_file) if reject_file is not None else None,
        error_log_file=str(error_log_file) if error_log_file is not None else None,
        warnings=tuple(warnings),
    )

from __future__ import annotations

import re

from ..config.loader import ImportConfig
from ..models.processing_result import ImportResult

"""Human readable output: configuration echo and the SUMMARY line."""

__all__ = [
    "describe_config",
    "mask_url",
    "render_summary_line",
]

MASK = "****"

_URL_PASSWORD_RE = re.compile(r"(://[^:/@]+:)([^@]+)(@)")
_KEYWORD_PASSWORD_RE = re.compile(r"(\bpassword\s*=\s*)('(?:[^'\\]|\\.)*'|\S+)", re.IGNORECASE)


def mask_url(url: str) -> str:
    """Hide the password of a URI style or keyword (``password=...``) DSN."""
    masked = _URL_PASSWORD_RE.sub(rf"\g<1>{MASK}\g<3>", url)
    return _KEYWORD_PASSWORD_RE.sub(rf"\g<1>{MASK}", masked)


def _format_number(value: float) -> str:
    # no scientific notation, integers without a trailing ".0"
    if value == 0:
        return "0"
    if value == int(value):
        return str(int(value))
    if value < 0.01:
        return f"{value:.6f}".rstrip("0").rstrip(".")
    return f"{value:.3f}".rstrip("0").rstrip(".")


def describe_config(cfg: ImportConfig) -> list[str]:
    """Lines describing the resolved run configuration (password masked).

    The last lines are the column table: symbol, target column, type, length.
    """
    db = cfg.database
    lines = [
        f"DB_URL={mask_url(db.url)}",
        f"DB_USER_NAME={db.user or ''}",
        f"DB_PASSWORD={MASK if db.password else ''}",
        f"DB_NAME={db.name or ''}",
        f"DB_TABLE={cfg.table}",
        f"EXCEL_FILE_PATH={cfg.excel_file_path}",
        f"EXCEL_ERROR_FILE_PATH={cfg.error_file_path}",
        f"IS_READ_FIRST_LINE={str(cfg.read_first_line).lower()}",
        f"BULK_SIZE={cfg.bulk_size}",
        f"{'Excel':<8}{'DB':<20}{'Type':<9}Length",
    ]
    for m in cfg.schema:
        lines.append(
            f"{'COL_' + m.source_symbol:<8}{m.target_name:<20}{m.column_type.name:<9}{m.max_length}"
        )
    return lines


def render_summary_line(result: ImportResult) -> str:
    """Render the SUMMARY line.

    Format:
    SUMMARY rows={read} accepted={n} rejected={n} inserted={n}
    batches={committed}/{total} failed_batches={n} elapsed_sec={s} throughput_rps={r}
    """
    insert = result.insert
    total_batches = len(insert.batches) if insert is not None else 0
    committed = insert.committed_batches if insert is not None else 0
    failed = len(insert.failed_batches) if insert is not None else 0
    return (
        f"SUMMARY rows={result.read_rows} "
        f"accepted={result.accepted_rows} "
        f"rejected={result.rejected_rows} "
        f"inserted={result.inserted_rows} "
        f"batches={committed}/{total_batches} "
        f"failed_batches={failed} "
        f"elapsed_sec={_format_number(result.elapsed_seconds)} "
        f"throughput_rps={_format_number(result.throughput_rows_per_sec)}"
    )

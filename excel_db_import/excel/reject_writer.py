from __future__ import annotations

import time
from collections.abc import Sequence
from pathlib import Path

import pandas as pd

from ..models.row_data import RejectedRow

"""Reject workbook writer.

Rejected rows are written untouched, one spreadsheet row per rejected raw
row and one text cell per original column, to a fresh file per run whose
name carries the unix time in milliseconds.
"""

__all__ = [
    "REJECT_SHEET",
    "reject_file_path",
    "write_reject_workbook",
]

REJECT_SHEET = "Errors"
XLSX = ".xlsx"


def reject_file_path(error_file_path: Path | str, now_ms: int | None = None) -> Path:
    """``errors.xlsx`` -> ``errors_<ms>.xlsx``; ``errors`` -> ``errors_<ms>.xlsx``."""
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    text = str(error_file_path)
    if text.endswith(XLSX):
        return Path(f"{text[: -len(XLSX)]}_{now_ms}{XLSX}")
    return Path(f"{text}_{now_ms}{XLSX}")


def write_reject_workbook(
    rows: Sequence[RejectedRow],
    error_file_path: Path | str,
    now_ms: int | None = None,
) -> Path | None:
    """Write rejected raw rows to a timestamped workbook.

    Returns:
        Path of the written file, or None when there was nothing to write
    """
    if not rows:
        return None
    target = reject_file_path(error_file_path, now_ms)
    target.parent.mkdir(parents=True, exist_ok=True)
    width = max((len(r.cells) for r in rows), default=0)
    data = [list(r.cells) + [None] * (width - len(r.cells)) for r in rows]
    df = pd.DataFrame(data, dtype=object)
    with pd.ExcelWriter(target, engine="openpyxl") as writer:
        df.to_excel(writer, sheet_name=REJECT_SHEET, header=False, index=False)
        # openpyxl turns "=..." text into formulas; keep it as plain text
        for cells in writer.sheets[REJECT_SHEET].iter_rows():
            for cell in cells:
                if cell.data_type == "f":
                    cell.data_type = "s"
    return target

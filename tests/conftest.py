# Shared pytest fixtures
from __future__ import annotations
import logging
import tempfile
from pathlib import Path

import pandas as pd
import pytest

from excel_db_import.logging.init import LOGGER_NAME, reset_logging

DB_ENV_KEYS = ("DB_URL", "DB_USER_NAME", "DB_PASSWORD", "DB_NAME")


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        monkeypatch.chdir(p)
        for key in DB_ENV_KEYS:
            monkeypatch.delenv(key, raising=False)
        yield p


@pytest.fixture(autouse=True)
def clean_logging():
    reset_logging()
    yield
    reset_logging()
    # handlers hold the stdout captured for the finished test
    logger = logging.getLogger(LOGGER_NAME)
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)


@pytest.fixture()
def sample_properties() -> str:
    return """# import of the people sheet
DB_URL=postgresql://localhost:5432/appdb
DB_USER_NAME=appuser
DB_PASSWORD=secret
DB_TABLE=t
EXCEL_FILE_PATH=data/people.xlsx
EXCEL_ERROR_FILE_PATH=data/errors.xlsx
BULK_SIZE=2
COL_A=id
COL_A_TYPE=INT
COL_B=name
COL_B_LEN=3
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_properties: str) -> Path:
    cfg = temp_workdir / "config" / "import.properties"
    cfg.write_text(sample_properties, encoding="utf-8")
    return cfg


@pytest.fixture()
def make_excel():
    """Write ``{sheet: rows}`` to an xlsx file; short rows get blank cells."""
    def _make(path: Path, sheets: dict[str, list[list]]) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        with pd.ExcelWriter(path, engine="openpyxl") as writer:
            for name, rows in sheets.items():
                pd.DataFrame(rows, dtype=object).to_excel(
                    writer, sheet_name=name, header=False, index=False
                )
        return path
    return _make


@pytest.fixture()
def people_excel(temp_workdir: Path, make_excel) -> Path:
    return make_excel(
        temp_workdir / "data" / "people.xlsx",
        {
            "People": [
                ["id", "name"],
                ["7", "abcdef"],
                ["x", "abcdef"],
                ["8", "bob"],
            ]
        },
    )

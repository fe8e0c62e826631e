from __future__ import annotations

import json
import re
from pathlib import Path
from unittest.mock import MagicMock, patch

import psycopg2

from excel_db_import.cli import main as cli_main

"""Console output and error log contract for a full CLI run."""

SUMMARY_RE = re.compile(
    r"^SUMMARY rows=\d+ accepted=\d+ rejected=\d+ inserted=\d+ batches=\d+/\d+ "
    r"failed_batches=\d+ elapsed_sec=[0-9.]+ throughput_rps=[0-9.]+$"
)
LABEL_RE = re.compile(r"^(DEBUG|INFO|WARN|ERROR|SUMMARY) ")


def _run(config: Path, *extra: str) -> int:
    conn = MagicMock()
    conn.Error = psycopg2.Error
    conn.cursor.return_value.rowcount = 2
    with patch("excel_db_import.db.connect.psycopg2.connect", return_value=conn):
        return cli_main([str(config), *extra])


def test_every_line_is_labeled_and_summary_is_last(write_config: Path, people_excel: Path, capsys):
    assert _run(write_config) == 0
    lines = capsys.readouterr().out.splitlines()
    assert lines
    assert all(LABEL_RE.match(line) for line in lines)
    assert SUMMARY_RE.match(lines[-1])
    assert not any(line.startswith("DEBUG") for line in lines)


def test_debug_flag_adds_debug_lines(write_config: Path, people_excel: Path, capsys):
    assert _run(write_config, "--debug") == 0
    out = capsys.readouterr().out
    assert "DEBUG insert statement: INSERT INTO t (id,name) VALUES (%s,%s)" in out
    assert "DEBUG rejected sheet=People row=3" in out


def test_config_echo_lists_columns(write_config: Path, people_excel: Path, capsys):
    _run(write_config)
    out = capsys.readouterr().out
    assert "INFO DB_PASSWORD=****" in out
    assert re.search(r"INFO COL_A\s+id\s+INTEGER\s+256", out)
    assert re.search(r"INFO COL_B\s+name\s+STRING\s+3", out)


def test_error_log_records_rejected_rows(write_config: Path, people_excel: Path, temp_workdir: Path):
    assert _run(write_config) == 0
    logs = list((temp_workdir / "logs").glob("errors-*.log"))
    assert len(logs) == 1
    records = [json.loads(line) for line in logs[0].read_text(encoding="utf-8").splitlines()]
    assert [set(r) for r in records] == [{"timestamp", "file", "sheet", "row", "error_type", "message"}]
    assert records[0]["row"] == 3
    rejects = list((temp_workdir / "data").glob("errors_*.xlsx"))
    assert len(rejects) == 1

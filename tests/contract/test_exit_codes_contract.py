from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock, patch

import psycopg2
import pytest

from excel_db_import.cli import main as cli_main

"""Exit code contract tests."""


def _fake_connection(rowcount: int) -> MagicMock:
    conn = MagicMock()
    conn.Error = psycopg2.Error
    conn.cursor.return_value.rowcount = rowcount
    return conn


def test_exit_code_usage_without_arguments(temp_workdir: Path, capsys):
    code = cli_main([])
    assert code == 1
    assert "ERROR Usage:" in capsys.readouterr().out


def test_exit_code_usage_with_two_init_files(temp_workdir: Path, capsys):
    assert cli_main(["a.properties", "b.properties"]) == 1


def test_exit_code_usage_with_unknown_option(write_config: Path):
    assert cli_main([str(write_config), "--live"]) == 1


def test_exit_code_missing_config(temp_workdir: Path, capsys):
    code = cli_main(["config/missing.properties"])
    assert code == 2
    assert "ERROR config: config file not found" in capsys.readouterr().out


def test_exit_code_invalid_config(temp_workdir: Path, capsys):
    p = temp_workdir / "config" / "bad.properties"
    p.write_text("DB_TABLE=t\nEXCEL_FILE_PATH=a.xlsx\nCOL_A=id\n", encoding="utf-8")
    code = cli_main([str(p)])
    assert code == 2
    assert "DB_URL" in capsys.readouterr().out


def test_exit_code_missing_spreadsheet(write_config: Path, capsys):
    code = cli_main([str(write_config)])
    assert code == 3
    assert "ERROR File not found" in capsys.readouterr().out


def test_exit_code_invalid_spreadsheet_format(write_config: Path, temp_workdir: Path, capsys):
    (temp_workdir / "data" / "people.xlsx").write_text("plain text", encoding="utf-8")
    code = cli_main([str(write_config)])
    assert code == 5
    assert "ERROR Invalid Format" in capsys.readouterr().out


def test_exit_code_read_error(write_config: Path, people_excel: Path):
    from excel_db_import.excel.reader import InputReadError

    with patch("excel_db_import.services.orchestrator.read_workbook_rows", side_effect=InputReadError("io")):
        assert cli_main([str(write_config)]) == 4


def test_exit_code_close_error(write_config: Path, people_excel: Path):
    from excel_db_import.excel.reader import InputCloseError

    with patch("excel_db_import.services.orchestrator.read_workbook_rows", side_effect=InputCloseError("close")):
        assert cli_main([str(write_config)]) == 6


def test_exit_code_database_connection(write_config: Path, people_excel: Path, capsys):
    with patch("excel_db_import.db.connect.psycopg2.connect", side_effect=psycopg2.OperationalError("refused")):
        code = cli_main([str(write_config)])
    out = capsys.readouterr().out
    assert code == 10
    assert "ERROR database: cannot connect to database: refused" in out
    assert "secret" not in out


def test_exit_code_success(write_config: Path, people_excel: Path, capsys):
    conn = _fake_connection(rowcount=2)
    with patch("excel_db_import.db.connect.psycopg2.connect", return_value=conn) as mock_connect:
        code = cli_main([str(write_config)])
    out = capsys.readouterr().out
    assert code == 0
    assert mock_connect.call_args.args == ("postgresql://localhost:5432/appdb",)
    assert mock_connect.call_args.kwargs == {"user": "appuser", "password": "secret"}
    conn.close.assert_called_once()
    assert "SUMMARY rows=3 accepted=2 rejected=1 inserted=2 batches=1/1 failed_batches=0" in out


def test_exit_code_success_with_failed_batch(write_config: Path, people_excel: Path, capsys):
    conn = _fake_connection(rowcount=2)
    conn.cursor.return_value.executemany.side_effect = psycopg2.IntegrityError("duplicate key")
    with patch("excel_db_import.db.connect.psycopg2.connect", return_value=conn):
        code = cli_main([str(write_config)])
    out = capsys.readouterr().out
    assert code == 0
    assert "inserted=0 batches=0/1 failed_batches=1" in out
    conn.rollback.assert_called()


def test_connection_closed_when_insert_cannot_start(write_config: Path, people_excel: Path, capsys):
    conn = _fake_connection(rowcount=0)
    conn.cursor.side_effect = psycopg2.InterfaceError("connection already closed")
    with patch("excel_db_import.db.connect.psycopg2.connect", return_value=conn):
        code = cli_main([str(write_config)])
    assert code == 10
    assert "ERROR database: cannot prepare insert: connection already closed" in capsys.readouterr().out
    conn.close.assert_called_once()


def test_connection_closed_when_unexpected_error_escapes(write_config: Path, people_excel: Path):
    conn = _fake_connection(rowcount=0)
    conn.cursor.return_value.executemany.side_effect = TypeError("unsupported parameter type")
    with patch("excel_db_import.db.connect.psycopg2.connect", return_value=conn):
        with pytest.raises(TypeError, match="unsupported parameter type"):
            cli_main([str(write_config)])
    conn.close.assert_called_once()
    assert conn.autocommit is True

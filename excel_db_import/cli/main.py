from __future__ import annotations

import argparse
import sys
from pathlib import Path

from dotenv import load_dotenv

from ..config.loader import ConfigError, load_config
from ..db.connect import DatabaseConnectionError
from ..excel.reader import InputAccessError, InputCloseError, InputReadError, SpreadsheetFormatError
from ..logging.init import log_summary, setup_logging
from ..services.orchestrator import run_import
from ..services.summary import describe_config, render_summary_line

"""CLI entrypoint.

    excel-db-import <init_file> [--debug]

Loads ``.env`` (DB_* variables override the init file), loads the init file,
runs the import and prints the SUMMARY line. Every fatal condition has its
own exit code; failed insert batches do not change the exit code.
"""

__all__ = [
    "main",
]

EXIT_SUCCESS = 0
EXIT_USAGE = 1
EXIT_CONFIG = 2
EXIT_FILE_NOT_FOUND = 3
EXIT_READ_ERROR = 4
EXIT_FORMAT_ERROR = 5
EXIT_CLOSE_ERROR = 6
EXIT_DB_CONNECTION = 10

USAGE = "Usage: excel-db-import <init_file>"


def _load_env_file(path: Path, override: bool = True) -> None:
    """Load .env; its DB_* values win over the process environment."""
    if path.exists():
        load_dotenv(dotenv_path=path, override=override)


def _parse_args(argv: list[str]) -> tuple[argparse.Namespace, list[str]]:
    p = argparse.ArgumentParser(description="Excel -> database table importer")
    p.add_argument("init_file", nargs="*", help="init file (properties or YAML)")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    return p.parse_known_args(argv)


def main(argv: list[str] | None = None) -> int:
    # None only; an explicit [] must not fall back to sys.argv
    if argv is None:
        argv = sys.argv[1:]
    args, extra = _parse_args(argv)
    logger = setup_logging(debug=args.debug)

    if len(args.init_file) != 1 or extra:
        logger.error(USAGE)
        return EXIT_USAGE

    _load_env_file(Path(".env"))

    try:
        cfg = load_config(Path(args.init_file[0]))
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_CONFIG

    for line in describe_config(cfg):
        logger.info(line)

    try:
        result = run_import(cfg)
    except InputAccessError as e:
        logger.error(f"File not found: {e}")
        return EXIT_FILE_NOT_FOUND
    except InputReadError as e:
        logger.error(f"IOException: {e}")
        return EXIT_READ_ERROR
    except SpreadsheetFormatError as e:
        logger.error(f"Invalid Format: {e}")
        return EXIT_FORMAT_ERROR
    except InputCloseError as e:
        logger.error(f"IOException on close: {e}")
        return EXIT_CLOSE_ERROR
    except DatabaseConnectionError as e:
        logger.error(f"database: {e}")
        return EXIT_DB_CONNECTION

    log_summary(render_summary_line(result).removeprefix("SUMMARY "))
    return EXIT_SUCCESS

from .batch_insert import build_insert_statement, insert_rows
from .connect import DatabaseConnectionError, db_connection

__all__ = [
    "DatabaseConnectionError",
    "build_insert_statement",
    "db_connection",
    "insert_rows",
]

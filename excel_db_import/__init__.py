"""Excel -> relational table importer.

Spreadsheet rows are validated and coerced against the column types declared
in an init file; valid rows are inserted in committed batches, invalid rows
are written to a reject workbook.
"""

__version__ = "0.1.0"

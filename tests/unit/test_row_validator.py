from __future__ import annotations

import math

import pytest

from excel_db_import.models.column_mapping import ColumnMapping, Schema
from excel_db_import.models.column_type import ColumnType
from excel_db_import.models.row_data import AcceptedRow, RawRow, RejectedRow
from excel_db_import.validation.row_validator import coerce_cell, partition_rows, validate_row


def _mapping(column_type: ColumnType, max_length: int = 256) -> ColumnMapping:
    return ColumnMapping("A", "v", column_type, max_length)


@pytest.fixture()
def id_name_schema() -> Schema:
    return Schema.from_mappings(
        [
            ColumnMapping("A", "id", ColumnType.INTEGER),
            ColumnMapping("B", "name", ColumnType.STRING, 3),
        ]
    )


@pytest.mark.parametrize(
    "text,expected",
    [("7", 7), ("+5", 5), ("-0", 0), ("9999999999", 9999999999), ("-9223372036854775808", -9223372036854775808)],
)
def test_integer_accepts(text, expected):
    assert coerce_cell(text, _mapping(ColumnType.INTEGER)) == expected


@pytest.mark.parametrize("text", ["", "x", "1.0", " 1", "1e3", "99999999999999999999", "1,000"])
def test_integer_rejects(text):
    assert coerce_cell(text, _mapping(ColumnType.INTEGER)) is None


@pytest.mark.parametrize(
    "text,expected",
    [("7", 7), ("1.5", 1.5), ("-2.25", -2.25), ("1e3", 1000.0), ("2.5f", 2.5), ("3D", 3.0),
     (".5", 0.5), ("5.", 5.0), (" 3.5 ", 3.5), ("99999999999999999999", 1e20)],
)
def test_number_accepts(text, expected):
    value = coerce_cell(text, _mapping(ColumnType.NUMBER))
    assert value == expected


def test_number_keeps_integers_integral():
    value = coerce_cell("42", _mapping(ColumnType.NUMBER))
    assert isinstance(value, int)


def test_number_special_values():
    assert math.isnan(coerce_cell("NaN", _mapping(ColumnType.NUMBER)))
    assert coerce_cell("-Infinity", _mapping(ColumnType.NUMBER)) == float("-inf")


@pytest.mark.parametrize("text", ["", "abc", "1.2.3", "nan", "inf", "1,5"])
def test_number_rejects(text):
    assert coerce_cell(text, _mapping(ColumnType.NUMBER)) is None


def test_string_truncated_to_max_length():
    assert coerce_cell("x" * 300, _mapping(ColumnType.STRING)) == "x" * 256
    assert coerce_cell("abcdef", _mapping(ColumnType.STRING, 3)) == "abc"
    assert coerce_cell("", _mapping(ColumnType.STRING)) == ""


def test_date_is_verbatim_and_truncated():
    assert coerce_cell("2024-13-45", _mapping(ColumnType.DATE)) == "2024-13-45"
    assert coerce_cell("d" * 100, _mapping(ColumnType.DATE)) == "d" * 64


@pytest.mark.parametrize("text", ["true", "FALSE", "T", "f", "Yes", "NO", "y", "N", "falsey"])
def test_boolean_accepts(text):
    assert coerce_cell(text, _mapping(ColumnType.BOOLEAN)) == text[:5]


@pytest.mark.parametrize("text", ["", "maybe", "1", "0", "on", "tru"])
def test_boolean_rejects(text):
    assert coerce_cell(text, _mapping(ColumnType.BOOLEAN)) is None


def test_validate_row_coerces_in_schema_order(id_name_schema):
    result = validate_row(["7", "abcdef"], id_name_schema)
    assert isinstance(result, AcceptedRow)
    assert result.values == (7, "abc")


def test_validate_row_rejects_and_keeps_raw_cells(id_name_schema):
    result = validate_row(["x", "abcdef"], id_name_schema)
    assert isinstance(result, RejectedRow)
    assert result.cells == ("x", "abcdef")
    assert len(result.issues) == 1
    issue = result.issues[0]
    assert issue.source_symbol == "A"
    assert issue.value == "x"
    assert issue.error_type == "INVALID_INTEGER"
    assert "'x'" in issue.describe()


def test_validate_row_reports_every_failing_cell():
    schema = Schema.from_mappings(
        [
            ColumnMapping("A", "id", ColumnType.INTEGER),
            ColumnMapping("B", "amount", ColumnType.NUMBER),
            ColumnMapping("C", "flag", ColumnType.BOOLEAN),
        ]
    )
    result = validate_row(["a", "b", "true"], schema)
    assert isinstance(result, RejectedRow)
    assert [i.source_symbol for i in result.issues] == ["A", "B"]


def test_missing_cells_read_as_empty():
    schema = Schema.from_mappings(
        [ColumnMapping("A", "name"), ColumnMapping("D", "note")]
    )
    result = validate_row(["only"], schema)
    assert isinstance(result, AcceptedRow)
    assert result.values == ("only", "")


def test_missing_numeric_cell_rejects_row():
    schema = Schema.from_mappings([ColumnMapping("A", "name"), ColumnMapping("C", "n", ColumnType.INTEGER)])
    assert isinstance(validate_row(["only"], schema), RejectedRow)


def test_none_row_is_all_blank():
    schema = Schema.from_mappings([ColumnMapping("A", "name")])
    result = validate_row(None, schema)
    assert isinstance(result, AcceptedRow)
    assert result.values == ("",)


def test_unmapped_columns_are_ignored(id_name_schema):
    result = validate_row(["1", "bob", "not checked", "at all"], id_name_schema)
    assert isinstance(result, AcceptedRow)
    assert result.values == (1, "bob")


def test_validate_row_keeps_source_position(id_name_schema):
    raw = RawRow(("x", "y"), sheet="People", row_number=4)
    result = validate_row(raw, id_name_schema)
    assert result.source is raw


def test_partition_rows_keeps_order(id_name_schema):
    rows = [["1", "a"], ["x", "b"], ["2", "c"], [], ["3", "d"]]
    outcome = partition_rows(rows, id_name_schema)
    assert [r.values[0] for r in outcome.accepted] == [1, 2, 3]
    assert [r.cells for r in outcome.rejected] == [("x", "b"), ()]
    assert outcome.total == 5


def test_blank_column_mapping_is_not_validated():
    from excel_db_import.config.schema_resolver import resolve_schema

    schema = resolve_schema({"COL_A": "id", "COL_A_TYPE": "int", "COL_C": "", "COL_C_TYPE": "int"})
    result = validate_row(["1", "", "x"], schema)
    assert isinstance(result, AcceptedRow)
    assert result.values == (1,)

"""
Tests for semantic column types and cell conversion.

Conversion is where user input meets the file format, so these tests focus
on what an edit turns into and on the messages users see when it fails.
"""
from datetime import date, datetime, timedelta, timezone

import polars as pl
import pytest

from parquetstudio.core.types import (
    ColumnType,
    convert_value,
    default_value,
    is_zoned,
    materialize_cell,
    normalize_type,
    parse_timestamp,
    polars_dtype,
    python_type,
    with_zone,
    write_type,
)
from parquetstudio.utility.exceptions import ConversionError, TableError


class TestNormalizeType:
    """Engine type names collapse onto the semantic set."""

    @pytest.mark.parametrize(
        "engine_type, expected",
        [
            ("BOOLEAN", ColumnType.BOOLEAN),
            ("INTEGER", ColumnType.INTEGER),
            ("SMALLINT", ColumnType.INTEGER),
            ("TINYINT", ColumnType.INTEGER),
            ("USMALLINT", ColumnType.INTEGER),
            ("UINTEGER", ColumnType.BIGINT),
            ("BIGINT", ColumnType.BIGINT),
            ("UBIGINT", ColumnType.VARCHAR),
            ("HUGEINT", ColumnType.VARCHAR),
            ("UHUGEINT", ColumnType.VARCHAR),
            ("DOUBLE", ColumnType.DOUBLE),
            ("FLOAT", ColumnType.DOUBLE),
            ("DATE", ColumnType.DATE),
            ("TIMESTAMP", ColumnType.TIMESTAMP),
            ("TIMESTAMP WITH TIME ZONE", ColumnType.TIMESTAMP),
            ("TIMESTAMP_NS", ColumnType.TIMESTAMP),
            ("VARCHAR", ColumnType.VARCHAR),
            ("DECIMAL(10,2)", ColumnType.VARCHAR),
            ("BLOB", ColumnType.VARCHAR),
            ("INTEGER[]", ColumnType.VARCHAR),
            ("STRUCT(a INTEGER)", ColumnType.VARCHAR),
            ("MAP(VARCHAR, INTEGER)", ColumnType.VARCHAR),
        ],
    )
    def test_engine_types(self, engine_type, expected):
        assert normalize_type(engine_type) == expected

    def test_case_insensitive(self):
        assert normalize_type("bigint") == ColumnType.BIGINT

    def test_interval_is_text(self):
        """INTERVAL contains "INT" but is not an integer."""
        assert normalize_type("INTERVAL") == ColumnType.VARCHAR

    def test_empty_or_none_is_text(self):
        assert normalize_type("") == ColumnType.VARCHAR
        assert normalize_type(None) == ColumnType.VARCHAR


class TestWriteType:
    """Columns go back to disk as the engine type they were read with."""

    @pytest.mark.parametrize(
        "column_type, engine_type, expected",
        [
            ("INTEGER", "USMALLINT", "USMALLINT"),
            ("BIGINT", "UINTEGER", "UINTEGER"),
            ("DOUBLE", "FLOAT", "FLOAT"),
            ("TIMESTAMP", "TIMESTAMP WITH TIME ZONE", "TIMESTAMP WITH TIME ZONE"),
            ("VARCHAR", "UBIGINT", "UBIGINT"),
            ("VARCHAR", "HUGEINT", "HUGEINT"),
            ("VARCHAR", "DECIMAL(10,2)", "DECIMAL(10,2)"),
            ("VARCHAR", "BLOB", "VARCHAR"),
            ("VARCHAR", "INTEGER[]", "VARCHAR"),
            ("DATE", None, "DATE"),
        ],
    )
    def test_write_type(self, column_type, engine_type, expected):
        assert write_type(column_type, engine_type) == expected

    def test_mismatched_engine_type_is_ignored(self):
        assert write_type("VARCHAR", "INTEGER") == "VARCHAR"

    def test_zoned_timestamps(self):
        assert is_zoned("TIMESTAMP WITH TIME ZONE")
        assert is_zoned("timestamptz")
        assert not is_zoned("TIMESTAMP")
        assert not is_zoned("TIME WITH TIME ZONE")
        assert not is_zoned(None)

    def test_with_zone(self):
        oslo = timezone(timedelta(hours=1))
        naive = datetime(2024, 3, 1, 9, 0)

        assert with_zone(naive, oslo).tzinfo is oslo
        assert with_zone(naive).tzinfo is timezone.utc
        aware = datetime(2024, 3, 1, 9, 0, tzinfo=oslo)
        assert with_zone(aware) is aware
        assert with_zone("text") == "text"


class TestColumnTypeParse:
    def test_parse_is_case_insensitive_and_trimmed(self):
        assert ColumnType.parse("  timestamp ") == ColumnType.TIMESTAMP

    def test_parse_unknown_lists_valid_types(self):
        with pytest.raises(ValueError, match="Unknown column type: STRUCT"):
            ColumnType.parse("STRUCT")

    def test_parse_empty(self):
        with pytest.raises(ValueError, match="cannot be empty"):
            ColumnType.parse("  ")

    def test_str_is_value(self):
        assert str(ColumnType.DOUBLE) == "DOUBLE"


class TestDefaults:
    def test_default_values(self):
        assert default_value("BOOLEAN") is False
        assert default_value("INTEGER") == 0
        assert default_value("BIGINT") == 0
        assert default_value("DOUBLE") == 0.0
        assert default_value("DATE") is None
        assert default_value("TIMESTAMP") is None
        assert default_value("VARCHAR") == ""

    def test_unknown_type_defaults_to_empty_string(self):
        assert default_value("DECIMAL(10,2)") == ""

    def test_python_types(self):
        assert python_type("INTEGER") is int
        assert python_type("DATE") is date
        assert python_type("TIMESTAMP") is datetime
        assert python_type("whatever") is str

    def test_polars_dtypes(self):
        assert polars_dtype("INTEGER") == pl.Int32
        assert polars_dtype("BIGINT") == pl.Int64
        assert polars_dtype("VARCHAR") == pl.String


class TestConvertValue:
    """Raw edits are trimmed and parsed into the column's type."""

    def test_blank_is_none(self):
        assert convert_value("", "INTEGER") is None
        assert convert_value("   ", "VARCHAR") is None
        assert convert_value(None, "DATE") is None

    @pytest.mark.parametrize("raw", ["true", "TRUE", "1", "yes", "Y"])
    def test_boolean_true(self, raw):
        assert convert_value(raw, "BOOLEAN") is True

    @pytest.mark.parametrize("raw", ["false", "0", "no", "nope"])
    def test_boolean_false(self, raw):
        assert convert_value(raw, "BOOLEAN") is False

    def test_integer(self):
        assert convert_value(" 42 ", "INTEGER") == 42

    def test_integer_not_a_number(self):
        with pytest.raises(ConversionError, match="Cannot convert 'abc' to INTEGER"):
            convert_value("abc", "INTEGER")

    def test_integer_out_of_range(self):
        with pytest.raises(ConversionError, match="out of range for INTEGER"):
            convert_value(str(2**31), "INTEGER")

    def test_bigint_accepts_large_values(self):
        assert convert_value(str(2**40), "BIGINT") == 2**40

    def test_bigint_out_of_range(self):
        with pytest.raises(ConversionError, match="out of range for BIGINT"):
            convert_value(str(2**63), "BIGINT")

    def test_double(self):
        assert convert_value("3.5", "DOUBLE") == 3.5

    def test_double_invalid(self):
        with pytest.raises(ConversionError, match="to DOUBLE"):
            convert_value("three", "DOUBLE")

    def test_date(self):
        assert convert_value("2024-11-12", "DATE") == date(2024, 11, 12)

    @pytest.mark.parametrize("raw", ["12/11/2024", "2024-13-01", "2024-1-1"])
    def test_date_invalid(self, raw):
        with pytest.raises(ConversionError, match="Expected: YYYY-MM-DD"):
            convert_value(raw, "DATE")

    def test_varchar_is_trimmed(self):
        assert convert_value("  hello  ", "VARCHAR") == "hello"

    def test_unknown_type_is_text(self):
        assert convert_value(" 12.50 ", "DECIMAL(10,2)") == "12.50"

    def test_conversion_error_is_table_error(self):
        with pytest.raises(TableError):
            convert_value("x", "BIGINT")


class TestParseTimestamp:
    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("2024-11-12T10:30:00", datetime(2024, 11, 12, 10, 30)),
            ("2024-11-12 10:30:00", datetime(2024, 11, 12, 10, 30)),
            ("2024-11-12 10:30", datetime(2024, 11, 12, 10, 30)),
            ("2022-07-11 15:53:24.671", datetime(2022, 7, 11, 15, 53, 24, 671000)),
            ("2022-07-11 15:53:24.1", datetime(2022, 7, 11, 15, 53, 24, 100000)),
            (
                "2022-07-11T15:53:24.123456789",
                datetime(2022, 7, 11, 15, 53, 24, 123456),
            ),
        ],
    )
    def test_accepted_formats(self, raw, expected):
        assert parse_timestamp(raw) == expected

    @pytest.mark.parametrize(
        "raw", ["2024-11-12", "10:30:00", "2024-11-12 25:00:00", "yesterday"]
    )
    def test_rejected_formats_show_help(self, raw):
        with pytest.raises(ConversionError) as exc_info:
            parse_timestamp(raw)
        assert "YYYY-MM-DD HH:mm:ss" in str(exc_info.value)


class TestMaterializeCell:
    def test_text_columns_hold_strings(self):
        assert materialize_cell(12, "VARCHAR") == "12"
        assert materialize_cell([1, 2], "VARCHAR") == "[1, 2]"

    def test_typed_values_pass_through(self):
        assert materialize_cell(7, "INTEGER") == 7
        assert materialize_cell(None, "VARCHAR") is None

"""
Tests for the ParquetData container.
"""
import pytest

from parquetstudio.core.data import ParquetData


def test_counts():
    data = ParquetData(["a", "b"], ["INTEGER", "VARCHAR"], [[1, "x"], [2, "y"]])
    assert data.row_count == 2
    assert data.column_count == 2


def test_mismatched_lengths():
    with pytest.raises(ValueError, match="2 column names but 1 column types"):
        ParquetData(["a", "b"], ["INTEGER"])


def test_output_types_must_cover_every_column():
    with pytest.raises(ValueError, match="one entry per column"):
        ParquetData(["a", "b"], ["INTEGER", "VARCHAR"], output_types=["BIGINT"])


def test_write_types_prefer_output_types():
    data = ParquetData(["a"], ["INTEGER"])
    assert data.write_types() == ["INTEGER"]

    data.output_types = ["BIGINT"]
    assert data.write_types() == ["BIGINT"]


def test_copy_is_deep_for_rows():
    data = ParquetData(["a"], ["INTEGER"], [[1]], output_types=["BIGINT"])
    copied = data.copy()

    copied.rows[0][0] = 5
    copied.output_types[0] = "DOUBLE"

    assert data.rows == [[1]]
    assert data.output_types == ["BIGINT"]


def test_write_types_follow_source_types():
    data = ParquetData(
        ["u32", "note", "added"],
        ["BIGINT", "VARCHAR", "DATE"],
        source_types=["UINTEGER", "BLOB", None],
    )
    assert data.write_types() == ["UINTEGER", "VARCHAR", "DATE"]


def test_source_types_must_cover_every_column():
    with pytest.raises(ValueError, match="source_types must have one entry"):
        ParquetData(["a", "b"], ["INTEGER", "VARCHAR"], source_types=["INTEGER"])

"""
Common test fixtures and configuration.

Fixtures write small, fully typed Parquet files with polars so every test
works against real files read by the real engine.
"""
import json
import shutil
import sys
import tempfile
from datetime import date, datetime
from pathlib import Path

import polars as pl
import pytest

# Add src directory to Python path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))


@pytest.fixture
def temp_dir():
    """Create temporary directory for tests."""
    temp_dir = tempfile.mkdtemp()
    yield Path(temp_dir)
    shutil.rmtree(temp_dir)


@pytest.fixture
def users_frame():
    """Three users covering every semantic column type."""
    return pl.DataFrame(
        {
            "id": pl.Series([1, 2, 3], dtype=pl.Int64),
            "name": ["Alice", "Bob", "Charlie"],
            "age": pl.Series([30, 25, 41], dtype=pl.Int32),
            "score": [9.5, 7.25, None],
            "active": [True, False, True],
            "joined": [date(2020, 1, 15), date(2021, 6, 1), None],
            "updated": [
                datetime(2024, 11, 12, 10, 30),
                datetime(2024, 11, 13, 8, 0, 5),
                datetime(2022, 7, 11, 15, 53, 24, 671000),
            ],
        }
    )


@pytest.fixture
def users_parquet_file(temp_dir, users_frame):
    """Write the users frame to a Parquet file."""
    file_path = temp_dir / "users.parquet"
    users_frame.write_parquet(file_path)
    return file_path


@pytest.fixture
def medium_parquet_file(temp_dir):
    """A larger file for limits and counts."""
    file_path = temp_dir / "events.parquet"
    pl.DataFrame(
        {
            "id": range(1000),
            "category": [f"cat_{i % 5}" for i in range(1000)],
        }
    ).write_parquet(file_path)
    return file_path


@pytest.fixture
def wide_parquet_file(temp_dir):
    """Unsigned integers beyond the signed 32 and 64 bit ranges."""
    file_path = temp_dir / "counters.parquet"
    pl.DataFrame(
        {
            "u32": pl.Series([3_000_000_000, 7], dtype=pl.UInt32),
            "u64": pl.Series([2**64 - 1, 9], dtype=pl.UInt64),
            "id": pl.Series([1, 2], dtype=pl.Int64),
        }
    ).write_parquet(file_path)
    return file_path


@pytest.fixture
def zoned_parquet_file(temp_dir):
    """Timestamps recorded in Europe/Oslo."""
    file_path = temp_dir / "meetings.parquet"
    pl.DataFrame(
        {
            "title": ["standup", "review"],
            "starts": pl.Series(
                [datetime(2024, 3, 1, 9, 0), datetime(2024, 7, 1, 14, 30)],
                dtype=pl.Datetime("us"),
            ).dt.replace_time_zone("Europe/Oslo"),
        }
    ).write_parquet(file_path)
    return file_path


@pytest.fixture
def users_schema_file(temp_dir):
    """A schema file declaring new types for some of the users columns."""
    schema = {
        "partitions": [],
        "fields": [
            {"name": "id", "type": "int32"},
            {"name": "name", "type": ["null", "string"]},
            {"name": "age", "type": "int64"},
            {"name": "score", "type": "double"},
            {"name": "active", "type": "boolean"},
            {"name": "joined", "type": "date"},
            {"name": "updated", "type": "timestamp_millis"},
        ],
    }
    file_path = temp_dir / "users.schema"
    file_path.write_text(json.dumps(schema), encoding="utf-8")
    return file_path


@pytest.fixture
def partial_schema_file(temp_dir):
    """A schema file that only describes two columns."""
    schema = {
        "fields": [
            {"name": "id", "type": "int32"},
            {"name": "name"},
        ]
    }
    file_path = temp_dir / "partial.json"
    file_path.write_text(json.dumps(schema), encoding="utf-8")
    return file_path


@pytest.fixture
def cli_runner():
    """Fixture providing Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()

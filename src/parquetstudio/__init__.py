"""
Open, edit and rewrite Parquet files with an embedded DuckDB engine.
"""
from .core import (
    ColumnType,
    ParquetData,
    ParquetEngine,
    ParquetSession,
    ParquetTable,
    SchemaStructure,
    Studio,
    StudioConfig,
)

__version__ = "0.1.0"

__all__ = [
    "ColumnType",
    "ParquetData",
    "ParquetEngine",
    "ParquetSession",
    "ParquetTable",
    "SchemaStructure",
    "Studio",
    "StudioConfig",
]

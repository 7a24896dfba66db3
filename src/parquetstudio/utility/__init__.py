"""
Utility functions and classes for parquetstudio.
"""
from .exceptions import (
    ConfigError,
    ConversionError,
    EngineConnectionError,
    EngineError,
    NoDataLoadedError,
    ParquetError,
    ParquetReadError,
    ParquetWriteError,
    QueryError,
    SchemaError,
    SessionError,
    StudioError,
    TableError,
)

__all__ = [
    "StudioError",
    "EngineError",
    "EngineConnectionError",
    "QueryError",
    "ParquetError",
    "ParquetReadError",
    "ParquetWriteError",
    "TableError",
    "ConversionError",
    "SchemaError",
    "SessionError",
    "NoDataLoadedError",
    "ConfigError",
]

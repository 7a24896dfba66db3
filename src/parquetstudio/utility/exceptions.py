"""
Custom exceptions for parquetstudio - clear, actionable error handling.

parquetstudio uses a hierarchical exception system so callers can react to
exactly what went wrong: an engine that would not start, a file that would
not read, a cell that would not convert.

Exception Hierarchy:
    StudioError (base)
    ├── EngineError
    │   ├── EngineConnectionError - Embedded engine could not be opened
    │   └── QueryError - SQL failed inside the engine
    ├── ParquetError
    │   ├── ParquetReadError - File missing or unreadable
    │   └── ParquetWriteError - File could not be written
    ├── TableError
    │   └── ConversionError - Raw value does not fit the column type
    ├── SchemaError - Schema file missing, malformed or not compliant
    ├── SessionError
    │   └── NoDataLoadedError - Operation needs an open file
    └── ConfigError - Configuration errors

Usage Guidelines:
    - Always use exception chaining (`raise SpecificError(...) from e`) when
      wrapping exceptions to preserve the original traceback.
    - EngineConnectionError is the only transient error and is retried.
"""


class StudioError(Exception):
    """Base exception for all parquetstudio errors."""

    pass


class EngineError(StudioError):
    """Base exception for embedded engine errors."""

    pass


class EngineConnectionError(EngineError):
    """The embedded engine could not be opened."""

    pass


class QueryError(EngineError):
    """SQL failed inside the embedded engine."""

    def __init__(self, message: str, sql: str = None):
        super().__init__(message)
        self.sql = sql


class ParquetError(StudioError):
    """Base exception for Parquet file errors."""

    def __init__(self, message: str, **kwargs):
        super().__init__(message)
        self.context = kwargs


class ParquetReadError(ParquetError):
    """Error reading a Parquet file."""

    pass


class ParquetWriteError(ParquetError):
    """Error writing a Parquet file."""

    pass


class TableError(StudioError):
    """Invalid operation on the in-memory table."""

    pass


class ConversionError(TableError):
    """A raw value could not be converted to its column type."""

    pass


class SchemaError(StudioError):
    """Schema file missing, malformed or not compliant."""

    pass


class SessionError(StudioError):
    """Invalid operation on a file session."""

    pass


class NoDataLoadedError(SessionError):
    """An operation needs an open file but none is loaded."""

    def __init__(self, message: str = "No data loaded. Please open a file first."):
        super().__init__(message)


class ConfigError(StudioError):
    """Raised when there's an error in configuration."""

    pass

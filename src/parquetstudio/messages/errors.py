"""
Error formatting for parquetstudio - friendly, helpful error messages.

ErrorFormatter turns exceptions into a short message plus a suggestion for
what to try next. The CLI prints both instead of a traceback.
"""
import traceback
from typing import Optional, Tuple

from parquetstudio.utility.exceptions import (
    ConfigError,
    ConversionError,
    EngineConnectionError,
    NoDataLoadedError,
    ParquetReadError,
    ParquetWriteError,
    QueryError,
    SchemaError,
    SessionError,
    TableError,
)


class ErrorFormatter:
    """
    Formats errors into friendly, helpful messages.

    Known parquetstudio errors map to targeted suggestions; anything else
    falls back to keyword matching on the exception type and message.
    """

    SUGGESTIONS = (
        (
            EngineConnectionError,
            "Check the engine settings in parquetstudio.yml. A database file "
            "may be locked by another process.",
        ),
        (
            QueryError,
            "The file is available as the view 'data', e.g. "
            "SELECT * FROM data LIMIT 10.",
        ),
        (
            ParquetReadError,
            "Check that the path exists and points to a valid Parquet file.",
        ),
        (
            ParquetWriteError,
            "Check that the destination directory is writable and the column "
            "types are valid.",
        ),
        (
            ConversionError,
            "Enter a value that matches the column type shown in the header.",
        ),
        (TableError, "Check column names and row indices with 'parquetstudio show'."),
        (
            SchemaError,
            "Schema files must be .schema or .json and contain a 'fields' list "
            "of {name, type} objects.",
        ),
        (NoDataLoadedError, "Open a Parquet file first."),
        (SessionError, "Use --force to overwrite an existing file."),
        (ConfigError, "Check parquetstudio.yml for syntax errors or invalid values."),
    )

    @staticmethod
    def format_error(
        error: Exception, verbose: bool = False
    ) -> Tuple[str, Optional[str]]:
        """
        Format an error into a friendly message and optional suggestion.

        Args:
            error: The exception to format
            verbose: If True, append the cause chain to the message

        Returns:
            Tuple of (friendly_message, suggestion)
        """
        message = str(error) if str(error) else f"An error occurred: {type(error).__name__}"
        if verbose and error.__cause__ is not None:
            message = f"{message} (caused by {type(error.__cause__).__name__}: {error.__cause__})"

        for error_type, suggestion in ErrorFormatter.SUGGESTIONS:
            if isinstance(error, error_type):
                return (message, suggestion)

        error_type = type(error).__name__

        if "FileNotFound" in error_type:
            return (
                "Couldn't find a file or directory.",
                "Check that the path exists and you have permission to access it.",
            )

        if "Permission" in error_type or "permission" in str(error).lower():
            return (
                "You don't have permission to access this resource.",
                "Check file permissions on the source and destination.",
            )

        return (
            message,
            "Run with --verbose for more technical details.",
        )

    @staticmethod
    def format_with_stack_trace(error: Exception) -> str:
        """Format error with full stack trace for verbose mode."""
        tb_lines = traceback.format_exception(type(error), error, error.__traceback__)

        lines = [
            f"Error Type: {type(error).__name__}",
            f"Error Message: {error}",
            "",
            "Full Traceback:",
            "-" * 60,
        ]
        lines.extend(line.rstrip("\n") for line in tb_lines)
        lines.append("-" * 60)

        return "\n".join(lines)

"""
Message utilities for parquetstudio.

- Logger: Human-readable output formatting with colors
- ErrorFormatter: Friendly error messages for the command line
"""
from parquetstudio.messages.errors import ErrorFormatter
from parquetstudio.messages.logger import StudioLogger, get_logger, set_log_level

__all__ = ["StudioLogger", "get_logger", "set_log_level", "ErrorFormatter"]

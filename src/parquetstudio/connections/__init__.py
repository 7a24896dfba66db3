"""
Connection management for parquetstudio.

Key components:
- BaseConnection: Interface for engine connection factories
- DuckDBConnection: In-process DuckDB connection factory
"""
from .base import BaseConnection
from .constants import get_duckdb_defaults
from .duckdb_connection import DuckDBConnection

__all__ = [
    "BaseConnection",
    "DuckDBConnection",
    "get_duckdb_defaults",
]

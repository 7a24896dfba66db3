"""
Default configuration for embedded engine connections.
"""

from typing import Optional

from pydantic import BaseModel, Field

MEMORY_DATABASE = ":memory:"


class DuckDBConnectionDefaults(BaseModel):
    """Default DuckDB connection configuration."""

    database: str = Field(
        default=MEMORY_DATABASE,
        description="Database location; Parquet files are read in place",
    )
    threads: Optional[int] = Field(
        default=None, ge=1, description="Worker threads (engine default when unset)"
    )
    memory_limit: Optional[str] = Field(
        default=None, description="Engine memory limit, e.g. '2GB'"
    )
    read_only: bool = Field(
        default=False, description="Open a database file read-only"
    )


DUCKDB_CONNECTION_DEFAULTS = DuckDBConnectionDefaults()


def get_duckdb_defaults() -> dict:
    """
    Get default DuckDB connection options.

    Returns:
        Dictionary with default DuckDB connection options
    """
    return DUCKDB_CONNECTION_DEFAULTS.model_dump()

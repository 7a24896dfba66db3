"""
DuckDB connection factory.

DuckDB runs in-process, so a "connection" is cheap: each engine operation
opens its own connection and closes it when done. Parquet files are read
and written in place; the database itself is in-memory unless configured.
"""
import asyncio
from typing import Any, Dict, Optional

import duckdb

from parquetstudio.messages import get_logger
from parquetstudio.utility.exceptions import EngineConnectionError
from parquetstudio.utility.retry import with_retry

from .base import BaseConnection
from .constants import MEMORY_DATABASE, get_duckdb_defaults


class DuckDBConnection(BaseConnection):
    """
    Opens DuckDB connections with the configured engine settings.

    Example:
        ```python
        factory = DuckDBConnection(options={"threads": 4, "memory_limit": "2GB"})
        conn = factory.connect()
        try:
            conn.execute("SELECT 42").fetchone()
        finally:
            conn.close()
        ```
    """

    def __init__(
        self,
        database: str = MEMORY_DATABASE,
        options: Optional[Dict[str, Any]] = None,
    ):
        merged = get_duckdb_defaults()
        merged.pop("database")
        merged.update(options or {})
        super().__init__(database or MEMORY_DATABASE, merged)
        self.logger = get_logger("parquetstudio.connections.duckdb")

    @property
    def is_memory(self) -> bool:
        return self.database == MEMORY_DATABASE

    def _engine_config(self) -> Dict[str, str]:
        """Settings passed to duckdb.connect(config=...)."""
        config = {}
        if self.options.get("threads"):
            config["threads"] = str(self.options["threads"])
        if self.options.get("memory_limit"):
            config["memory_limit"] = str(self.options["memory_limit"])
        return config

    @with_retry(retries=3, delay=0.2, reraise=True)
    def connect(self) -> duckdb.DuckDBPyConnection:
        """
        Open a DuckDB connection, retrying while another process holds the
        database file.

        Raises:
            EngineConnectionError: If the engine cannot be started after the
                last attempt
        """
        read_only = bool(self.options.get("read_only")) and not self.is_memory
        try:
            conn = duckdb.connect(
                database=self.database,
                read_only=read_only,
                config=self._engine_config(),
            )
        except duckdb.Error as e:
            raise EngineConnectionError(
                f"Failed to open DuckDB database {self.database}: {e}"
            ) from e

        self.logger.debug(f"Opened DuckDB connection to {self.database}")
        return conn

    async def close_connection(self, conn: duckdb.DuckDBPyConnection) -> None:
        await asyncio.to_thread(conn.close)
        self.logger.debug(f"Closed DuckDB connection to {self.database}")

    async def is_connection_alive(self, conn: duckdb.DuckDBPyConnection) -> bool:
        try:
            await asyncio.to_thread(lambda: conn.execute("SELECT 1").fetchone())
            return True
        except duckdb.Error:
            return False

"""
Tests for the DuckDB connection factory.
"""
import duckdb
import pytest

from parquetstudio.connections import BaseConnection, DuckDBConnection, get_duckdb_defaults
from parquetstudio.utility.exceptions import EngineConnectionError


class TestDuckDBConnectionConfig:
    def test_defaults(self):
        factory = DuckDBConnection()

        assert isinstance(factory, BaseConnection)
        assert factory.database == ":memory:"
        assert factory.is_memory
        assert factory.options["read_only"] is False

    def test_defaults_helper(self):
        defaults = get_duckdb_defaults()
        assert defaults["database"] == ":memory:"
        assert defaults["threads"] is None

    def test_engine_config_skips_unset_options(self):
        assert DuckDBConnection()._engine_config() == {}

    def test_engine_config_stringifies(self):
        factory = DuckDBConnection(options={"threads": 2, "memory_limit": "512MB"})
        assert factory._engine_config() == {"threads": "2", "memory_limit": "512MB"}


class TestDuckDBConnectionConnect:
    def test_connect_in_memory(self):
        conn = DuckDBConnection().connect()
        try:
            assert conn.execute("SELECT 42").fetchone()[0] == 42
        finally:
            conn.close()

    def test_connect_applies_threads(self):
        conn = DuckDBConnection(options={"threads": 2}).connect()
        try:
            threads = conn.execute("SELECT current_setting('threads')").fetchone()[0]
            assert int(threads) == 2
        finally:
            conn.close()

    def test_connect_database_file(self, temp_dir):
        database = str(temp_dir / "studio.duckdb")
        conn = DuckDBConnection(database=database).connect()
        conn.close()

        assert (temp_dir / "studio.duckdb").exists()

    def test_read_only_missing_database_fails(self, temp_dir):
        factory = DuckDBConnection(
            database=str(temp_dir / "missing.duckdb"), options={"read_only": True}
        )

        with pytest.raises(EngineConnectionError, match="Failed to open DuckDB"):
            factory.connect()

    def test_invalid_setting_fails(self):
        factory = DuckDBConnection(options={"memory_limit": "lots"})

        with pytest.raises(EngineConnectionError) as exc_info:
            factory.connect()
        assert isinstance(exc_info.value.__cause__, duckdb.Error)


class TestDuckDBConnectionAsync:
    @pytest.mark.asyncio
    @pytest.mark.timeout(10)
    async def test_get_and_close_connection(self):
        factory = DuckDBConnection()

        conn = await factory.get_connection()
        assert await factory.is_connection_alive(conn)

        await factory.close_connection(conn)
        assert not await factory.is_connection_alive(conn)


class TestDuckDBConnectionRetry:
    @pytest.mark.timeout(10)
    def test_lock_conflict_is_retried(self, monkeypatch):
        attempts = {"count": 0}
        real_connect = duckdb.connect

        def flaky_connect(*args, **kwargs):
            attempts["count"] += 1
            if attempts["count"] == 1:
                raise duckdb.IOException("Could not set lock on file")
            return real_connect(*args, **kwargs)

        monkeypatch.setattr(duckdb, "connect", flaky_connect)

        conn = DuckDBConnection().connect()
        conn.close()

        assert attempts["count"] == 2

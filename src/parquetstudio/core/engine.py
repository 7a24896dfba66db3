"""
Parquet access through the embedded DuckDB engine.

ParquetEngine treats a Parquet file as a table: it reads the schema and rows
with DuckDB, materializes them into ParquetData, and writes ParquetData back
with DuckDB's COPY ... TO ... (FORMAT PARQUET).

Writes go to a staging file next to the target and are moved into place
only once DuckDB has finished, so a failed save never leaves a truncated
file behind.
"""
import os
import re
import time
import uuid
from contextlib import contextmanager
from datetime import timezone
from pathlib import Path
from typing import Iterator, List, Optional, Tuple, Union

import duckdb
import polars as pl

from parquetstudio.connections import BaseConnection, DuckDBConnection
from parquetstudio.messages import get_logger
from parquetstudio.utility.exceptions import (
    ParquetReadError,
    ParquetWriteError,
    QueryError,
)
from parquetstudio.utility.path_helper import PathHelper

from .data import ParquetData
from .types import is_zoned, materialize_cell, normalize_type, polars_dtype, with_zone

VALID_COMPRESSIONS = ("snappy", "gzip", "zstd", "lz4", "brotli", "uncompressed")

# View name a file is exposed as in ad-hoc queries
QUERY_VIEW = "data"
STAGING_FRAME = "studio_frame"

# Type names that may be spliced into a CAST: words, optional (p[,s]), optional []
_SAFE_TYPE = re.compile(r"^[A-Za-z][A-Za-z0-9_ ]*(\(\s*\d+\s*(,\s*\d+\s*)?\))?(\[\])?$")


def quote_identifier(name: str) -> str:
    """Double-quote an SQL identifier, doubling embedded quotes."""
    return '"' + str(name).replace('"', '""') + '"'


def validate_sql_type(type_name: str) -> str:
    """
    Check that a type name is safe to place in SQL.

    Raises:
        ParquetWriteError: If the name contains anything but a type spelling
    """
    cleaned = str(type_name).strip()
    if not _SAFE_TYPE.match(cleaned):
        raise ParquetWriteError(f"Invalid column type: {type_name!r}")
    return cleaned


def _column_series(name: str, values: list, column_type, engine_type) -> pl.Series:
    if is_zoned(engine_type):
        # Zoned columns travel as UTC instants
        instants = [
            None if v is None else with_zone(v).astimezone(timezone.utc)
            for v in values
        ]
        naive = [None if v is None else v.replace(tzinfo=None) for v in instants]
        series = pl.Series(name, naive, dtype=pl.Datetime("us"))
        return series.dt.replace_time_zone("UTC")
    return pl.Series(name, values, dtype=polars_dtype(column_type), strict=False)


def to_frame(data: ParquetData) -> pl.DataFrame:
    """
    Column-wise polars frame holding the cells in their semantic types.

    Raises:
        ParquetWriteError: If a cell does not fit its column's type
    """
    series = []
    for index, (name, column_type) in enumerate(
        zip(data.column_names, data.column_types)
    ):
        values = [row[index] if index < len(row) else None for row in data.rows]
        column = _column_series(name, values, column_type, data.source_type(index))
        # Lenient construction nulls out values that do not fit; refuse those
        if column.null_count() != sum(v is None for v in values):
            raise ParquetWriteError(
                f"Column {name} holds values that do not fit {column_type}",
                column=name,
            )
        series.append(column)
    return pl.DataFrame(series)


class Column:
    """A column as reported by the engine."""

    __slots__ = ("name", "engine_type", "type")

    def __init__(self, name: str, engine_type: str):
        self.name = name
        self.engine_type = engine_type
        self.type = normalize_type(engine_type).value

    def __repr__(self) -> str:
        return f"Column({self.name!r}, {self.engine_type!r} -> {self.type})"

    def __eq__(self, other) -> bool:
        return (
            isinstance(other, Column)
            and self.name == other.name
            and self.engine_type == other.engine_type
        )


class ParquetEngine:
    """
    Reads and writes Parquet files with an embedded DuckDB engine.

    One connection is opened per operation and always closed afterwards.

    Example:
        ```python
        engine = ParquetEngine()
        data = engine.load("data/users.parquet")
        engine.save("data/users_copy.parquet", data, compression="zstd")
        ```
    """

    def __init__(self, connection_factory: Optional[BaseConnection] = None):
        self.connection_factory = connection_factory or DuckDBConnection()
        self.logger = get_logger("parquetstudio.engine")

    @contextmanager
    def connection(self) -> Iterator[duckdb.DuckDBPyConnection]:
        """Scoped engine connection, closed even when the body fails."""
        conn = self.connection_factory.connect()
        try:
            yield conn
        finally:
            conn.close()

    def _relation(
        self, conn: duckdb.DuckDBPyConnection, path: Union[str, Path]
    ) -> duckdb.DuckDBPyRelation:
        file_path = Path(path)
        if not file_path.is_file():
            raise ParquetReadError(f"Parquet file not found: {file_path}", path=str(path))
        try:
            relation = conn.read_parquet(str(file_path.absolute()))
            # Binding the columns reads the footer and rejects non-Parquet files
            relation.columns
            return relation
        except duckdb.Error as e:
            raise ParquetReadError(
                f"Failed to read Parquet file {file_path}: {e}", path=str(path)
            ) from e

    @staticmethod
    def _columns(relation: duckdb.DuckDBPyRelation) -> List[Column]:
        return [
            Column(name, str(engine_type))
            for name, engine_type in zip(relation.columns, relation.types)
        ]

    @staticmethod
    def _materialize(frame: pl.DataFrame, columns: List[Column]) -> ParquetData:
        """Turn an engine result frame into typed rows."""
        types = [column.type for column in columns]
        rows = [
            [materialize_cell(value, types[i]) for i, value in enumerate(row)]
            for row in frame.rows()
        ]
        return ParquetData(
            [c.name for c in columns],
            types,
            rows,
            source_types=[c.engine_type for c in columns],
        )

    def describe(self, path: Union[str, Path]) -> List[Column]:
        """
        Detect a file's schema without reading its rows.

        Raises:
            ParquetReadError: If the file is missing or not Parquet
        """
        with self.connection() as conn:
            return self._columns(self._relation(conn, path))

    def count_rows(self, path: Union[str, Path]) -> int:
        """Number of rows in a Parquet file."""
        with self.connection() as conn:
            relation = self._relation(conn, path)
            try:
                return relation.aggregate("count(*)").fetchone()[0]
            except duckdb.Error as e:
                raise ParquetReadError(f"Failed to count rows in {path}: {e}") from e

    def load(self, path: Union[str, Path], limit: Optional[int] = None) -> ParquetData:
        """
        Read a Parquet file into memory.

        Args:
            path: Parquet file to read
            limit: Read only the first `limit` rows (all rows when None)

        Raises:
            ParquetReadError: If the file is missing or cannot be read
        """
        self.logger.start(f"Loading {path}")
        started = time.monotonic()

        with self.connection() as conn:
            relation = self._relation(conn, path)
            columns = self._columns(relation)
            if limit is not None:
                relation = relation.limit(limit)
            try:
                frame = relation.pl()
            except duckdb.Error as e:
                raise ParquetReadError(
                    f"Failed to read rows from {path}: {e}", path=str(path)
                ) from e

        data = self._materialize(frame, columns)
        self.logger.success(
            self.logger.LOAD_TEMPLATE.format(
                data.row_count, data.column_count, time.monotonic() - started
            )
        )
        return data

    def query(self, path: Union[str, Path], sql: str) -> ParquetData:
        """
        Run SQL against a Parquet file exposed as the view `data`.

        Example:
            engine.query("users.parquet", "SELECT name FROM data WHERE age > 30")

        Raises:
            ParquetReadError: If the file cannot be read
            QueryError: If the SQL fails or returns no result set
        """
        with self.connection() as conn:
            self._relation(conn, path).create_view(QUERY_VIEW, replace=True)
            try:
                result = conn.sql(sql)
                if result is None:
                    raise QueryError("Statement did not return any rows", sql=sql)
                columns = self._columns(result)
                frame = result.pl()
            except duckdb.Error as e:
                raise QueryError(f"Query failed: {e}", sql=sql) from e

        self.logger.debug(f"Query returned {len(frame):,} rows")
        return self._materialize(frame, columns)

    @staticmethod
    def _select_list(data: ParquetData) -> str:
        casts = []
        for name, write_type in zip(data.column_names, data.write_types()):
            ident = quote_identifier(name)
            casts.append(f"CAST({ident} AS {validate_sql_type(write_type)}) AS {ident}")
        return ", ".join(casts)

    def save(
        self,
        path: Union[str, Path],
        data: ParquetData,
        compression: str = "snappy",
    ) -> Path:
        """
        Write data to a new Parquet file, replacing any existing file.

        Each column is cast to its write type (see ParquetData.write_types).

        Returns:
            The path written

        Raises:
            ParquetWriteError: If there is nothing to write, a type or
                compression is invalid, or the engine fails
        """
        if not data.column_names:
            raise ParquetWriteError("No columns to save", path=str(path))
        compression = (compression or "snappy").lower()
        if compression not in VALID_COMPRESSIONS:
            raise ParquetWriteError(
                f"Unsupported compression: {compression}. "
                f"Valid options: {', '.join(VALID_COMPRESSIONS)}"
            )

        target = Path(path).absolute()
        self.logger.start(f"Saving {target}")
        started = time.monotonic()

        select_list = self._select_list(data)
        target.parent.mkdir(parents=True, exist_ok=True)
        staging = target.with_name(f".{target.name}.{uuid.uuid4().hex[:8]}.tmp")

        try:
            frame = to_frame(data)
            with self.connection() as conn:
                conn.register(STAGING_FRAME, frame.to_arrow())
                conn.execute(
                    f"COPY (SELECT {select_list} FROM {STAGING_FRAME}) "
                    f"TO {PathHelper.sql_literal(staging)} "
                    f"(FORMAT PARQUET, COMPRESSION '{compression}')"
                )
            os.replace(staging, target)
        except (duckdb.Error, pl.exceptions.PolarsError, OSError) as e:
            self.logger.error(f"Failed to write {target}: {e}")
            raise ParquetWriteError(
                f"Failed to write Parquet file {target}: {e}", path=str(target)
            ) from e
        finally:
            staging.unlink(missing_ok=True)

        self.logger.success(
            self.logger.SAVE_TEMPLATE.format(
                data.row_count, data.column_count, time.monotonic() - started
            )
        )
        return target

    def schema_of(self, path: Union[str, Path]) -> Tuple[List[str], List[str]]:
        """Column names and semantic types of a file."""
        columns = self.describe(path)
        return [c.name for c in columns], [c.type for c in columns]

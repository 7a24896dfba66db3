"""
Session over one open Parquet file.

A ParquetSession is what an editor tab holds: the file it came from, the
editable table, the schema it was read with and, optionally, a schema file
to write it out with. Edits stay in memory until `save()` flushes them back
to Parquet through the engine.
"""
from enum import Enum
from pathlib import Path
from typing import Iterable, List, Optional, Union

from parquetstudio.messages import get_logger
from parquetstudio.utility.exceptions import (
    NoDataLoadedError,
    SchemaError,
    SessionError,
)
from parquetstudio.utility.path_helper import PathHelper

from .config import SaveConfig, StudioConfig
from .data import ParquetData
from .engine import ParquetEngine
from .schema import (
    STRICT_MODE_MESSAGE,
    SchemaStructure,
    apply_transform,
    complies_strict_mode,
)
from .table import ParquetTable


class SessionState(str, Enum):
    CLOSED = "closed"
    OPEN = "open"


class ParquetSession:
    """
    One Parquet file opened for viewing and editing.

    Example:
        ```python
        session = ParquetSession(ParquetEngine())
        session.open("data/users.parquet")
        session.add_column("country", "VARCHAR")
        session.set_value(0, session.column_count - 1, "NO")
        session.save("data/users_edited.parquet")
        ```
    """

    def __init__(
        self,
        engine: Optional[ParquetEngine] = None,
        config: Optional[StudioConfig] = None,
    ):
        self.config = config or StudioConfig()
        self.engine = engine or ParquetEngine()
        self.table: Optional[ParquetTable] = None
        self.current_file: Optional[Path] = None
        self.truncated = False
        self.schema_file: Optional[Path] = None
        self.original_schema: Optional[SchemaStructure] = None
        self.destination_schema: Optional[SchemaStructure] = None
        self.transform_schema: Optional[SchemaStructure] = None
        self.state = SessionState.CLOSED
        self.logger = get_logger("parquetstudio.session")

    # -- lifecycle -----------------------------------------------------

    def open(self, path: Union[str, Path]) -> ParquetData:
        """
        Load a Parquet file and make it the session's table.

        Any previously loaded schema file is forgotten. With `load.row_limit`
        set, only the first rows are loaded and `truncated` records whether
        the file has more.

        Raises:
            ParquetReadError: If the file cannot be read
        """
        file_path = Path(path)
        limit = self.config.load.row_limit
        data = self.engine.load(file_path, limit=limit)
        self.truncated = (
            limit is not None
            and data.row_count >= limit
            and self.engine.count_rows(file_path) > data.row_count
        )

        self.table = ParquetTable.from_data(data)
        self.current_file = file_path
        self.original_schema = SchemaStructure.from_lists(
            data.column_names, data.column_types
        )
        self.reset_schema()
        self.state = SessionState.OPEN

        self.logger.info(
            f"Opened {PathHelper.get_filename(file_path)} ({data.row_count:,} rows)"
        )
        return data

    def close(self) -> None:
        """Forget the table and schema state."""
        if self.current_file is not None:
            self.logger.debug(f"Closing {self.current_file}")
        self.table = None
        self.current_file = None
        self.truncated = False
        self.original_schema = None
        self.reset_schema()
        self.state = SessionState.CLOSED

    @property
    def has_file(self) -> bool:
        return self.current_file is not None

    @property
    def is_open(self) -> bool:
        return self.state == SessionState.OPEN

    @property
    def is_dirty(self) -> bool:
        return self.table is not None and self.table.modified

    @property
    def display_name(self) -> str:
        if self.current_file is None:
            return "Untitled"
        name = self.current_file.name
        return f"{name} *" if self.is_dirty else name

    def validate_data_loaded(self) -> ParquetTable:
        """
        Raises:
            NoDataLoadedError: If no file is open
        """
        if self.table is None:
            raise NoDataLoadedError()
        return self.table

    # -- table operations ----------------------------------------------

    @property
    def row_count(self) -> int:
        return self.table.row_count if self.table is not None else 0

    @property
    def column_count(self) -> int:
        return self.table.column_count if self.table is not None else 0

    def column_name(self, column: int) -> str:
        return self.validate_data_loaded().column_label(column)

    def get_value(self, row: int, column: int):
        return self.validate_data_loaded().get_value(row, column)

    def set_value(self, row: int, column: int, raw) -> object:
        return self.validate_data_loaded().set_value(row, column, raw)

    def add_row(self) -> int:
        index = self.validate_data_loaded().add_row()
        self.logger.info(f"Added row at index: {index}")
        return index

    def add_column(self, name: str, column_type: str) -> int:
        index = self.validate_data_loaded().add_column(name, column_type)
        self.logger.info(
            f"Added column: {name.strip()} ({column_type.upper()}) at index: {index}"
        )
        return index

    def delete_column(self, column: int) -> str:
        name = self.validate_data_loaded().delete_column(column)
        self.logger.info(f"Deleted column: {name}")
        return name

    def delete_rows(self, rows: Optional[Iterable[int]]) -> int:
        table = self.validate_data_loaded()
        if not rows:
            return 0
        deleted = table.delete_rows(rows)
        self.logger.info(f"Deleted {deleted} row(s)")
        return deleted

    def search(self, text: str) -> List[int]:
        return self.validate_data_loaded().search(text)

    # -- schema --------------------------------------------------------

    def reset_schema(self) -> None:
        self.schema_file = None
        self.destination_schema = None
        self.transform_schema = None

    def load_schema_file(self, path: Union[str, Path]) -> SchemaStructure:
        """
        Read a schema file and pair it with the open file's schema.

        Returns:
            The transform schema (current type -> written type per column)

        Raises:
            NoDataLoadedError: If no file is open
            SchemaError: If the schema file is missing, has the wrong
                extension, or cannot be parsed
        """
        self.validate_data_loaded()
        schema_path = Path(path)
        if not PathHelper.is_schema_file(schema_path):
            raise SchemaError(
                f"Select an existing schema file with a .schema or .json "
                f"extension: {schema_path}"
            )

        destination = SchemaStructure.from_file(schema_path)
        self.schema_file = schema_path
        self.destination_schema = destination
        self.transform_schema = self.original_schema.to_transform(destination)

        if not self.complies_strict_mode():
            self.logger.warning(STRICT_MODE_MESSAGE)
        self.logger.info(f"Loaded schema file {schema_path.name}")
        return self.transform_schema

    def complies_strict_mode(self) -> bool:
        return complies_strict_mode(self.original_schema, self.destination_schema)

    # -- persistence ---------------------------------------------------

    def save(
        self,
        output: Union[str, Path],
        use_schema: bool = False,
        strict: bool = False,
        overwrite: Optional[bool] = None,
        compression: Optional[str] = None,
    ) -> Path:
        """
        Flush the table to a Parquet file.

        Args:
            output: Target path; ".parquet" is appended when missing, except
                when output is the open file itself
            use_schema: Write columns with the types of the loaded schema file
            strict: With use_schema, require the schema file to describe as
                many fields as the table
            overwrite: Replace an existing file (default from config)
            compression: Parquet compression codec (default from config)

        Returns:
            The path written

        Raises:
            NoDataLoadedError: If no file is open
            SessionError: If the target exists and overwrite is off, or the
                target is the open file and only part of it was loaded
            SchemaError: If the schema file is unusable or strict mode fails
            ParquetWriteError: If the engine fails to write
        """
        table = self.validate_data_loaded()
        save_config: SaveConfig = self.config.save
        overwrite = save_config.overwrite if overwrite is None else overwrite
        target = Path(output)
        if not self.is_current_file(target):
            target = PathHelper.ensure_suffix(target)

        if self.truncated and self.is_current_file(target):
            raise SessionError(
                f"Only the first {table.row_count:,} rows of {target} are loaded "
                f"(load.row_limit); saving over it would drop the rest. "
                f"Save to another file instead."
            )
        if target.exists() and not overwrite:
            raise SessionError(f"File already exists: {target}")

        data = table.to_data()
        if not data.column_names:
            raise SessionError("No columns to save")

        if use_schema:
            if not PathHelper.is_schema_file(self.schema_file):
                raise SchemaError("The schema is not valid. Load a schema file first.")
            if strict:
                if not self.complies_strict_mode():
                    raise SchemaError(STRICT_MODE_MESSAGE)
                self.logger.info("Writing with schema file (strict mode)")
            else:
                self.logger.warning("Writing with schema file")
            data = apply_transform(data, self.transform_schema)

        written = self.engine.save(
            target, data, compression=compression or save_config.compression
        )
        table.mark_saved()
        self.logger.success(f"Saved {written}")
        return written

    def save_in_place(self, **kwargs) -> Path:
        """
        Write the table back over the file it was opened from.

        Keyword arguments are passed to save(); overwrite is implied.
        """
        self.validate_data_loaded()
        kwargs["overwrite"] = True
        return self.save(self.current_file, **kwargs)

    def is_current_file(self, path: Union[str, Path]) -> bool:
        return self.current_file is not None and PathHelper.normalize(
            path
        ) == PathHelper.normalize(self.current_file)

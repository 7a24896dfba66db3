"""
Editable in-memory table over the contents of a Parquet file.

ParquetTable owns its own copy of the column metadata and rows. Every cell
holds a value of its column's semantic type; raw edits are converted before
they are stored, so a table can always be written back without surprises.
"""
from datetime import datetime, tzinfo
from typing import Any, Iterable, List, Optional

from parquetstudio.messages import get_logger
from parquetstudio.utility.exceptions import TableError

from .data import ParquetData
from .types import (
    ColumnType,
    convert_value,
    default_value,
    is_zoned,
    python_type,
    with_zone,
)


class ParquetTable:
    """
    Table model with type-checked edits.

    Example:
        ```python
        table = ParquetTable.from_data(engine.load("users.parquet"))
        table.set_value(0, 1, "Charlie")
        row = table.add_row()
        table.delete_rows([row])
        ```
    """

    def __init__(
        self,
        column_names: List[str],
        column_types: List[str],
        rows: Optional[Iterable[List[Any]]] = None,
        source_types: Optional[List[Optional[str]]] = None,
    ):
        if len(column_names) != len(column_types):
            raise TableError("Column names and types must have the same length")
        self.column_names: List[str] = list(column_names)
        self.column_types: List[str] = [str(t) for t in column_types]
        self.rows: List[List[Any]] = [list(row) for row in (rows or [])]
        self.source_types: List[Optional[str]] = list(
            source_types or [None] * len(self.column_names)
        )
        if len(self.source_types) != len(self.column_names):
            raise TableError("Source types must have one entry per column")
        self.modified = False
        self.logger = get_logger("parquetstudio.table")

    @classmethod
    def from_data(cls, data: ParquetData) -> "ParquetTable":
        return cls(
            data.column_names, data.column_types, data.rows, data.source_types
        )

    @property
    def row_count(self) -> int:
        return len(self.rows)

    @property
    def column_count(self) -> int:
        return len(self.column_names)

    def _in_bounds(self, row: int, column: int) -> bool:
        return 0 <= row < len(self.rows) and 0 <= column < len(self.column_names)

    def column_label(self, column: int) -> str:
        """Header label, e.g. "id (INTEGER)"; empty when out of range."""
        if 0 <= column < len(self.column_names):
            return f"{self.column_names[column]} ({self.column_types[column]})"
        return ""

    def python_type(self, column: int) -> type:
        """Python type of the cells in a column (str when out of range)."""
        if 0 <= column < len(self.column_types):
            return python_type(self.column_types[column])
        return str

    def column_index(self, name: str) -> int:
        """
        Index of a column by name.

        Raises:
            TableError: If no column has that name
        """
        try:
            return self.column_names.index(name)
        except ValueError as e:
            raise TableError(f"Unknown column: {name}") from e

    def _zone(self, column: int) -> Optional[tzinfo]:
        """Zone of the first zoned timestamp in a column."""
        for values in self.rows:
            value = values[column] if column < len(values) else None
            if isinstance(value, datetime) and value.tzinfo is not None:
                return value.tzinfo
        return None

    def get_value(self, row: int, column: int) -> Any:
        if not self._in_bounds(row, column):
            return None
        values = self.rows[row]
        return values[column] if column < len(values) else None

    def set_value(self, row: int, column: int, raw: Any) -> Any:
        """
        Convert raw to the column type and store it.

        Out-of-range coordinates are ignored.

        Returns:
            The stored value (None when ignored or blank)

        Raises:
            ConversionError: If raw does not fit the column type
        """
        if not self._in_bounds(row, column):
            return None

        value = convert_value(raw, self.column_types[column])
        if is_zoned(self.source_types[column]):
            value = with_zone(value, self._zone(column))
        values = self.rows[row]
        while len(values) <= column:
            values.append(None)
        values[column] = value
        self.modified = True
        return value

    def add_row(self) -> int:
        """Append a row of type defaults and return its index."""
        self.rows.append([default_value(t) for t in self.column_types])
        self.modified = True
        return len(self.rows) - 1

    def delete_row(self, row: int) -> bool:
        """Delete one row; out-of-range indices are ignored."""
        if 0 <= row < len(self.rows):
            del self.rows[row]
            self.modified = True
            return True
        return False

    def delete_rows(self, rows: Iterable[int]) -> int:
        """
        Delete several rows at once.

        Indices refer to the table before deletion; duplicates are ignored
        and deletion runs from the highest index down.

        Returns:
            Number of rows actually deleted
        """
        deleted = 0
        for row in sorted(set(rows or ()), reverse=True):
            if self.delete_row(row):
                deleted += 1
        return deleted

    def add_column(self, name: str, column_type: str) -> int:
        """
        Append a column filled with the type default.

        Returns:
            Index of the new column

        Raises:
            TableError: If the name is blank or taken, or the type is unknown
        """
        if name is None or not name.strip():
            raise TableError("Column name cannot be empty")
        try:
            semantic = ColumnType.parse(column_type)
        except ValueError as e:
            raise TableError(str(e)) from e

        trimmed = name.strip()
        if trimmed in self.column_names:
            raise TableError(f"Column name already exists: {trimmed}")

        self.column_names.append(trimmed)
        self.column_types.append(semantic.value)
        self.source_types.append(None)
        fill = default_value(semantic)
        for values in self.rows:
            values.append(fill)

        self.modified = True
        return len(self.column_names) - 1

    def delete_column(self, column: int) -> str:
        """
        Remove a column and its values.

        Returns:
            Name of the removed column

        Raises:
            TableError: If the index is invalid or it is the last column
        """
        if not 0 <= column < len(self.column_names):
            raise TableError(f"Invalid column index: {column}")
        if len(self.column_names) <= 1:
            raise TableError(
                "Cannot delete the last column. A table must have at least one column."
            )

        name = self.column_names.pop(column)
        self.column_types.pop(column)
        self.source_types.pop(column)
        for values in self.rows:
            if column < len(values):
                del values[column]

        self.modified = True
        return name

    def search(self, text: str) -> List[int]:
        """
        Indices of rows where any cell contains text (case-insensitive).

        Blank text matches every row.
        """
        if text is None or not text.strip():
            return list(range(len(self.rows)))
        needle = text.lower()
        return [
            index
            for index, values in enumerate(self.rows)
            if any(v is not None and needle in str(v).lower() for v in values)
        ]

    def to_data(self) -> ParquetData:
        """Snapshot of the table, independent of later edits."""
        width = len(self.column_names)
        rows = [
            (list(values) + [None] * width)[:width] for values in self.rows
        ]
        return ParquetData(
            list(self.column_names),
            list(self.column_types),
            rows,
            source_types=list(self.source_types),
        )

    def mark_saved(self) -> None:
        self.modified = False

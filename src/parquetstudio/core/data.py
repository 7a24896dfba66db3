"""
Plain container for the contents of a Parquet file.
"""
from dataclasses import dataclass, field
from typing import Any, List, Optional

from .types import write_type


@dataclass
class ParquetData:
    """
    Column names, semantic column types and row values of a Parquet file.

    `source_types` holds the engine types the columns were read with (None
    for columns added later). `output_types` optionally overrides the types
    written to disk; cells are always held in `column_types` form and cast
    by the engine on save.
    """

    column_names: List[str]
    column_types: List[str]
    rows: List[List[Any]] = field(default_factory=list)
    output_types: Optional[List[str]] = None
    source_types: Optional[List[Optional[str]]] = None

    def __post_init__(self):
        if len(self.column_names) != len(self.column_types):
            raise ValueError(
                f"Got {len(self.column_names)} column names but "
                f"{len(self.column_types)} column types"
            )
        for label, types in (
            ("output_types", self.output_types),
            ("source_types", self.source_types),
        ):
            if types is not None and len(types) != len(self.column_names):
                raise ValueError(f"{label} must have one entry per column")

    @property
    def row_count(self) -> int:
        return len(self.rows)

    @property
    def column_count(self) -> int:
        return len(self.column_names)

    def source_type(self, column: int) -> Optional[str]:
        if self.source_types is None:
            return None
        return self.source_types[column]

    def write_types(self) -> List[str]:
        """Types the columns are written as."""
        if self.output_types:
            return list(self.output_types)
        return [
            write_type(column_type, self.source_type(index))
            for index, column_type in enumerate(self.column_types)
        ]

    def copy(self) -> "ParquetData":
        """Copy with independent column and row lists."""
        return ParquetData(
            column_names=list(self.column_names),
            column_types=list(self.column_types),
            rows=[list(row) for row in self.rows],
            output_types=list(self.output_types) if self.output_types else None,
            source_types=list(self.source_types) if self.source_types else None,
        )

"""
Path utilities for Parquet and schema files.

PathHelper keeps the small path rules of parquetstudio in one place:
canonical keys for open files, the .parquet suffix on save targets, and the
accepted schema file extensions.
"""

from pathlib import Path, PurePath
from typing import Iterable, Union

PARQUET_SUFFIX = ".parquet"
SCHEMA_SUFFIXES = (".schema", ".json")


class PathHelper:
    """
    Path manipulation utilities.

    All methods are static - use directly without instantiation.
    """

    @staticmethod
    def normalize(path: Union[str, Path]) -> Path:
        """
        Return the canonical absolute form of a path.

        Symlinks and `..` segments are resolved so the same file opened via
        two spellings maps to one key. Falls back to the absolute path when
        the path cannot be resolved.
        """
        p = Path(path).expanduser()
        try:
            return p.resolve()
        except OSError:
            return p.absolute()

    @staticmethod
    def ensure_suffix(path: Union[str, Path], suffix: str = PARQUET_SUFFIX) -> Path:
        """
        Append suffix when the filename does not already end with it.

        The comparison is case-insensitive: "OUT.PARQUET" is kept as is.
        """
        p = Path(path)
        if p.name.lower().endswith(suffix.lower()):
            return p
        return p.with_name(p.name + suffix)

    @staticmethod
    def has_suffix(path: Union[str, Path], suffixes: Iterable[str]) -> bool:
        """Check whether path ends with one of suffixes."""
        name = PurePath(path).name
        return any(name.endswith(s) for s in suffixes)

    @staticmethod
    def is_schema_file(path: Union[str, Path]) -> bool:
        """A schema file exists and has a .schema or .json extension."""
        if not path:
            return False
        p = Path(path)
        return p.is_file() and PathHelper.has_suffix(p, SCHEMA_SUFFIXES)

    @staticmethod
    def get_filename(path: Union[str, Path]) -> str:
        """Extract filename from path."""
        if not path:
            return ""
        return PurePath(path).name

    @staticmethod
    def sql_literal(path: Union[str, Path]) -> str:
        """
        Render a path as a single-quoted SQL string literal.

        Only for statements that cannot bind parameters (COPY ... TO).
        """
        return "'" + str(path).replace("'", "''") + "'"

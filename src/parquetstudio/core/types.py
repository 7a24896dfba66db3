"""
Semantic column types and cell conversion.

The embedded engine knows dozens of physical types. The editor works with a
small semantic set; everything the engine reports is normalized into it and
every cell holds the matching Python value.
"""
import re
from datetime import date, datetime, timezone, tzinfo
from enum import Enum
from typing import Any, Optional

import polars as pl

from parquetstudio.utility.exceptions import ConversionError

INT32_RANGE = (-(2**31), 2**31 - 1)
INT64_RANGE = (-(2**63), 2**63 - 1)

TRUE_STRINGS = frozenset({"true", "1", "yes", "y"})

_DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_TIMESTAMP_PATTERN = re.compile(
    r"^(?P<date>\d{4}-\d{2}-\d{2})[T ]"
    r"(?P<hour>\d{2}):(?P<minute>\d{2})"
    r"(?::(?P<second>\d{2})(?:\.(?P<fraction>\d{1,9}))?)?$"
)

DATE_FORMAT_HELP = "Invalid date format. Expected: YYYY-MM-DD (e.g., 2024-11-12)"
TIMESTAMP_FORMAT_HELP = (
    "Invalid timestamp format. Expected formats:\n"
    "  - YYYY-MM-DDTHH:mm:ss (e.g., 2024-11-12T10:30:00)\n"
    "  - YYYY-MM-DD HH:mm:ss (e.g., 2024-11-12 10:30:00)\n"
    "  - YYYY-MM-DD HH:mm:ss.SSS (e.g., 2022-07-11 15:53:24.671)"
)


class ColumnType(str, Enum):
    """Semantic type of an editable column."""

    BOOLEAN = "BOOLEAN"
    INTEGER = "INTEGER"
    BIGINT = "BIGINT"
    DOUBLE = "DOUBLE"
    DATE = "DATE"
    TIMESTAMP = "TIMESTAMP"
    VARCHAR = "VARCHAR"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def parse(cls, value: str) -> "ColumnType":
        """
        Parse a user-supplied type name (case-insensitive).

        Raises:
            ValueError: If value is blank or not a semantic type
        """
        if value is None or not str(value).strip():
            raise ValueError("Column type cannot be empty")
        name = str(value).strip().upper()
        try:
            return cls(name)
        except ValueError as e:
            valid = ", ".join(t.value for t in cls)
            raise ValueError(f"Unknown column type: {value}. Valid types: {valid}") from e


PYTHON_TYPES = {
    ColumnType.BOOLEAN: bool,
    ColumnType.INTEGER: int,
    ColumnType.BIGINT: int,
    ColumnType.DOUBLE: float,
    ColumnType.DATE: date,
    ColumnType.TIMESTAMP: datetime,
    ColumnType.VARCHAR: str,
}

POLARS_TYPES = {
    ColumnType.BOOLEAN: pl.Boolean,
    ColumnType.INTEGER: pl.Int32,
    ColumnType.BIGINT: pl.Int64,
    ColumnType.DOUBLE: pl.Float64,
    ColumnType.DATE: pl.Date,
    ColumnType.TIMESTAMP: pl.Datetime("us"),
    ColumnType.VARCHAR: pl.String,
}

DEFAULT_VALUES = {
    ColumnType.BOOLEAN: False,
    ColumnType.INTEGER: 0,
    ColumnType.BIGINT: 0,
    ColumnType.DOUBLE: 0.0,
    ColumnType.DATE: None,
    ColumnType.TIMESTAMP: None,
    ColumnType.VARCHAR: "",
}


# Unsigned and 128-bit integers that do not fit the signed editors
WIDE_INTEGERS = frozenset({"UBIGINT", "HUGEINT", "UHUGEINT"})

# Engine types held as text that cast back from their string form
TEXT_CASTABLE = ("DECIMAL", "NUMERIC", "UBIGINT", "HUGEINT", "UHUGEINT", "UUID", "TIME")


def normalize_type(engine_type: str) -> ColumnType:
    """
    Map an engine type name (e.g. "UBIGINT", "TIMESTAMP WITH TIME ZONE",
    "DECIMAL(10,2)") onto the semantic type set.

    Anything without a dedicated editor (decimals, nested types, blobs,
    integers wider than BIGINT) is edited as text.
    """
    t = (engine_type or "").upper()
    if t.endswith("]") or t.startswith(("STRUCT", "MAP", "UNION")):
        return ColumnType.VARCHAR
    if "BOOL" in t:
        return ColumnType.BOOLEAN
    if "INTERVAL" in t or t in WIDE_INTEGERS:
        return ColumnType.VARCHAR
    if t == "UINTEGER":
        return ColumnType.BIGINT
    if "INT" in t:
        return ColumnType.BIGINT if "BIG" in t else ColumnType.INTEGER
    if "DOUBLE" in t or "FLOAT" in t:
        return ColumnType.DOUBLE
    if "DATE" in t and "TIME" not in t:
        return ColumnType.DATE
    if "TIMESTAMP" in t:
        return ColumnType.TIMESTAMP
    return ColumnType.VARCHAR


def is_zoned(engine_type: Optional[str]) -> bool:
    """True for timestamp types that carry a time zone."""
    t = (engine_type or "").upper()
    return t == "TIMESTAMPTZ" or (t.startswith("TIMESTAMP") and "TIME ZONE" in t)


def write_type(column_type: Any, engine_type: Optional[str] = None) -> str:
    """
    Type a column is written back as.

    A column keeps the engine type it was read with as long as its cells
    can be cast back to it; new columns, and text columns read from types
    with no text form (blobs, nested values), use the semantic type.
    """
    semantic = as_column_type(column_type)
    if semantic is None:
        return str(column_type)
    if not engine_type or normalize_type(engine_type) != semantic:
        return semantic.value
    if semantic != ColumnType.VARCHAR:
        return engine_type
    if engine_type.upper().startswith(TEXT_CASTABLE):
        return engine_type
    return semantic.value


def as_column_type(value: Any) -> Optional[ColumnType]:
    """Return value as a ColumnType, or None when it is not a semantic type."""
    if isinstance(value, ColumnType):
        return value
    try:
        return ColumnType(str(value).strip().upper())
    except ValueError:
        return None


def default_value(column_type: Any) -> Any:
    """Default cell value for a new row or column."""
    semantic = as_column_type(column_type)
    if semantic is None:
        return ""
    return DEFAULT_VALUES[semantic]


def python_type(column_type: Any) -> type:
    """Python type held by cells of a column."""
    semantic = as_column_type(column_type)
    if semantic is None:
        return str
    return PYTHON_TYPES[semantic]


def polars_dtype(column_type: Any) -> pl.DataType:
    """Polars dtype used to hand a column to the engine."""
    semantic = as_column_type(column_type)
    if semantic is None:
        return pl.String
    return POLARS_TYPES[semantic]


def materialize_cell(value: Any, column_type: Any) -> Any:
    """
    Bring a value read from the engine into its semantic Python form.

    Text columns carry strings only, so decimals, lists and structs read
    from the file are stringified.
    """
    if value is None:
        return None
    if as_column_type(column_type) == ColumnType.VARCHAR and not isinstance(value, str):
        return str(value)
    return value


def convert_value(raw: Any, column_type: Any) -> Any:
    """
    Convert a raw edited value (usually a string) to the column's type.

    Blank input becomes None. Input is trimmed before parsing.

    Raises:
        ConversionError: If the value does not fit the column type
    """
    if raw is None:
        return None
    text = str(raw).strip()
    if not text:
        return None

    semantic = as_column_type(column_type) or ColumnType.VARCHAR

    if semantic == ColumnType.BOOLEAN:
        return text.lower() in TRUE_STRINGS
    if semantic == ColumnType.INTEGER:
        return _parse_int(text, semantic, INT32_RANGE)
    if semantic == ColumnType.BIGINT:
        return _parse_int(text, semantic, INT64_RANGE)
    if semantic == ColumnType.DOUBLE:
        try:
            return float(text)
        except ValueError as e:
            raise ConversionError(f"Cannot convert '{text}' to {semantic}") from e
    if semantic == ColumnType.DATE:
        return parse_date(text)
    if semantic == ColumnType.TIMESTAMP:
        return parse_timestamp(text)
    return text


def _parse_int(text: str, semantic: ColumnType, bounds: tuple) -> int:
    try:
        value = int(text)
    except ValueError as e:
        raise ConversionError(f"Cannot convert '{text}' to {semantic}") from e
    low, high = bounds
    if not low <= value <= high:
        raise ConversionError(f"Value {value} is out of range for {semantic}")
    return value


def parse_date(text: str) -> date:
    """Parse an ISO date (YYYY-MM-DD)."""
    if not _DATE_PATTERN.match(text):
        raise ConversionError(DATE_FORMAT_HELP)
    try:
        return date.fromisoformat(text)
    except ValueError as e:
        raise ConversionError(DATE_FORMAT_HELP) from e


def parse_timestamp(text: str) -> datetime:
    """
    Parse a timestamp with either 'T' or a space between date and time.

    Accepts 0-9 fractional digits; precision beyond microseconds is
    truncated.
    """
    match = _TIMESTAMP_PATTERN.match(text.strip())
    if not match:
        raise ConversionError(TIMESTAMP_FORMAT_HELP)

    fraction = (match.group("fraction") or "").ljust(6, "0")[:6]
    try:
        day = date.fromisoformat(match.group("date"))
        return datetime(
            day.year,
            day.month,
            day.day,
            int(match.group("hour")),
            int(match.group("minute")),
            int(match.group("second") or 0),
            int(fraction),
        )
    except ValueError as e:
        raise ConversionError(TIMESTAMP_FORMAT_HELP) from e


def with_zone(value: Any, zone: Optional[tzinfo] = None) -> Any:
    """Give a naive datetime the zone of its column (UTC when unknown)."""
    if isinstance(value, datetime) and value.tzinfo is None:
        return value.replace(tzinfo=zone or timezone.utc)
    return value

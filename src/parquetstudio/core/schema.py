"""
Schema files and type transformation.

A schema file describes the column types a Parquet file *should* have, for
example the Avro-style schema a downstream job expects:

    ```json
    {
      "partitions": [],
      "fields": [
        {"name": "id", "type": "int64"},
        {"name": "email", "type": ["null", "string"]}
      ]
    }
    ```

Comparing it with the schema of the open file yields a transform schema:
one entry per column of the file with its current type and the type it
will be written as. Saving with the transform schema casts each column.
"""
import json
from pathlib import Path
from typing import Any, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from parquetstudio.messages import get_logger
from parquetstudio.utility.exceptions import SchemaError

from .data import ParquetData

logger = get_logger("parquetstudio.schema")

# Physical/logical type names that have a friendlier engine equivalent
TYPE_EQUIVALENTS = {
    "timestamp_millis": "timestamp",
    "int32": "integer",
    "int64": "bigint",
}


def standard_type(value: Any) -> str:
    """
    Reduce a schema type declaration to a single type name.

    Unions (lists) resolve to their first non-"null" member. A missing type
    reads as "string".
    """
    if isinstance(value, (list, tuple)):
        value = next((v for v in value if v is not None and v != "null"), None)
    if value is None:
        return "string"
    name = str(value)
    return TYPE_EQUIVALENTS.get(name.lower(), name)


class SchemaItem(BaseModel):
    """A named column with its standardized type."""

    name: str
    type: str = Field(default=None, validate_default=True)

    @field_validator("type", mode="before")
    @classmethod
    def standardize_type(cls, v):
        return standard_type(v)

    def __str__(self) -> str:
        return f"{self.name} ({self.type})"

    def to_dict(self) -> dict:
        return {"name": self.name, "type": self.type}


class SchemaItemTransform(SchemaItem):
    """A column with its current type and the type it will be written as."""

    model_config = ConfigDict(populate_by_name=True)

    type_transform: Optional[str] = Field(default=None, alias="typeTransform")

    def __str__(self) -> str:
        return f"{self.name} ({self.type} -> {self.type_transform})"

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "type": self.type,
            "typeTransform": self.type_transform,
        }


class SchemaStructure(BaseModel):
    """Ordered column list of a schema, plus optional partition columns."""

    partitions: List[str] = Field(default_factory=list)
    fields: List[SchemaItem] = Field(default_factory=list)

    @field_validator("partitions", mode="before")
    @classmethod
    def default_partitions(cls, v):
        return [] if v is None else v

    def get_item(self, name: str) -> Optional[SchemaItem]:
        return next((item for item in self.fields if item.name == name), None)

    @property
    def field_count(self) -> int:
        return len(self.fields)

    def to_transform(self, destination: "SchemaStructure") -> "SchemaStructure":
        """
        Pair every field of this schema with its type in destination.

        Fields missing from destination keep a None transform and are
        written unchanged.
        """
        fields = []
        for item in self.fields:
            found = destination.get_item(item.name)
            fields.append(
                SchemaItemTransform(
                    name=item.name,
                    type=item.type,
                    type_transform=found.type if found is not None else None,
                )
            )
        logger.debug(f"Generated transform schema for {len(fields)} fields")
        return SchemaStructure(partitions=list(self.partitions), fields=fields)

    def to_dict(self) -> dict:
        return {
            "partitions": list(self.partitions),
            "fields": [item.to_dict() for item in self.fields],
        }

    def to_json(self) -> str:
        """Pretty-printed JSON of the schema."""
        return json.dumps(self.to_dict(), indent=2)

    @classmethod
    def from_lists(cls, names: List[str], types: List[str]) -> "SchemaStructure":
        """
        Build a schema from parallel name and type lists.

        Raises:
            SchemaError: If the lists differ in length
        """
        if len(names) != len(types):
            raise SchemaError(
                f"Got {len(names)} column names but {len(types)} column types"
            )
        return cls(
            partitions=[],
            fields=[SchemaItem(name=n, type=str(t)) for n, t in zip(names, types)],
        )

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "SchemaStructure":
        """
        Read a schema from a JSON file.

        Raises:
            SchemaError: If the file cannot be read or does not describe a schema
        """
        logger.debug(f"Loading schema file: {path}")
        try:
            raw = json.loads(Path(path).read_text(encoding="utf-8"))
        except OSError as e:
            raise SchemaError(f"Cannot read schema file {path}: {e}") from e
        except json.JSONDecodeError as e:
            raise SchemaError(f"Schema file {path} is not valid JSON: {e}") from e

        if not isinstance(raw, dict):
            raise SchemaError(f"Schema file {path} must contain a JSON object")

        try:
            return cls.model_validate(raw)
        except ValidationError as e:
            raise SchemaError(f"Invalid schema in {path}: {e}") from e


def apply_transform(data: ParquetData, schema: SchemaStructure) -> ParquetData:
    """
    Copy data with output types taken from a transform schema.

    Columns without a transform entry, or whose transform is null, keep
    their current type.
    """
    result = data.copy()
    output_types = result.write_types()

    for index, name in enumerate(result.column_names):
        item = schema.get_item(name)
        target = getattr(item, "type_transform", None)
        logger.debug(f"Column {name} | {output_types[index]} -> {target}")
        if target is None or str(target) == "null":
            continue
        output_types[index] = str(target)

    result.output_types = output_types
    return result


STRICT_MODE_MESSAGE = (
    "The schema file does not have the same number of fields as the Parquet file."
)


def complies_strict_mode(
    original: Optional[SchemaStructure], destination: Optional[SchemaStructure]
) -> bool:
    """
    Strict mode holds when the schema file describes exactly as many fields
    as the open file.
    """
    if original is None or destination is None:
        return False
    return original.field_count == destination.field_count

"""
Core components: engine, table model, schema transforms and sessions.
"""
from .config import EngineConfig, LoadConfig, SaveConfig, StudioConfig
from .data import ParquetData
from .engine import Column, ParquetEngine
from .schema import SchemaItem, SchemaItemTransform, SchemaStructure, apply_transform
from .session import ParquetSession, SessionState
from .studio import Studio
from .table import ParquetTable
from .types import ColumnType, convert_value, normalize_type

__all__ = [
    "Column",
    "ColumnType",
    "EngineConfig",
    "LoadConfig",
    "ParquetData",
    "ParquetEngine",
    "ParquetSession",
    "ParquetTable",
    "SaveConfig",
    "SchemaItem",
    "SchemaItemTransform",
    "SchemaStructure",
    "SessionState",
    "Studio",
    "StudioConfig",
    "apply_transform",
    "convert_value",
    "normalize_type",
]

"""
Configuration for parquetstudio.

Settings live in an optional `parquetstudio.yml`, found by walking up from
the working directory:

    ```yaml
    engine:
      database: ":memory:"
      threads: 4
      memory_limit: ${STUDIO_MEMORY:-2GB}
    load:
      row_limit: null
    save:
      compression: zstd
      overwrite: false
    log_level: INFO
    ```

Every section is optional; a missing file means all defaults.
Environment variables are expanded with ${VAR} and ${VAR:-default}.
"""
import os
import re
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from parquetstudio.connections import DuckDBConnection
from parquetstudio.connections.constants import MEMORY_DATABASE
from parquetstudio.utility.exceptions import ConfigError

from .engine import VALID_COMPRESSIONS

CONFIG_FILE_NAME = "parquetstudio.yml"

VALID_LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]


class EngineConfig(BaseModel):
    """Embedded engine settings."""

    database: str = Field(
        default=MEMORY_DATABASE, description="DuckDB database (in-memory by default)"
    )
    threads: Optional[int] = Field(default=None, ge=1, description="Worker threads")
    memory_limit: Optional[str] = Field(
        default=None, description="Engine memory limit, e.g. '2GB'"
    )

    def connection_factory(self) -> DuckDBConnection:
        return DuckDBConnection(
            database=self.database,
            options={"threads": self.threads, "memory_limit": self.memory_limit},
        )


class LoadConfig(BaseModel):
    """How files are read into the editor."""

    row_limit: Optional[int] = Field(
        default=None, ge=0, description="Read at most this many rows (all when unset)"
    )


class SaveConfig(BaseModel):
    """How files are written."""

    compression: str = Field(default="snappy", description="Parquet compression codec")
    overwrite: bool = Field(
        default=False, description="Replace existing files without asking"
    )

    @field_validator("compression")
    @classmethod
    def validate_compression(cls, v):
        v = v.lower()
        if v not in VALID_COMPRESSIONS:
            raise ValueError(
                f"Compression must be one of {list(VALID_COMPRESSIONS)}, got '{v}'"
            )
        return v


class StudioConfig(BaseModel):
    """Top-level parquetstudio configuration."""

    engine: EngineConfig = Field(default_factory=EngineConfig)
    load: LoadConfig = Field(default_factory=LoadConfig)
    save: SaveConfig = Field(default_factory=SaveConfig)
    log_level: str = Field(default="INFO", description="Logging level")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v):
        v = v.upper()
        if v not in VALID_LOG_LEVELS:
            raise ValueError(f"Log level must be one of {VALID_LOG_LEVELS}, got '{v}'")
        return v

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "StudioConfig":
        """
        Create configuration from a dictionary.

        Raises:
            ConfigError: If the data does not validate
        """
        try:
            return cls(**(data or {}))
        except ValidationError as e:
            raise ConfigError(f"Invalid configuration: {e}") from e

    @classmethod
    def from_path(cls, config_file: Path) -> "StudioConfig":
        """
        Read configuration from a YAML file.

        Raises:
            ConfigError: If the file cannot be read or is invalid
        """
        try:
            with open(config_file, "r", encoding="utf-8") as f:
                raw = yaml.safe_load(f) or {}
        except OSError as e:
            raise ConfigError(f"Cannot read {config_file}: {e}") from e
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {config_file}: {e}") from e

        if not isinstance(raw, dict):
            raise ConfigError(f"{config_file} must contain a mapping")

        return cls.from_dict(expand_env_vars(raw))

    @classmethod
    def find(cls, start_path: Optional[Path] = None) -> "StudioConfig":
        """
        Load the nearest parquetstudio.yml at or above start_path.

        Returns defaults when no file is found.
        """
        config_file = find_config_file(start_path)
        if config_file is None:
            return cls()
        return cls.from_path(config_file)


def find_config_file(start_path: Optional[Path] = None) -> Optional[Path]:
    """Walk up from start_path (default: cwd) looking for parquetstudio.yml."""
    current = Path(start_path or Path.cwd()).resolve()
    while True:
        candidate = current / CONFIG_FILE_NAME
        if candidate.is_file():
            return candidate
        if current == current.parent:
            return None
        current = current.parent


def expand_env_vars(data: Any) -> Any:
    """
    Recursively expand environment variables in configuration data.

    Supports ${VAR_NAME} and ${VAR_NAME:-default_value}.

    Raises:
        ConfigError: If a variable is not set and has no default
    """
    if isinstance(data, str):
        pattern = r"\$\{([^:}]+)(?::-([^}]*))?\}"

        def replace_env_var(match):
            var_name = match.group(1)
            default_value = match.group(2)

            env_value = os.getenv(var_name)
            if env_value is not None:
                return env_value
            if default_value is not None:
                return default_value
            raise ConfigError(
                f"Environment variable '{var_name}' is not set and no default"
            )

        return re.sub(pattern, replace_env_var, data)

    if isinstance(data, dict):
        return {key: expand_env_vars(value) for key, value in data.items()}

    if isinstance(data, list):
        return [expand_env_vars(item) for item in data]

    return data

"""Configuration management for payload-schema using Pydantic models."""

import json
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator

CONFIG_FILE_NAME = ".payload-schema.json"


class ReportFormat(str, Enum):
    """Report format types."""
    TABLE = "table"
    JSON = "json"
    MARKDOWN = "markdown"


class LogLevel(str, Enum):
    """Logging levels."""
    ERROR = "error"
    WARN = "warn"
    INFO = "info"
    DEBUG = "debug"


class EngineConfig(BaseModel):
    """Validation engine configuration section."""
    key_limiter: bool = Field(alias="keyLimiter", default=True)
    key_limit: int | None = Field(alias="keyLimit", default=None)
    fail_fast: bool = Field(alias="failFast", default=False)

    @field_validator("key_limit")
    @classmethod
    def validate_key_limit(cls, v):
        if v is not None and v < 0:
            raise ValueError("key_limit must be >= 0")
        return v

    @property
    def effective_key_limit(self) -> bool | int:
        """Value handed to Schema.set_key_limiter()."""
        if not self.key_limiter:
            return False
        return self.key_limit if self.key_limit is not None else True

    model_config = ConfigDict(populate_by_name=True)


class OutputConfig(BaseModel):
    """Output configuration section."""
    format: ReportFormat = ReportFormat.TABLE
    show_valid: bool = Field(alias="showValid", default=True)

    model_config = ConfigDict(use_enum_values=True, populate_by_name=True)


class LoggingConfig(BaseModel):
    """Logging configuration section."""
    level: LogLevel = LogLevel.WARN

    model_config = ConfigDict(use_enum_values=True)


class PayloadSchemaConfig(BaseModel):
    """Complete payload-schema configuration model."""
    engine: EngineConfig = Field(default_factory=EngineConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = ConfigDict(extra="forbid")


def load_config(config_path: str | Path | None = None) -> PayloadSchemaConfig:
    """Load configuration from file with fallback to defaults.

    Args:
        config_path: Optional path to configuration file. If None, searches
                    current directory and parents for .payload-schema.json

    Returns:
        PayloadSchemaConfig: Loaded and validated configuration

    Raises:
        ValueError: If configuration is invalid
    """
    if config_path is None:
        config_path = find_config_file()
    else:
        config_path = Path(config_path)

    if config_path and config_path.exists():
        try:
            with open(config_path, encoding="utf-8") as f:
                config_data = json.load(f)
            return PayloadSchemaConfig(**config_data)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in config file {config_path}: {e}") from e
        except Exception as e:
            raise ValueError(f"Failed to load config from {config_path}: {e}") from e
    return PayloadSchemaConfig()


def find_config_file(start_dir: Path | None = None) -> Path | None:
    """Find the configuration file by searching up the directory tree.

    Args:
        start_dir: Directory to start search from (default: current directory)

    Returns:
        Path to config file if found, None otherwise
    """
    if start_dir is None:
        start_dir = Path.cwd()

    current = Path(start_dir).resolve()

    while True:
        config_file = current / CONFIG_FILE_NAME
        if config_file.exists():
            return config_file

        parent = current.parent
        if parent == current:  # Reached root directory
            break
        current = parent

    return None

"""Shared logging configuration."""

from pathlib import Path
from typing import Literal
from pydantic import BaseModel, Field, ConfigDict, field_validator


class LoggingConfig(BaseModel):
    """Logging section of the filesplitter configuration."""

    model_config = ConfigDict(extra='forbid')

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Log level"
    )
    format: Literal["simple", "detailed", "json"] = Field(
        default="simple",
        description="Console log format type"
    )
    file: str | None = Field(default=None, description="Optional log file path (JSON lines)")
    max_file_size_mb: int = Field(
        default=10,
        ge=1,
        description="Rotate the log file after this many megabytes"
    )
    backup_count: int = Field(
        default=5,
        ge=0,
        description="Number of rotated log files to keep"
    )

    @field_validator('level', mode='before')
    @classmethod
    def normalize_level(cls, v: str) -> str:
        """Accept log levels in any case."""
        if isinstance(v, str):
            return v.upper()
        return v

    @field_validator('format', mode='before')
    @classmethod
    def normalize_format(cls, v: str) -> str:
        """Accept format names in any case."""
        if isinstance(v, str):
            return v.lower()
        return v

    @field_validator('file', mode='before')
    @classmethod
    def normalize_file(cls, v: str | None) -> str | None:
        """Treat a blank path as no log file and expand ``~``."""
        if isinstance(v, str):
            v = v.strip()
            if not v:
                return None
            return str(Path(v).expanduser())
        return v

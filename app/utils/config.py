"""
Configuration management for the file connectors.

Uses pydantic-settings to load configuration from environment variables
and .env files. Source options use the ``FILE_SOURCE_`` prefix, sink options
the ``FILE_SINK_`` prefix; nested options are separated with ``__``
(e.g. ``FILE_SOURCE_CONSUMER__MODE=lines``).
"""

import re
import tempfile
from enum import Enum
from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from app.models.schemas import APPLICATION_JSON, ConsumerMode, FileExistsMode


class TimeUnit(str, Enum):
    """Unit applied to trigger delays."""
    NANOSECONDS = "NANOSECONDS"
    MICROSECONDS = "MICROSECONDS"
    MILLISECONDS = "MILLISECONDS"
    SECONDS = "SECONDS"
    MINUTES = "MINUTES"
    HOURS = "HOURS"
    DAYS = "DAYS"

    def to_seconds(self, value: float) -> float:
        """Convert ``value`` expressed in this unit to seconds."""
        return value * _SECONDS_PER_UNIT[self]


_SECONDS_PER_UNIT = {
    TimeUnit.NANOSECONDS: 1e-9,
    TimeUnit.MICROSECONDS: 1e-6,
    TimeUnit.MILLISECONDS: 1e-3,
    TimeUnit.SECONDS: 1.0,
    TimeUnit.MINUTES: 60.0,
    TimeUnit.HOURS: 3600.0,
    TimeUnit.DAYS: 86400.0,
}


def _default_dir(name: str) -> Path:
    return Path(tempfile.gettempdir()) / name


class ConsumerSettings(BaseModel):
    """How discovered files become messages."""

    mode: ConsumerMode = ConsumerMode.CONTENTS
    with_markers: bool = False
    markers_json: bool = True
    binary: bool = True
    charset: str = "utf-8"


class TriggerSettings(BaseModel):
    """Fixed-delay poll cadence."""

    fixed_delay: float = Field(default=1.0, gt=0)
    time_unit: TimeUnit = TimeUnit.SECONDS
    initial_delay: float = Field(default=0.0, ge=0)
    max_files_per_poll: Optional[int] = Field(default=None, gt=0)

    @field_validator("time_unit", mode="before")
    @classmethod
    def normalise_time_unit(cls, value):
        if isinstance(value, str):
            return value.upper()
        return value

    @property
    def delay_seconds(self) -> float:
        return self.time_unit.to_seconds(self.fixed_delay)

    @property
    def initial_delay_seconds(self) -> float:
        return self.time_unit.to_seconds(self.initial_delay)


class FileSourceSettings(BaseSettings):
    """File source settings loaded from environment."""

    directory: Path = Field(default_factory=lambda: _default_dir("file-source"))
    filename_pattern: Optional[str] = None
    filename_regex: Optional[str] = None
    recursive: bool = False
    ignore_hidden: bool = True
    prevent_duplicates: bool = True
    retry_failed_files: bool = True
    content_type: str = APPLICATION_JSON

    consumer: ConsumerSettings = Field(default_factory=ConsumerSettings)
    trigger: TriggerSettings = Field(default_factory=TriggerSettings)

    model_config = SettingsConfigDict(
        env_prefix="FILE_SOURCE_",
        env_nested_delimiter="__",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    @field_validator("filename_regex")
    @classmethod
    def check_regex(cls, value: Optional[str]) -> Optional[str]:
        if value is not None:
            try:
                re.compile(value)
            except re.error as e:
                raise ValueError(f"invalid filename_regex: {e}") from e
        return value

    @model_validator(mode="after")
    def check_exclusive_filters(self) -> "FileSourceSettings":
        if self.filename_pattern and self.filename_regex:
            raise ValueError("filename_pattern and filename_regex are mutually exclusive")
        return self


class FileSinkSettings(BaseSettings):
    """File sink settings loaded from environment."""

    directory: Path = Field(default_factory=lambda: _default_dir("file-sink"))
    directory_expression: Optional[str] = None
    name: str = "file-sink"
    name_expression: Optional[str] = None
    suffix: str = ""
    binary: bool = False
    charset: str = "utf-8"
    mode: FileExistsMode = FileExistsMode.REPLACE

    model_config = SettingsConfigDict(
        env_prefix="FILE_SINK_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    @field_validator("mode", mode="before")
    @classmethod
    def normalise_mode(cls, value):
        if isinstance(value, str):
            return value.lower()
        return value


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    # API Configuration
    api_port: int = 8000
    log_level: str = "INFO"
    api_title: str = "File Connectors API"
    api_version: str = "1.0.0"

    # Runtime Configuration
    source_enabled: bool = True
    sink_enabled: bool = False
    channel_capacity: int = Field(default=1000, gt=0)
    send_timeout: float = 5.0  # seconds

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


@lru_cache()
def get_source_settings() -> FileSourceSettings:
    """Get cached file source settings instance."""
    return FileSourceSettings()


@lru_cache()
def get_sink_settings() -> FileSinkSettings:
    """Get cached file sink settings instance."""
    return FileSinkSettings()

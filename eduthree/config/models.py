"""Configuration schema models using Pydantic."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from .duration import DurationParseError, parse_duration, validate_duration_range


class LogLevel(str, Enum):
    """Logging levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LogFormat(str, Enum):
    """Log output formats."""

    JSON = "json"
    KEY_VALUE = "key-value"


class CleanupConfig(BaseModel):
    """Schedule and retention windows for the orphaned-data cleanup job."""

    interval: str = Field("6h", description="How often the scheduler runs the cleanup")
    failed_queue_retention: str = Field(
        "24h", description="Age after which failed queue entries are deleted"
    )
    stale_run_timeout: str = Field(
        "1h", description="Age after which in-progress generation runs are marked failed"
    )

    # Computed fields
    interval_seconds: Optional[int] = None
    failed_queue_retention_seconds: Optional[int] = None
    stale_run_timeout_seconds: Optional[int] = None

    @field_validator("interval", "failed_queue_retention", "stale_run_timeout")
    @classmethod
    def validate_duration(cls, v: str) -> str:
        """Reject strings that are not valid durations."""
        try:
            parse_duration(v)
        except DurationParseError as e:
            raise ValueError(str(e)) from e
        return v.strip()

    @model_validator(mode="after")
    def compute_seconds(self):
        """Parse durations into seconds and range-check the interval."""
        self.interval_seconds = parse_duration(self.interval)
        self.failed_queue_retention_seconds = parse_duration(self.failed_queue_retention)
        self.stale_run_timeout_seconds = parse_duration(self.stale_run_timeout)

        try:
            validate_duration_range(
                self.interval_seconds,
                min_seconds=60,
                max_seconds=7 * 86400,
                label="Cleanup interval",
            )
        except DurationParseError as e:
            raise ValueError(str(e)) from e

        return self


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: LogLevel = Field(LogLevel.INFO, description="Log level")
    format: LogFormat = Field(
        LogFormat.KEY_VALUE, description="Log output format (json or key-value)"
    )

    model_config = {"use_enum_values": True, "validate_default": True}


class ServerConfig(BaseModel):
    """Bind address for the HTTP trigger."""

    host: str = Field("127.0.0.1", min_length=1)
    port: int = Field(8000, ge=1, le=65535)


class AppConfig(BaseModel):
    """Root configuration object for the maintenance toolkit."""

    cleanup: CleanupConfig = Field(default_factory=CleanupConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)

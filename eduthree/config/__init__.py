"""Configuration management for the EduThree maintenance toolkit."""

from .duration import DurationParseError, parse_duration
from .environment import EnvironmentConfig, load_environment_config
from .exceptions import ConfigurationError
from .loader import load_app_config, load_config
from .models import (
    AppConfig,
    CleanupConfig,
    LogFormat,
    LogLevel,
    LoggingConfig,
    ServerConfig,
)

__all__ = [
    # Loader functions
    "load_config",
    "load_app_config",
    "load_environment_config",
    "parse_duration",
    # Configuration models
    "AppConfig",
    "CleanupConfig",
    "LoggingConfig",
    "ServerConfig",
    "EnvironmentConfig",
    # Enums
    "LogLevel",
    "LogFormat",
    # Exceptions
    "ConfigurationError",
    "DurationParseError",
]

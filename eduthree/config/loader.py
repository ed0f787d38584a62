"""Configuration loader for the EduThree maintenance toolkit."""

from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import yaml
from pydantic import ValidationError

from .environment import EnvironmentConfig, load_environment_config
from .exceptions import ConfigurationError
from .models import AppConfig
from .validators import check_for_warnings, emit_warnings

DEFAULT_LOCATIONS = (
    Path("config.yaml"),
    Path("config") / "config.yaml",
)


def load_app_config(config_path: Optional[Path] = None) -> AppConfig:
    """
    Load and validate the YAML settings file.

    Lookup order:
    1. config_path, when given (must exist)
    2. config.yaml in the current directory
    3. ./config/config.yaml
    4. Built-in defaults when no file is found

    Args:
        config_path: Optional explicit path to the configuration file

    Returns:
        Validated AppConfig

    Raises:
        ConfigurationError: If the file is unreadable, unparsable or invalid
    """
    config_file = _find_config_file(config_path)
    if config_file is None:
        return AppConfig()

    config_dict = _read_yaml(config_file)

    warnings = check_for_warnings(config_dict)
    if warnings:
        emit_warnings(warnings)

    try:
        return AppConfig.model_validate(config_dict)
    except ValidationError as e:
        errors = []
        for error in e.errors():
            field_path = " -> ".join(str(loc) for loc in error["loc"]) or "config"
            if error["type"] == "missing":
                errors.append(f"Missing required field: {field_path}")
            else:
                errors.append(f"{field_path}: {error['msg']}")

        raise ConfigurationError(
            "Configuration validation failed",
            errors=errors,
            suggestions=[
                "Review config.example.yaml for the expected format",
                "Durations look like '24h', '15m', '1h30m' or 'PT1H'",
            ],
        ) from e


def load_config(
    config_path: Optional[Path] = None,
) -> Tuple[AppConfig, EnvironmentConfig]:
    """
    Load the settings file and the environment credentials.

    Args:
        config_path: Optional path to configuration file

    Returns:
        Tuple of (AppConfig, EnvironmentConfig)

    Raises:
        ConfigurationError: If either source is invalid
    """
    app_config = load_app_config(config_path)
    env_config = load_environment_config()
    return app_config, env_config


def _find_config_file(config_path: Optional[Path]) -> Optional[Path]:
    if config_path is not None:
        config_path = Path(config_path)
        if not config_path.exists():
            raise ConfigurationError(
                f"Specified configuration file not found: {config_path}",
                suggestions=[
                    f"Ensure {config_path} exists",
                    "Omit --config to run with built-in defaults",
                ],
            )
        return config_path

    for candidate in DEFAULT_LOCATIONS:
        if candidate.exists():
            return candidate

    return None


def _read_yaml(config_file: Path) -> Dict[str, Any]:
    try:
        with open(config_file, "r") as f:
            config_dict = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(
            f"Failed to parse YAML configuration: {e}",
            suggestions=[
                "Check YAML syntax in your config file",
                "Ensure proper indentation (use spaces, not tabs)",
            ],
        ) from e
    except OSError as e:
        raise ConfigurationError(
            f"Failed to read configuration file: {e}",
            suggestions=[f"Ensure {config_file} is readable"],
        ) from e

    if config_dict is None:
        return {}

    if not isinstance(config_dict, dict):
        raise ConfigurationError(
            f"Configuration file {config_file} must contain a mapping at the top level"
        )

    return config_dict

"""Tests for configuration loading, durations and environment validation."""

from pathlib import Path

import pytest

from eduthree.config import (
    AppConfig,
    CleanupConfig,
    ConfigurationError,
    DurationParseError,
    load_app_config,
    load_config,
    load_environment_config,
    parse_duration,
)
from eduthree.config.duration import humanize_seconds, validate_duration_range
from eduthree.config.validators import check_for_warnings


# Pytest fixtures
@pytest.fixture
def mock_env_vars(monkeypatch):
    """Set the required environment variables."""
    monkeypatch.setenv("DATABASE_URL", "sqlite:///:memory:")
    monkeypatch.setenv("SERVICE_ROLE_KEY", "service-role-secret")
    monkeypatch.delenv("LOG_LEVEL", raising=False)
    monkeypatch.delenv("ENVIRONMENT", raising=False)


@pytest.fixture
def isolated_cwd(tmp_path, monkeypatch):
    """Run in an empty directory so no stray config.yaml is picked up."""
    monkeypatch.chdir(tmp_path)
    return tmp_path


def write_config(path: Path, content: str) -> Path:
    path.write_text(content)
    return path


class TestDurationParsing:
    """Test duration string parsing."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("30s", 30),
            ("15m", 900),
            ("1h", 3600),
            ("24h", 86400),
            ("2d", 172800),
            ("1h30m", 5400),
            ("PT15M", 900),
            ("PT1H", 3600),
            ("P1D", 86400),
            ("P1DT12H", 129600),
            (" 6H ", 21600),
        ],
    )
    def test_valid_durations(self, value, expected):
        assert parse_duration(value) == expected

    @pytest.mark.parametrize("value", ["", "   ", "abc", "10", "5w", "PT", "0h", "P"])
    def test_invalid_durations(self, value):
        with pytest.raises(DurationParseError):
            parse_duration(value)

    def test_duration_error_is_value_error(self):
        with pytest.raises(ValueError):
            parse_duration("soon")

    def test_validate_duration_range(self):
        validate_duration_range(3600, min_seconds=60, max_seconds=86400)

        with pytest.raises(DurationParseError, match="too short"):
            validate_duration_range(30, min_seconds=60, max_seconds=86400)

        with pytest.raises(DurationParseError, match="too long"):
            validate_duration_range(90000, min_seconds=60, max_seconds=86400, label="Interval")

    @pytest.mark.parametrize(
        "seconds,expected",
        [(1, "1 second"), (45, "45 seconds"), (60, "1 minute"), (3600, "1 hour"),
         (5400, "90 minutes"), (7200, "2 hours"), (86400, "1 day")],
    )
    def test_humanize_seconds(self, seconds, expected):
        assert humanize_seconds(seconds) == expected


class TestCleanupConfig:
    """Test the cleanup section model."""

    def test_defaults(self):
        config = CleanupConfig()

        assert config.interval_seconds == 6 * 3600
        assert config.failed_queue_retention_seconds == 24 * 3600
        assert config.stale_run_timeout_seconds == 3600

    def test_custom_windows(self):
        config = CleanupConfig(interval="PT30M", failed_queue_retention="2d", stale_run_timeout="90m")

        assert config.interval_seconds == 1800
        assert config.failed_queue_retention_seconds == 172800
        assert config.stale_run_timeout_seconds == 5400

    def test_invalid_duration_rejected(self):
        with pytest.raises(ValueError):
            CleanupConfig(failed_queue_retention="forever")

    def test_interval_out_of_range_rejected(self):
        with pytest.raises(ValueError):
            CleanupConfig(interval="30s")

        with pytest.raises(ValueError):
            CleanupConfig(interval="8d")


class TestConfigurationLoading:
    """Test configuration loading from YAML files."""

    def test_missing_file_falls_back_to_defaults(self, isolated_cwd):
        config = load_app_config()

        assert isinstance(config, AppConfig)
        assert config.cleanup.interval == "6h"
        assert config.logging.level == "INFO"
        assert config.logging.format == "key-value"
        assert config.server.port == 8000

    def test_default_location_is_discovered(self, isolated_cwd):
        write_config(isolated_cwd / "config.yaml", "cleanup:\n  interval: 12h\n")

        assert load_app_config().cleanup.interval_seconds == 43200

    def test_load_valid_config(self, tmp_path):
        path = write_config(
            tmp_path / "settings.yaml",
            """
cleanup:
  interval: 3h
  failed_queue_retention: 48h
  stale_run_timeout: 2h
logging:
  level: DEBUG
  format: json
server:
  host: 0.0.0.0
  port: 9000
""",
        )

        config = load_app_config(path)

        assert config.cleanup.interval_seconds == 10800
        assert config.cleanup.failed_queue_retention_seconds == 172800
        assert config.cleanup.stale_run_timeout_seconds == 7200
        assert config.logging.level == "DEBUG"
        assert config.logging.format == "json"
        assert config.server.host == "0.0.0.0"
        assert config.server.port == 9000

    def test_empty_file_uses_defaults(self, tmp_path):
        path = write_config(tmp_path / "empty.yaml", "")
        assert load_app_config(path).cleanup.stale_run_timeout == "1h"

    def test_explicit_missing_path_raises(self, tmp_path):
        with pytest.raises(ConfigurationError, match="not found"):
            load_app_config(tmp_path / "nope.yaml")

    def test_invalid_yaml_raises(self, tmp_path):
        path = write_config(tmp_path / "bad.yaml", "cleanup: [unclosed\n")

        with pytest.raises(ConfigurationError, match="Failed to parse YAML"):
            load_app_config(path)

    def test_non_mapping_raises(self, tmp_path):
        path = write_config(tmp_path / "list.yaml", "- a\n- b\n")

        with pytest.raises(ConfigurationError, match="mapping"):
            load_app_config(path)

    def test_validation_errors_are_collected(self, tmp_path):
        path = write_config(
            tmp_path / "invalid.yaml",
            "cleanup:\n  interval: often\nserver:\n  port: 70000\n",
        )

        with pytest.raises(ConfigurationError) as exc_info:
            load_app_config(path)

        errors = exc_info.value.errors
        assert any(error.startswith("cleanup -> interval") for error in errors)
        assert any(error.startswith("server -> port") for error in errors)
        assert "Suggestions:" in str(exc_info.value)

    def test_short_windows_emit_warnings(self, tmp_path):
        path = write_config(
            tmp_path / "short.yaml",
            "cleanup:\n  interval: 5m\n  failed_queue_retention: 30m\n  stale_run_timeout: 5m\n",
        )

        with pytest.warns(UserWarning) as record:
            load_app_config(path)

        assert len(record) == 3

    def test_load_config_returns_both_parts(self, mock_env_vars, isolated_cwd):
        app_config, env_config = load_config()

        assert isinstance(app_config, AppConfig)
        assert env_config.database_url == "sqlite:///:memory:"
        assert env_config.service_role_key == "service-role-secret"


class TestWarnings:
    def test_no_warnings_for_defaults(self):
        assert check_for_warnings({}) == []
        assert check_for_warnings({"cleanup": {"interval": "6h"}}) == []

    def test_unparseable_values_are_left_to_validation(self):
        assert check_for_warnings({"cleanup": {"interval": "often"}}) == []

    def test_non_mapping_cleanup_section_ignored(self):
        assert check_for_warnings({"cleanup": "6h"}) == []


class TestEnvironmentConfig:
    """Test environment variable validation."""

    def test_valid_environment(self, mock_env_vars, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "debug")
        monkeypatch.setenv("ENVIRONMENT", "production")

        env = load_environment_config()

        assert env.log_level == "DEBUG"
        assert env.environment == "production"

    def test_environment_defaults_to_local(self, mock_env_vars):
        env = load_environment_config()

        assert env.log_level is None
        assert env.environment == "local"

    def test_missing_credentials_listed(self, monkeypatch):
        monkeypatch.delenv("DATABASE_URL", raising=False)
        monkeypatch.delenv("SERVICE_ROLE_KEY", raising=False)

        with pytest.raises(ConfigurationError) as exc_info:
            load_environment_config()

        errors = exc_info.value.errors
        assert "Missing required environment variable: DATABASE_URL" in errors
        assert "Missing required environment variable: SERVICE_ROLE_KEY" in errors

    def test_blank_key_is_missing(self, mock_env_vars, monkeypatch):
        monkeypatch.setenv("SERVICE_ROLE_KEY", "   ")

        with pytest.raises(ConfigurationError, match="SERVICE_ROLE_KEY"):
            load_environment_config()

    def test_database_url_must_be_url(self, mock_env_vars, monkeypatch):
        monkeypatch.setenv("DATABASE_URL", "just-a-path.db")

        with pytest.raises(ConfigurationError, match="Invalid DATABASE_URL"):
            load_environment_config()

    def test_invalid_log_level(self, mock_env_vars, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "LOUD")

        with pytest.raises(ConfigurationError, match="Invalid LOG_LEVEL"):
            load_environment_config()

    def test_repr_hides_service_role_key(self, mock_env_vars):
        env = load_environment_config()

        assert "service-role-secret" not in repr(env)
        assert "***" in repr(env)

"""Root logger configuration with JSON and key-value output formats."""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Literal

from .context import get_log_context

LogFormat = Literal["json", "key-value"]

SERVICE_NAME = "eduthree-maintenance"

# Attributes every LogRecord carries; anything else came in through extra/context
_RECORD_ATTRS = frozenset(
    logging.LogRecord("", logging.INFO, "", 0, "", (), None).__dict__.keys()
) | {"message", "asctime", "taskName"}


class ContextualFilter(logging.Filter):
    """Attach service metadata and the active log context to each record."""

    def __init__(self, service: str = SERVICE_NAME, environment: str = "local"):
        super().__init__()
        self.service = service
        self.environment = environment

    def filter(self, record: logging.LogRecord) -> bool:
        record.service = self.service
        record.environment = self.environment

        for key, value in get_log_context().items():
            if not hasattr(record, key):
                setattr(record, key, value)

        return True


def _extra_fields(record: logging.LogRecord) -> Dict[str, Any]:
    """Collect the non-standard attributes of a record."""
    return {
        key: value
        for key, value in record.__dict__.items()
        if key not in _RECORD_ATTRS and not key.startswith("_")
    }


class JSONFormatter(logging.Formatter):
    """Single-line JSON records with timestamp, level, logger and message first."""

    def format(self, record: logging.LogRecord) -> str:
        created = datetime.fromtimestamp(record.created, tz=timezone.utc)
        payload: Dict[str, Any] = {
            "timestamp": created.strftime("%Y-%m-%dT%H:%M:%S.%f")[:-3] + "Z",
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        for key, value in _extra_fields(record).items():
            if isinstance(value, datetime):
                payload[key] = value.isoformat()
            elif isinstance(value, (str, int, float, bool, list, dict, type(None))):
                payload[key] = value
            else:
                payload[key] = str(value)

        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)

        return json.dumps(payload, ensure_ascii=False, default=str)


class KeyValueFormatter(logging.Formatter):
    """Human-readable lines: ``<time> [LEVEL] logger: message key=value ...``."""

    HIDDEN = {"service", "environment"}

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)

        pairs = []
        for key, value in sorted(_extra_fields(record).items()):
            if key in self.HIDDEN:
                continue
            if value is None:
                rendered = "null"
            elif isinstance(value, bool):
                rendered = str(value).lower()
            elif isinstance(value, datetime):
                rendered = value.isoformat()
            else:
                rendered = str(value)
                if any(ch in rendered for ch in ' =,'):
                    rendered = f'"{rendered}"'
            pairs.append(f"{key}={rendered}")

        return f"{line} {' '.join(pairs)}" if pairs else line


def configure_logging(
    level: str = "INFO",
    format_type: LogFormat = "key-value",
    environment: str = "local",
) -> None:
    """
    Install a single stdout handler on the root logger.

    Args:
        level: Logging level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format_type: 'json' for machine-readable output, 'key-value' for humans
        environment: Environment label attached to every record

    Raises:
        ValueError: If level or format_type is not recognised
    """
    numeric_level = getattr(logging, str(level).upper(), None)
    if not isinstance(numeric_level, int):
        raise ValueError(f"Invalid log level: {level}")

    if format_type == "json":
        formatter: logging.Formatter = JSONFormatter()
    elif format_type == "key-value":
        formatter = KeyValueFormatter(
            "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    else:
        raise ValueError(f"Invalid log format: {format_type}. Must be 'json' or 'key-value'")

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)
    handler.addFilter(ContextualFilter(environment=environment))

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)
    root_logger.handlers.clear()
    root_logger.addHandler(handler)

    logging.getLogger(__name__).info(
        "Logging configured",
        extra={
            "event": "logging.configured",
            "component": "logging",
            "log_level": str(level).upper(),
            "log_format": format_type,
        },
    )

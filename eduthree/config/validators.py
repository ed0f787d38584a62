"""Warnings for settings that are valid but probably unintended."""

import warnings
from typing import Any, Dict, List

from .duration import DurationParseError, humanize_seconds, parse_duration


def check_for_warnings(config_dict: Dict[str, Any]) -> List[str]:
    """
    Inspect raw configuration and return warning messages.

    Args:
        config_dict: Raw configuration dictionary (before model validation)

    Returns:
        List of warning messages
    """
    messages: List[str] = []

    cleanup = config_dict.get("cleanup") or {}
    if not isinstance(cleanup, dict):
        return messages

    interval = _seconds_or_none(cleanup.get("interval"))
    if interval is not None and interval < 900:
        messages.append(
            f"Cleanup interval of {humanize_seconds(interval)} is very frequent; "
            "each run scans every maintained table"
        )

    retention = _seconds_or_none(cleanup.get("failed_queue_retention"))
    if retention is not None and retention < 3600:
        messages.append(
            f"failed_queue_retention of {humanize_seconds(retention)} deletes failed queue "
            "entries before they can be inspected"
        )

    timeout = _seconds_or_none(cleanup.get("stale_run_timeout"))
    if timeout is not None and timeout < 600:
        messages.append(
            f"stale_run_timeout of {humanize_seconds(timeout)} may fail generation runs "
            "that are still working"
        )

    return messages


def emit_warnings(messages: List[str]) -> None:
    """Emit each message as a UserWarning."""
    for message in messages:
        warnings.warn(message, UserWarning, stacklevel=2)


def _seconds_or_none(value: Any):
    if not isinstance(value, str):
        return None
    try:
        return parse_duration(value)
    except DurationParseError:
        return None

"""Duration strings for retention windows and run intervals.

Accepted forms:
- Human-readable units, optionally combined: ``30s``, ``15m``, ``1h``, ``2d``, ``1h30m``
- ISO-8601 durations: ``PT15M``, ``PT1H``, ``P1D``, ``P1DT12H``
"""

import re

_UNIT_SECONDS = {"s": 1, "m": 60, "h": 3600, "d": 86400}

_ISO_PATTERN = re.compile(
    r"^P(?:(?P<d>\d+)D)?(?:T(?:(?P<h>\d+)H)?(?:(?P<m>\d+)M)?(?:(?P<s>\d+)S)?)?$"
)
_HUMAN_PATTERN = re.compile(r"^(?:\d+[smhd])+$")
_HUMAN_TOKEN = re.compile(r"(\d+)([smhd])")


class DurationParseError(ValueError):
    """Raised when a duration string cannot be parsed or is out of range."""


def parse_duration(value: str) -> int:
    """
    Convert a duration string to whole seconds.

    Args:
        value: Duration string such as "24h" or "PT1H"

    Returns:
        Duration in seconds (always positive)

    Raises:
        DurationParseError: If the string is empty, malformed, or zero

    Examples:
        >>> parse_duration("24h")
        86400
        >>> parse_duration("PT1H")
        3600
        >>> parse_duration("1h30m")
        5400
    """
    if not isinstance(value, str) or not value.strip():
        raise DurationParseError("Duration string cannot be empty")

    cleaned = re.sub(r"\s+", "", value)

    if cleaned[0] in "pP":
        match = _ISO_PATTERN.match(cleaned.upper())
        if not match:
            raise DurationParseError(
                f"Invalid ISO-8601 duration: '{value}'. Expected e.g. 'PT1H' or 'P1D'"
            )
        total = sum(
            int(amount) * _UNIT_SECONDS[unit]
            for unit, amount in match.groupdict().items()
            if amount
        )
    else:
        lowered = cleaned.lower()
        if not _HUMAN_PATTERN.match(lowered):
            raise DurationParseError(
                f"Invalid duration: '{value}'. Use digits with units s, m, h, d (e.g. '24h')"
            )
        total = sum(
            int(amount) * _UNIT_SECONDS[unit] for amount, unit in _HUMAN_TOKEN.findall(lowered)
        )

    if total == 0:
        raise DurationParseError(f"Duration cannot be zero: '{value}'")

    return total


def validate_duration_range(
    seconds: int, min_seconds: int, max_seconds: int, label: str = "Duration"
) -> None:
    """
    Check that a parsed duration lies within [min_seconds, max_seconds].

    Raises:
        DurationParseError: If the duration is outside the range
    """
    if seconds < min_seconds:
        raise DurationParseError(
            f"{label} too short: {humanize_seconds(seconds)}. "
            f"Minimum is {humanize_seconds(min_seconds)}."
        )
    if seconds > max_seconds:
        raise DurationParseError(
            f"{label} too long: {humanize_seconds(seconds)}. "
            f"Maximum is {humanize_seconds(max_seconds)}."
        )


def humanize_seconds(seconds: int) -> str:
    """Render seconds in the largest unit that divides them, e.g. 3600 -> '1 hour', 5400 -> '90 minutes'."""
    for unit, size in (("day", 86400), ("hour", 3600), ("minute", 60)):
        if seconds >= size and seconds % size == 0:
            amount = seconds // size
            return f"{amount} {unit}{'s' if amount != 1 else ''}"
    return f"{seconds} second{'s' if seconds != 1 else ''}"

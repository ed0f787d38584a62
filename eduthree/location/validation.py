"""Location format validation for the people-search API.

The search API accepts locations as:
- "City, State" (e.g. "Boston, Massachusetts")
- "City, State, Country" (searched as "City, State"; the API returns far
  too broad results when a country is included)
- "Country" (e.g. "United States", "India")
- Two-letter ISO codes ("US", "IN"), converted to the country name

None of the functions here raise; every rejection comes back as an invalid
LocationValidationResult with a reason the user can act on.
"""

import re
from typing import Optional

from eduthree.logging import get_logger

from .countries import country_name_for
from .models import LocationParts, LocationValidationResult

logger = get_logger(__name__, component="location")

LOCATION_REQUIRED = "Location is required"
COUNTRY_REQUIRED = "Country is required"
INVALID_COUNTRY_FORMAT = "Invalid country format"
CITY_WITHOUT_STATE = "If city is provided, state is also required"
WRONG_SEGMENT_COUNT = 'Location must be in format: "City, State" or "City, State, Country"'
INVALID_FORMAT = (
    'Invalid location format. Use: "City, State", "City, State, Country", or "Country"'
)

_COUNTRY_CODE = re.compile(r"[A-Z]{2}")
_LOCATION_TEXT = re.compile(r"[A-Za-z\s\-']+")

# Input that usually means auto-detection picked up something other than a place
SUSPICIOUS_PATTERNS = (
    re.compile(r"university|college|institute|school", re.IGNORECASE),
    re.compile(r"\.com|\.edu|\.org|\.net|www\.", re.IGNORECASE),
    re.compile(r"@"),
    re.compile(r"\d{3}-\d{3}-\d{4}"),
    re.compile(r"^\d+$"),
)


def _is_country_code(text: str) -> bool:
    return len(text) == 2 and _COUNTRY_CODE.fullmatch(text) is not None


def _is_location_text(text: str) -> bool:
    return _LOCATION_TEXT.fullmatch(text) is not None


def validate_location_format(location: Optional[str]) -> LocationValidationResult:
    """
    Validate a free-text location and build its normalized form.

    Checks run in priority order: required, two-letter country code,
    comma-separated "City, State[, Country]", bare country name.

    Args:
        location: Raw location text (None and blank strings are rejected)

    Returns:
        LocationValidationResult; for comma-separated input the normalized
        text is always "City, State" even when a country was supplied

    Examples:
        >>> validate_location_format("US").normalized
        'United States'
        >>> validate_location_format("San Francisco, California, United States").normalized
        'San Francisco, California'
    """
    if not isinstance(location, str) or not location.strip():
        return LocationValidationResult.invalid(LOCATION_REQUIRED)

    trimmed = location.strip()

    if _is_country_code(trimmed):
        country = country_name_for(trimmed)
        if country is None:
            return LocationValidationResult.invalid(f"Invalid country code: {trimmed}")
        return LocationValidationResult.valid(country, LocationParts(country=country))

    if "," in trimmed:
        return _validate_segments(trimmed)

    # Accepted whether or not it is a country we recognise
    if len(trimmed) >= 3 and _is_location_text(trimmed):
        return LocationValidationResult.valid(trimmed, LocationParts(country=trimmed))

    return LocationValidationResult.invalid(INVALID_FORMAT)


def _validate_segments(text: str) -> LocationValidationResult:
    segments = [segment.strip() for segment in text.split(",")]
    segments = [segment for segment in segments if segment]

    if len(segments) not in (2, 3):
        return LocationValidationResult.invalid(WRONG_SEGMENT_COUNT)

    for segment in segments:
        if not _is_location_text(segment):
            return LocationValidationResult.invalid(
                f'Invalid location part: "{segment}". '
                "Only letters, spaces, hyphens, and apostrophes allowed."
            )

    last = segments[-1]
    resolved_last = last
    if _is_country_code(last):
        resolved_last = country_name_for(last)
        if resolved_last is None:
            return LocationValidationResult.invalid(f"Invalid country code: {last}")

    city, state = segments[0], segments[1]
    normalized = f"{city}, {state}"

    if len(segments) == 2:
        return LocationValidationResult.valid(normalized, LocationParts(city=city, state=state))

    return LocationValidationResult.valid(
        normalized, LocationParts(city=city, state=state, country=resolved_last)
    )


def validate_location_data(
    city: Optional[str] = None,
    state: Optional[str] = None,
    country: Optional[str] = None,
) -> LocationValidationResult:
    """
    Validate a location entered as separate city/state/country fields.

    Composes "city, state, country", "state, country" or "country" from the
    trimmed fields and runs it through validate_location_format().

    Args:
        city: Optional city name (requires state)
        state: Optional state or region name
        country: Country name or two-letter code (required)

    Returns:
        LocationValidationResult
    """
    if not country or not country.strip():
        return LocationValidationResult.invalid(COUNTRY_REQUIRED)

    country_trimmed = country.strip()
    if not _is_location_text(country_trimmed):
        return LocationValidationResult.invalid(INVALID_COUNTRY_FORMAT)

    if city and not state:
        return LocationValidationResult.invalid(CITY_WITHOUT_STATE)

    if city and state:
        composed = f"{city.strip()}, {state.strip()}, {country_trimmed}"
    elif state:
        composed = f"{state.strip()}, {country_trimmed}"
    else:
        composed = country_trimmed

    return validate_location_format(composed)


def normalize_location_for_search(location: Optional[str]) -> Optional[str]:
    """
    Return the search-ready form of a location, or None when it is invalid.

    Rejections are logged with their reason so that upstream callers can
    decide whether to prompt for manual entry.

    Args:
        location: Raw location text

    Returns:
        Normalized location text, or None
    """
    result = validate_location_format(location)

    if not result.is_valid:
        logger.warning(
            f"Location rejected: {result.error}",
            extra={
                "event": "location.rejected",
                "reason": result.error,
            },
        )
        return None

    return result.normalized


def needs_manual_location_entry(location: Optional[str]) -> bool:
    """
    Decide whether an auto-detected location should be replaced by manual entry.

    True for empty or one-character input, for text that looks like an
    institution name, URL, e-mail address, phone number or bare number, and
    for anything validate_location_format() rejects. This is a heuristic
    independent of the validator: "Harvard University" validates as a bare
    country name but still needs manual entry.

    Args:
        location: Auto-detected location text

    Returns:
        True when the user should be asked to enter the location by hand
    """
    if not location:
        return True

    trimmed = location.strip()
    if len(trimmed) < 2:
        return True

    if any(pattern.search(trimmed) for pattern in SUSPICIOUS_PATTERNS):
        return True

    return not validate_location_format(trimmed).is_valid

"""Location normalization for the people-search API.

This module provides:
- validate_location_format: free-text location -> LocationValidationResult
- validate_location_data: separate city/state/country fields -> result
- normalize_location_for_search: search-ready text or None
- needs_manual_location_entry: heuristic for rejecting auto-detected text
- COUNTRY_CODE_MAP: supported ISO 3166-1 alpha-2 codes
"""

from .countries import COUNTRY_CODE_MAP
from .models import LocationParts, LocationValidationResult
from .validation import (
    needs_manual_location_entry,
    normalize_location_for_search,
    validate_location_data,
    validate_location_format,
)

__all__ = [
    "COUNTRY_CODE_MAP",
    "LocationParts",
    "LocationValidationResult",
    "validate_location_format",
    "validate_location_data",
    "normalize_location_for_search",
    "needs_manual_location_entry",
]

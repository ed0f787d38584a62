"""Result types for location validation."""

from dataclasses import dataclass, field
from typing import Dict, Optional


@dataclass(frozen=True)
class LocationParts:
    """Structured components recovered from a location string.

    Attributes:
        city: First segment of a comma-separated location
        state: Second segment of a comma-separated location
        country: Resolved country name (third segment, code lookup, or bare name)
    """

    city: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None

    def to_dict(self) -> Dict[str, str]:
        """Only the components that are present."""
        return {
            key: value
            for key, value in (("city", self.city), ("state", self.state), ("country", self.country))
            if value is not None
        }


@dataclass(frozen=True)
class LocationValidationResult:
    """Outcome of validating a location string.

    A valid result carries the normalized text and its parts; an invalid one
    carries a human-readable reason the user can act on.

    Attributes:
        is_valid: Whether the location can be sent to the search API
        normalized: Canonical text ("City, State" or a country name)
        parts: Structured components
        error: Rejection reason for invalid input
    """

    is_valid: bool
    normalized: Optional[str] = None
    parts: LocationParts = field(default_factory=LocationParts)
    error: Optional[str] = None

    @classmethod
    def valid(cls, normalized: str, parts: LocationParts) -> "LocationValidationResult":
        return cls(is_valid=True, normalized=normalized, parts=parts)

    @classmethod
    def invalid(cls, error: str) -> "LocationValidationResult":
        return cls(is_valid=False, error=error)

    def to_dict(self) -> Dict[str, object]:
        if not self.is_valid:
            return {"is_valid": False, "error": self.error}
        return {"is_valid": True, "normalized": self.normalized, "parts": self.parts.to_dict()}

"""ISO 3166-1 alpha-2 codes accepted by the people-search API."""

from types import MappingProxyType
from typing import Mapping, Optional

COUNTRY_CODE_MAP: Mapping[str, str] = MappingProxyType(
    {
        "IN": "India",
        "US": "United States",
        "GB": "United Kingdom",
        "CA": "Canada",
        "AU": "Australia",
        "DE": "Germany",
        "FR": "France",
        "JP": "Japan",
        "CN": "China",
        "SG": "Singapore",
        "AE": "United Arab Emirates",
        "NL": "Netherlands",
        "SE": "Sweden",
        "CH": "Switzerland",
        "ES": "Spain",
        "IT": "Italy",
        "BR": "Brazil",
        "MX": "Mexico",
        "KR": "South Korea",
        "IL": "Israel",
    }
)


def country_name_for(code: str) -> Optional[str]:
    """Return the country name for a supported code, or None."""
    return COUNTRY_CODE_MAP.get(code)

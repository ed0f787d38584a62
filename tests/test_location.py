"""Tests for location validation and normalization."""

import logging

import pytest

from eduthree.location import (
    COUNTRY_CODE_MAP,
    LocationParts,
    LocationValidationResult,
    needs_manual_location_entry,
    normalize_location_for_search,
    validate_location_data,
    validate_location_format,
)
from eduthree.location.validation import (
    CITY_WITHOUT_STATE,
    COUNTRY_REQUIRED,
    INVALID_COUNTRY_FORMAT,
    INVALID_FORMAT,
    LOCATION_REQUIRED,
    WRONG_SEGMENT_COUNT,
)


class TestCountryCodes:
    """Two-letter ISO code handling."""

    def test_map_has_twenty_codes(self):
        assert len(COUNTRY_CODE_MAP) == 20

    def test_map_is_read_only(self):
        with pytest.raises(TypeError):
            COUNTRY_CODE_MAP["XX"] = "Nowhere"

    @pytest.mark.parametrize("code,name", sorted(COUNTRY_CODE_MAP.items()))
    def test_every_code_resolves_to_full_name(self, code, name):
        result = validate_location_format(code)

        assert result.is_valid
        assert result.normalized == name
        assert result.parts == LocationParts(country=name)

    @pytest.mark.parametrize("code", ["ZZ", "XX", "QQ", "UK"])
    def test_unknown_code_is_invalid(self, code):
        result = validate_location_format(code)

        assert not result.is_valid
        assert result.error == f"Invalid country code: {code}"

    def test_code_is_trimmed(self):
        assert validate_location_format("  IN ").normalized == "India"

    def test_lowercase_code_is_a_too_short_name(self):
        """Only uppercase pairs are codes; "us" falls through to the format error."""
        result = validate_location_format("us")

        assert not result.is_valid
        assert result.error == INVALID_FORMAT


class TestRequired:
    @pytest.mark.parametrize("value", ["", "   ", None, "\t\n"])
    def test_empty_input(self, value):
        result = validate_location_format(value)

        assert not result.is_valid
        assert result.error == LOCATION_REQUIRED

    def test_non_string_input(self):
        assert validate_location_format(42).error == LOCATION_REQUIRED


class TestCommaSeparated:
    """City, State[, Country] inputs."""

    def test_city_and_state(self):
        result = validate_location_format("Boston, Massachusetts")

        assert result.is_valid
        assert result.normalized == "Boston, Massachusetts"
        assert result.parts == LocationParts(city="Boston", state="Massachusetts")

    def test_country_is_dropped_from_normalized_text(self):
        result = validate_location_format("San Francisco, California, United States")

        assert result.is_valid
        assert result.normalized == "San Francisco, California"
        assert result.parts.city == "San Francisco"
        assert result.parts.state == "California"
        assert result.parts.country == "United States"

    def test_country_code_in_third_segment_is_resolved(self):
        result = validate_location_format("Mumbai, Maharashtra, IN")

        assert result.normalized == "Mumbai, Maharashtra"
        assert result.parts.country == "India"

    def test_unknown_code_in_third_segment(self):
        result = validate_location_format("Springfield, Illinois, ZZ")
        assert result.error == "Invalid country code: ZZ"

    def test_state_code_is_checked_against_country_codes(self):
        """A two-letter last segment is always a country code, even in the state slot."""
        assert validate_location_format("Austin, TX").error == "Invalid country code: TX"

        result = validate_location_format("Paris, FR")
        assert result.is_valid
        assert result.normalized == "Paris, FR"
        assert result.parts == LocationParts(city="Paris", state="FR")

    def test_segments_are_trimmed_and_empty_ones_dropped(self):
        result = validate_location_format("  Boston ,  Massachusetts ,, ")

        assert result.normalized == "Boston, Massachusetts"

    @pytest.mark.parametrize("value", ["Boston,", "A, B, C, D", ",,,"])
    def test_wrong_segment_count(self, value):
        assert validate_location_format(value).error == WRONG_SEGMENT_COUNT

    def test_hyphens_and_apostrophes_allowed(self):
        result = validate_location_format("Winston-Salem, North Carolina")
        assert result.is_valid

        result = validate_location_format("St John's, Newfoundland")
        assert result.is_valid

    def test_invalid_characters_name_the_segment(self):
        result = validate_location_format("Boston, MA 02134")

        assert result.error == (
            'Invalid location part: "MA 02134". '
            "Only letters, spaces, hyphens, and apostrophes allowed."
        )


class TestBareCountry:
    def test_recognised_country_name(self):
        result = validate_location_format("Germany")

        assert result.is_valid
        assert result.normalized == "Germany"
        assert result.parts == LocationParts(country="Germany")

    def test_any_alphabetic_text_is_accepted(self):
        result = validate_location_format("Harvard University")

        assert result.is_valid
        assert result.normalized == "Harvard University"

    @pytest.mark.parametrize("value", ["Ab", "12345", "Boston; MA", "example.com"])
    def test_unusable_text(self, value):
        assert validate_location_format(value).error == INVALID_FORMAT


class TestResultModel:
    def test_to_dict_valid(self):
        result = validate_location_format("Boston, Massachusetts")

        assert result.to_dict() == {
            "is_valid": True,
            "normalized": "Boston, Massachusetts",
            "parts": {"city": "Boston", "state": "Massachusetts"},
        }

    def test_to_dict_invalid(self):
        assert LocationValidationResult.invalid("nope").to_dict() == {
            "is_valid": False,
            "error": "nope",
        }


class TestValidateLocationData:
    """Structured city/state/country input."""

    def test_full_location(self):
        result = validate_location_data(city="Boston", state="Massachusetts", country="US")

        assert result.is_valid
        assert result.normalized == "Boston, Massachusetts"
        assert result.parts.country == "United States"

    def test_country_only(self):
        result = validate_location_data(country="IN")

        assert result.normalized == "India"

    def test_state_and_country(self):
        result = validate_location_data(state="Ontario", country="Canada")

        assert result.is_valid
        assert result.normalized == "Ontario, Canada"

    def test_fields_are_trimmed(self):
        result = validate_location_data(city=" Austin ", state=" Texas ", country=" United States ")

        assert result.normalized == "Austin, Texas"

    @pytest.mark.parametrize("country", [None, "", "   "])
    def test_country_required(self, country):
        result = validate_location_data(city="Boston", state="Massachusetts", country=country)
        assert result.error == COUNTRY_REQUIRED

    def test_country_format(self):
        assert validate_location_data(country="U.S.").error == INVALID_COUNTRY_FORMAT

    def test_city_requires_state(self):
        assert validate_location_data(city="Boston", country="US").error == CITY_WITHOUT_STATE


class TestNormalizeForSearch:
    def test_valid_location(self):
        assert (
            normalize_location_for_search("San Francisco, California, US")
            == "San Francisco, California"
        )

    def test_invalid_location_returns_none_and_logs(self, caplog):
        with caplog.at_level(logging.WARNING, logger="eduthree.location.validation"):
            assert normalize_location_for_search("ZZ") is None

        record = caplog.records[-1]
        assert record.event == "location.rejected"
        assert record.reason == "Invalid country code: ZZ"


class TestNeedsManualEntry:
    def test_institution_name_is_flagged_even_though_valid(self):
        assert validate_location_format("Harvard University").is_valid
        assert needs_manual_location_entry("Harvard University")

    @pytest.mark.parametrize(
        "value",
        [
            "student@university.edu",
            "contact@",
            "www.example.com",
            "example.org",
            "12345",
            "555-123-4567",
            "MIT Institute",
        ],
    )
    def test_suspicious_patterns(self, value):
        assert needs_manual_location_entry(value)

    @pytest.mark.parametrize("value", [None, "", " ", "A"])
    def test_empty_or_too_short(self, value):
        assert needs_manual_location_entry(value)

    def test_invalid_format_is_flagged(self):
        assert needs_manual_location_entry("Austin, TX")

    @pytest.mark.parametrize("value", ["Boston, Massachusetts", "India", "US", "Paris, Ile-de-France, FR"])
    def test_usable_locations(self, value):
        assert not needs_manual_location_entry(value)

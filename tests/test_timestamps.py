"""Unit tests for timestamp utilities."""

from datetime import datetime, timedelta, timezone

from eduthree.utils.timestamps import (
    cutoff_before,
    ensure_utc,
    format_timestamp,
    to_storage,
    utc_now,
)


class TestUtcNow:
    """Tests for utc_now function."""

    def test_utc_now_returns_utc_datetime(self):
        now = utc_now()

        assert isinstance(now, datetime)
        assert now.tzinfo == timezone.utc

    def test_utc_now_is_recent(self):
        before = datetime.now(timezone.utc)
        now = utc_now()
        after = datetime.now(timezone.utc)

        assert before <= now <= after


class TestEnsureUtc:
    """Tests for ensure_utc function."""

    def test_none_passes_through(self):
        assert ensure_utc(None) is None

    def test_naive_is_treated_as_utc(self):
        result = ensure_utc(datetime(2025, 1, 1, 12, 0))
        assert result == datetime(2025, 1, 1, 12, 0, tzinfo=timezone.utc)

    def test_other_timezone_is_converted(self):
        eastern = timezone(timedelta(hours=-5))
        result = ensure_utc(datetime(2025, 1, 1, 7, 0, tzinfo=eastern))

        assert result.tzinfo == timezone.utc
        assert result.hour == 12


class TestStorageFormat:
    """Tests for the stored timestamp format."""

    def test_to_storage_fixed_width(self):
        value = to_storage(datetime(2025, 11, 4, 12, 0, tzinfo=timezone.utc))
        assert value == "2025-11-04T12:00:00.000000Z"

    def test_to_storage_none(self):
        assert to_storage(None) is None

    def test_to_storage_converts_to_utc(self):
        eastern = timezone(timedelta(hours=-5))
        value = to_storage(datetime(2025, 11, 4, 7, 30, 15, 123456, tzinfo=eastern))
        assert value == "2025-11-04T12:30:15.123456Z"

    def test_string_order_matches_time_order(self):
        """Stored strings compare the same way the datetimes do."""
        base = datetime(2025, 1, 1, 9, 59, 59, 999999, tzinfo=timezone.utc)
        later = base + timedelta(microseconds=1)
        much_later = datetime(2025, 10, 1, tzinfo=timezone.utc)

        assert to_storage(base) < to_storage(later) < to_storage(much_later)


class TestFormatTimestamp:
    def test_millisecond_precision(self):
        dt = datetime(2025, 11, 4, 12, 0, 0, 123456, tzinfo=timezone.utc)
        assert format_timestamp(dt) == "2025-11-04T12:00:00.123Z"


class TestCutoffBefore:
    def test_subtracts_seconds(self):
        now = datetime(2025, 1, 2, 0, 0, tzinfo=timezone.utc)
        assert cutoff_before(now, 86400) == datetime(2025, 1, 1, 0, 0, tzinfo=timezone.utc)

    def test_naive_input_becomes_utc(self):
        cutoff = cutoff_before(datetime(2025, 1, 1, 1, 0), 3600)
        assert cutoff == datetime(2025, 1, 1, 0, 0, tzinfo=timezone.utc)

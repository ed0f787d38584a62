"""Utility functions for UTC time handling and storage formatting."""

from .timestamps import (
    cutoff_before,
    ensure_utc,
    format_timestamp,
    to_storage,
    utc_now,
)

__all__ = [
    "utc_now",
    "ensure_utc",
    "to_storage",
    "format_timestamp",
    "cutoff_before",
]

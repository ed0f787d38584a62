"""Orphaned-data cleanup for the project-generation tables.

This module provides:
- OrphanCleanupJob: runs the six maintenance steps and returns a report
- CleanupResult: per-category counters and step errors
- CleanupRunReport: result plus timing, rendered as the HTTP response body
"""

from .job import OrphanCleanupJob
from .models import CleanupResult, CleanupRunReport, CleanupStep, fatal_error_response

__all__ = [
    "OrphanCleanupJob",
    "CleanupResult",
    "CleanupRunReport",
    "CleanupStep",
    "fatal_error_response",
]

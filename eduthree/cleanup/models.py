"""Data models for cleanup runs and their JSON reports."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from sqlalchemy.orm import Session

from eduthree.utils.timestamps import format_timestamp

# Counters summed into total_cleaned. expired_cache_cleaned is reported but never tracked.
TRACKED_COUNTERS = (
    "orphaned_projects_cleaned",
    "orphaned_forms_cleaned",
    "orphaned_metadata_cleaned",
    "orphaned_queue_entries_cleaned",
    "stale_generation_runs_cleaned",
)


@dataclass
class CleanupResult:
    """
    Per-category counts and step errors for one cleanup run.

    Attributes:
        orphaned_projects_cleaned: Projects deleted for missing forms or metadata
        orphaned_forms_cleaned: Form rows deleted for a NULL project reference
        orphaned_metadata_cleaned: Metadata rows deleted for a NULL project reference
        orphaned_queue_entries_cleaned: Failed queue entries deleted past retention
        expired_cache_cleaned: Always 0; the cache sweep reports success only
        stale_generation_runs_cleaned: In-progress runs marked failed after the timeout
        total_cleaned: Sum of the tracked counters
        errors: One message per failed step

    Project deletes set child references to NULL rather than cascading, so a
    child left behind by step 1 is counted again by the form or metadata sweep.
    A project with a form but no metadata therefore adds 2 to total_cleaned.
    """

    orphaned_projects_cleaned: int = 0
    orphaned_forms_cleaned: int = 0
    orphaned_metadata_cleaned: int = 0
    orphaned_queue_entries_cleaned: int = 0
    expired_cache_cleaned: int = 0
    stale_generation_runs_cleaned: int = 0
    total_cleaned: int = 0
    errors: List[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        """True when no step failed."""
        return not self.errors

    def compute_total(self) -> int:
        self.total_cleaned = sum(getattr(self, name) for name in TRACKED_COUNTERS)
        return self.total_cleaned

    def to_dict(self) -> Dict[str, Any]:
        return {
            "orphaned_projects_cleaned": self.orphaned_projects_cleaned,
            "orphaned_forms_cleaned": self.orphaned_forms_cleaned,
            "orphaned_metadata_cleaned": self.orphaned_metadata_cleaned,
            "orphaned_queue_entries_cleaned": self.orphaned_queue_entries_cleaned,
            "expired_cache_cleaned": self.expired_cache_cleaned,
            "stale_generation_runs_cleaned": self.stale_generation_runs_cleaned,
            "total_cleaned": self.total_cleaned,
            "errors": list(self.errors),
        }


@dataclass
class CleanupRunReport:
    """
    A finished cleanup run: the result plus timing.

    Attributes:
        result: Counters and errors
        started_at: Job clock reading when the run began (UTC)
        finished_at: Job clock reading when the run ended (UTC)
        duration_ms: Wall-clock duration of the run
        run_id: Identifier attached to the run's log records
    """

    result: CleanupResult
    started_at: datetime
    finished_at: datetime
    duration_ms: int
    run_id: str = ""

    @property
    def success(self) -> bool:
        return self.result.success

    def to_response(self) -> Dict[str, Any]:
        """Body of the 200 response."""
        return {
            "success": self.result.success,
            "result": self.result.to_dict(),
            "duration_ms": self.duration_ms,
            "timestamp": format_timestamp(self.finished_at),
        }


def fatal_error_response(error: BaseException, timestamp: datetime) -> Dict[str, Any]:
    """Body of the 500 response for failures outside the per-step scopes."""
    return {
        "success": False,
        "error": str(error) or type(error).__name__,
        "timestamp": format_timestamp(timestamp),
    }


@dataclass
class CleanupStep:
    """
    One independent maintenance step.

    Attributes:
        name: Label used in logs and error messages (e.g. "Stale queue")
        action: Callable taking (session, now) and returning a count
        counter: CleanupResult attribute receiving the count, or None to discard it
    """

    name: str
    action: Callable[[Session, datetime], int]
    counter: Optional[str] = None

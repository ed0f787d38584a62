"""Orphaned-data cleanup job.

Six independent steps run one after another, each in its own session and
transaction. A failing step is recorded in the result and the remaining
steps still run; nothing wraps the run as a whole, so a partial run is
simply finished by the next one.
"""

import time
from contextlib import AbstractContextManager
from datetime import datetime
from typing import Callable, List
from uuid import uuid4

from sqlalchemy.orm import Session

from eduthree.config.duration import humanize_seconds
from eduthree.config.models import CleanupConfig
from eduthree.logging import get_logger
from eduthree.logging.context import log_context
from eduthree.persistence.database import get_session
from eduthree.persistence.exceptions import PersistenceError
from eduthree.persistence.repositories import (
    FilterCacheRepository,
    GenerationQueueRepository,
    GenerationRunRepository,
    ProjectFormRepository,
    ProjectMetadataRepository,
    ProjectRepository,
)
from eduthree.utils.timestamps import cutoff_before, ensure_utc, utc_now

from .models import CleanupResult, CleanupRunReport, CleanupStep

logger = get_logger(__name__, component="cleanup")

DEFAULT_FAILED_QUEUE_RETENTION_SECONDS = 24 * 3600
DEFAULT_STALE_RUN_TIMEOUT_SECONDS = 3600
STALE_RUN_ERROR_CATEGORY = "timeout"


class OrphanCleanupJob:
    """
    Prunes orphaned rows and fails stuck generation runs.

    Steps, in order:
    1. Orphaned projects: delete projects missing a form or metadata row
    2. Orphaned forms: delete form rows whose project reference is NULL
    3. Orphaned metadata: delete metadata rows whose project reference is NULL
    4. Stale queue: delete failed queue entries older than the retention window
    5. Expired cache: delete expired company-filter cache entries (count not tracked)
    6. Stale runs: mark in-progress runs older than the timeout as failed

    Re-running when nothing qualifies performs no writes and reports zeros.
    """

    def __init__(
        self,
        session_scope: Callable[[], AbstractContextManager] = get_session,
        clock: Callable[[], datetime] = utc_now,
        failed_queue_retention_seconds: int = DEFAULT_FAILED_QUEUE_RETENTION_SECONDS,
        stale_run_timeout_seconds: int = DEFAULT_STALE_RUN_TIMEOUT_SECONDS,
    ):
        """
        Initialize the cleanup job.

        Args:
            session_scope: Factory for transactional session scopes (one per step)
            clock: Source of the current UTC time; cutoffs are derived from it
            failed_queue_retention_seconds: Age after which failed queue entries go
            stale_run_timeout_seconds: Age after which in-progress runs are failed
        """
        self.session_scope = session_scope
        self.clock = clock
        self.failed_queue_retention_seconds = failed_queue_retention_seconds
        self.stale_run_timeout_seconds = stale_run_timeout_seconds

    @classmethod
    def from_config(
        cls,
        config: CleanupConfig,
        session_scope: Callable[[], AbstractContextManager] = get_session,
        clock: Callable[[], datetime] = utc_now,
    ) -> "OrphanCleanupJob":
        """Build a job with the retention windows from configuration."""
        return cls(
            session_scope=session_scope,
            clock=clock,
            failed_queue_retention_seconds=config.failed_queue_retention_seconds,
            stale_run_timeout_seconds=config.stale_run_timeout_seconds,
        )

    @property
    def stale_run_message(self) -> str:
        return (
            "Automatically marked as failed - stuck in progress for over "
            f"{humanize_seconds(self.stale_run_timeout_seconds)}"
        )

    def steps(self) -> List[CleanupStep]:
        """The maintenance steps in execution order."""
        return [
            CleanupStep("Orphaned projects", self._clean_orphaned_projects, "orphaned_projects_cleaned"),
            CleanupStep("Orphaned forms", self._clean_orphaned_forms, "orphaned_forms_cleaned"),
            CleanupStep("Orphaned metadata", self._clean_orphaned_metadata, "orphaned_metadata_cleaned"),
            CleanupStep("Stale queue", self._clean_stale_queue, "orphaned_queue_entries_cleaned"),
            CleanupStep("Expired cache", self._clean_expired_cache, None),
            CleanupStep("Stale runs", self._fail_stale_runs, "stale_generation_runs_cleaned"),
        ]

    def run(self) -> CleanupRunReport:
        """
        Execute every step and assemble the report.

        Returns:
            CleanupRunReport; step failures appear in result.errors

        Raises:
            Nothing for step-level failures. Errors outside the step scopes
            (e.g. a broken clock) propagate to the caller.
        """
        run_id = uuid4().hex
        started_at = ensure_utc(self.clock())
        start = time.monotonic()
        result = CleanupResult()

        with log_context(run_id=run_id):
            logger.info(
                "Starting cleanup job",
                extra={
                    "event": "cleanup.run.started",
                    "failed_queue_retention_seconds": self.failed_queue_retention_seconds,
                    "stale_run_timeout_seconds": self.stale_run_timeout_seconds,
                },
            )

            for number, step in enumerate(self.steps(), 1):
                self._run_step(number, step, started_at, result)

            result.compute_total()
            duration_ms = int((time.monotonic() - start) * 1000)
            finished_at = ensure_utc(self.clock())

            logger.info(
                f"Cleanup completed in {duration_ms}ms. Total cleaned: {result.total_cleaned}",
                extra={
                    "event": "cleanup.run.completed",
                    "duration_ms": duration_ms,
                    "total_cleaned": result.total_cleaned,
                    "error_count": len(result.errors),
                    "success": result.success,
                },
            )

        return CleanupRunReport(
            result=result,
            started_at=started_at,
            finished_at=finished_at,
            duration_ms=duration_ms,
            run_id=run_id,
        )

    def _run_step(
        self, number: int, step: CleanupStep, now: datetime, result: CleanupResult
    ) -> None:
        with log_context(step=step.name):
            logger.info(
                f"Step {number}: {step.name}",
                extra={"event": "cleanup.step.started", "step_number": number},
            )

            try:
                with self.session_scope() as session:
                    count = step.action(session, now)
            except PersistenceError as e:
                message = f"{step.name}: {e}"
                self._record_failure(result, message, e)
                return
            except Exception as e:
                message = f"{step.name} exception: {e}"
                self._record_failure(result, message, e)
                return

            if step.counter is not None:
                setattr(result, step.counter, count)

            logger.info(
                f"{step.name}: cleaned {count}",
                extra={
                    "event": "cleanup.step.completed",
                    "step_number": number,
                    "count": count,
                    "counted": step.counter is not None,
                },
            )

    @staticmethod
    def _record_failure(result: CleanupResult, message: str, error: Exception) -> None:
        result.errors.append(message)
        logger.error(
            message,
            extra={
                "event": "cleanup.step.failed",
                "error_type": type(error).__name__,
            },
            exc_info=True,
        )

    def _clean_orphaned_projects(self, session: Session, now: datetime) -> int:
        deleted_ids = ProjectRepository(session).cleanup_orphaned_projects()
        if deleted_ids:
            logger.debug(
                "Deleted orphaned projects",
                extra={"project_ids": deleted_ids},
            )
        return len(deleted_ids)

    def _clean_orphaned_forms(self, session: Session, now: datetime) -> int:
        return self._delete_orphaned_children(ProjectFormRepository(session))

    def _clean_orphaned_metadata(self, session: Session, now: datetime) -> int:
        return self._delete_orphaned_children(ProjectMetadataRepository(session))

    @staticmethod
    def _delete_orphaned_children(repo) -> int:
        # The pre-count is what gets reported; no delete is issued when it is zero
        orphaned = repo.count_orphaned()
        if orphaned == 0:
            return 0
        repo.delete_orphaned()
        return orphaned

    def _clean_stale_queue(self, session: Session, now: datetime) -> int:
        cutoff = cutoff_before(now, self.failed_queue_retention_seconds)
        return len(GenerationQueueRepository(session).delete_failed_before(cutoff))

    def _clean_expired_cache(self, session: Session, now: datetime) -> int:
        return FilterCacheRepository(session).delete_expired(now)

    def _fail_stale_runs(self, session: Session, now: datetime) -> int:
        cutoff = cutoff_before(now, self.stale_run_timeout_seconds)
        updated_ids = GenerationRunRepository(session).fail_stale_runs(
            cutoff=cutoff,
            completed_at=now,
            error_message=self.stale_run_message,
            error_category=STALE_RUN_ERROR_CATEGORY,
        )
        return len(updated_ids)


"""Scheduler service for periodic cleanup runs."""

from datetime import datetime, timezone
import threading
from typing import Callable, Optional

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger

from eduthree.logging import get_logger

logger = get_logger(__name__, component="scheduler")

JOB_ID = "orphan-cleanup"


class SchedulerService:
    """
    Wraps APScheduler to run the cleanup job at a fixed interval.

    The BackgroundScheduler runs the job in a worker thread so the main
    thread stays free to handle signals and coordinate shutdown.
    """

    def __init__(
        self,
        job_callable: Callable[[], object],
        interval_seconds: int,
        shutdown_event: Optional[threading.Event] = None,
    ):
        """
        Initialize the scheduler service.

        Args:
            job_callable: Function called on each scheduled run (e.g. OrphanCleanupJob.run)
            interval_seconds: Interval between runs in seconds
            shutdown_event: Optional event set on shutdown for coordination
        """
        self.job_callable = job_callable
        self.interval_seconds = interval_seconds
        self.shutdown_event = shutdown_event

        self.scheduler = BackgroundScheduler(
            job_defaults={
                "max_instances": 1,  # never overlap two cleanup runs
                "coalesce": True,
                "misfire_grace_time": interval_seconds,
            },
            timezone=timezone.utc,
        )

    def _run_job(self) -> None:
        try:
            self.job_callable()
        except Exception as e:
            # Keep the schedule alive; the next interval retries
            logger.error(
                f"Scheduled cleanup failed: {e}",
                extra={"event": "scheduler.job.failed", "error_type": type(e).__name__},
                exc_info=True,
            )

    def start(self) -> None:
        """
        Register the cleanup job and start the scheduler.

        The first run happens immediately; later runs follow the interval.
        """
        next_run = datetime.now(timezone.utc)
        self.scheduler.add_job(
            func=self._run_job,
            trigger=IntervalTrigger(seconds=self.interval_seconds, timezone=timezone.utc),
            id=JOB_ID,
            name="Orphaned data cleanup",
            replace_existing=True,
            next_run_time=next_run,
        )

        self.scheduler.start()

        logger.info(
            f"Scheduler started with interval: {self.interval_seconds} seconds",
            extra={
                "event": "scheduler.started",
                "interval_seconds": self.interval_seconds,
                "next_run_time": next_run.isoformat(),
            },
        )

    def shutdown(self, wait: bool = False) -> None:
        """
        Stop the scheduler.

        Args:
            wait: If True, wait for a running cleanup to finish first
        """
        logger.info(
            "Shutting down scheduler",
            extra={"event": "scheduler.stopping", "wait_for_jobs": wait},
        )

        if self.scheduler.running:
            self.scheduler.shutdown(wait=wait)

        if self.shutdown_event:
            self.shutdown_event.set()

        logger.info("Scheduler shutdown complete", extra={"event": "scheduler.stopped"})

    def trigger_now(self) -> None:
        """Run the cleanup synchronously in the calling thread."""
        logger.info(
            "Triggering immediate cleanup run",
            extra={"event": "scheduler.trigger_now"},
        )
        self._run_job()

    def is_running(self) -> bool:
        return self.scheduler.running

    def get_next_run_time(self) -> Optional[datetime]:
        """Next scheduled run time, or None when nothing is scheduled."""
        job = self.scheduler.get_job(JOB_ID)
        return job.next_run_time if job else None

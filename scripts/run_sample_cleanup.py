#!/usr/bin/env python3
"""Sample cleanup harness for end-to-end validation.

Seeds a scratch SQLite store with one qualifying row (or chain of rows) per
cleanup step, runs the cleanup twice and prints both summaries. The first
run should clean every category; the second should report zeros.

Usage:
    python scripts/run_sample_cleanup.py
    python scripts/run_sample_cleanup.py --database /tmp/sample.db --log-level DEBUG
"""

import argparse
import sys
from datetime import timedelta
from pathlib import Path

from eduthree.cleanup import OrphanCleanupJob
from eduthree.config.loader import load_app_config
from eduthree.logging.config import configure_logging
from eduthree.persistence import (
    FilterCacheRepository,
    GenerationQueueRepository,
    GenerationRunRepository,
    ProjectFormRepository,
    ProjectMetadataRepository,
    ProjectRepository,
    close_database,
    get_session,
    init_database,
)
from eduthree.utils.timestamps import utc_now


def print_header(title: str):
    width = 80
    print("\n" + "=" * width)
    print(f" {title}")
    print("=" * width + "\n")


def print_summary_table(report):
    """Print the counters of a cleanup report."""
    result = report.result
    metrics = [
        ("Orphaned projects", result.orphaned_projects_cleaned),
        ("Orphaned forms", result.orphaned_forms_cleaned),
        ("Orphaned metadata", result.orphaned_metadata_cleaned),
        ("Stale queue entries", result.orphaned_queue_entries_cleaned),
        ("Expired cache (not tracked)", result.expired_cache_cleaned),
        ("Stale generation runs", result.stale_generation_runs_cleaned),
        ("Total cleaned", result.total_cleaned),
        ("Errors", len(result.errors)),
        ("Duration (ms)", report.duration_ms),
    ]

    label_width = max(len(label) for label, _ in metrics)

    print("┌" + "─" * (label_width + 2) + "┬" + "─" * 12 + "┐")
    print(f"│ {'Metric':<{label_width}} │ {'Value':<10} │")
    print("├" + "─" * (label_width + 2) + "┼" + "─" * 12 + "┤")
    for label, value in metrics:
        print(f"│ {label:<{label_width}} │ {str(value):<10} │")
    print("└" + "─" * (label_width + 2) + "┴" + "─" * 12 + "┘")

    for error in result.errors:
        print(f"  ! {error}")


def seed_sample_rows():
    now = utc_now()
    with get_session() as session:
        projects = ProjectRepository(session)
        forms = ProjectFormRepository(session)
        metadata = ProjectMetadataRepository(session)

        complete = projects.add(title="Supply-chain dashboard")
        forms.add(complete.id, {"industry": "logistics"})
        metadata.add(complete.id, algorithm_version="v2")

        projects.add(title="Abandoned draft")
        half_done = projects.add(title="Form without metadata")
        forms.add(half_done.id, {"industry": "fintech"})
        metadata.add(None, algorithm_version="v1")

        queue = GenerationQueueRepository(session)
        queue.add(status="failed", last_error_at=now - timedelta(hours=30), last_error="timeout")
        queue.add(status="failed", last_error_at=now - timedelta(minutes=30), last_error="timeout")

        cache = FilterCacheRepository(session)
        cache.add("course-1:fintech", now - timedelta(hours=2))
        cache.add("course-2:logistics", now + timedelta(hours=2))

        runs = GenerationRunRepository(session)
        runs.add(started_at=now - timedelta(hours=3))
        runs.add(started_at=now - timedelta(minutes=5))


def main():
    parser = argparse.ArgumentParser(
        description="Seed a scratch store and run the cleanup against it",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument(
        "--database",
        type=Path,
        default=Path("data/sample_cleanup.db"),
        help="Path to SQLite database (default: data/sample_cleanup.db)",
    )
    parser.add_argument("--config", type=Path, default=None, help="Optional settings file")
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Log level (default: WARNING)",
    )
    args = parser.parse_args()

    print_header("EduThree Maintenance - Sample Cleanup Harness")

    app_config = load_app_config(args.config)
    configure_logging(level=args.log_level, format_type=app_config.logging.format, environment="validation")

    if args.database.exists():
        args.database.unlink()
    init_database(f"sqlite:///{args.database.absolute()}")

    try:
        seed_sample_rows()
        job = OrphanCleanupJob.from_config(app_config.cleanup)

        print_header("First run")
        first = job.run()
        print_summary_table(first)

        print_header("Second run (expect zeros)")
        second = job.run()
        print_summary_table(second)
    finally:
        close_database()

    return 0 if first.success and second.success and second.result.total_cleaned == 0 else 1


if __name__ == "__main__":
    sys.exit(main())

"""Main entry point for the EduThree maintenance service."""

from dotenv import load_dotenv
load_dotenv()

import argparse
import json
import signal
import sys
import threading
import time
from pathlib import Path
from typing import Optional, Tuple

import uvicorn

from eduthree.api import create_app
from eduthree.cleanup import OrphanCleanupJob
from eduthree.config.environment import EnvironmentConfig
from eduthree.config.exceptions import ConfigurationError
from eduthree.config.loader import load_app_config, load_config
from eduthree.config.models import AppConfig
from eduthree.logging import get_logger
from eduthree.logging.config import configure_logging
from eduthree.persistence.database import close_database, init_database
from eduthree.scheduler import SchedulerService

logger = get_logger(__name__, component="cli")


def resolve_log_level(
    app_config: AppConfig,
    env_level: Optional[str],
    cli_level: Optional[str],
) -> str:
    """Pick the log level: CLI flag, then LOG_LEVEL, then the settings file."""
    if cli_level:
        return cli_level.upper()
    if env_level:
        return env_level.upper()
    return app_config.logging.level or "INFO"


def load_runtime_config(
    config_path: Optional[Path], log_level_override: Optional[str]
) -> Tuple[AppConfig, EnvironmentConfig]:
    """
    Load settings and credentials for the manual and daemon modes.

    Args:
        config_path: Path to configuration file, or None to search defaults
        log_level_override: Log level from CLI (takes precedence)

    Returns:
        Tuple of (AppConfig, EnvironmentConfig) with log_level resolved

    Raises:
        ConfigurationError: If configuration or credentials are invalid
    """
    app_config, env_config = load_config(config_path)
    env_config.log_level = resolve_log_level(app_config, env_config.log_level, log_level_override)
    return app_config, env_config


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="eduthree-maintenance",
        description="EduThree maintenance - periodic cleanup of orphaned project data",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to configuration file (default: config.yaml or config/config.yaml)",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Log level (overrides config and environment)",
    )
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument(
        "--manual-run",
        action="store_true",
        help="Run the cleanup once, print the JSON report and exit",
    )
    mode.add_argument(
        "--serve",
        action="store_true",
        help="Serve the HTTP trigger instead of running the scheduler",
    )
    parser.add_argument("--host", default=None, help="Bind host for --serve")
    parser.add_argument("--port", type=int, default=None, help="Bind port for --serve")
    return parser


def run_manual(app_config: AppConfig, env_config: EnvironmentConfig) -> int:
    """Run the cleanup once and print the report. Returns the exit code."""
    init_database(env_config.database_url)
    try:
        report = OrphanCleanupJob.from_config(app_config.cleanup).run()
    finally:
        close_database()

    print(json.dumps(report.to_response(), indent=2))
    return 0 if report.success else 1


def run_daemon(app_config: AppConfig, env_config: EnvironmentConfig) -> int:
    """Run the cleanup on an interval until SIGINT or SIGTERM."""
    init_database(env_config.database_url)
    job = OrphanCleanupJob.from_config(app_config.cleanup)

    shutdown_event = threading.Event()
    scheduler_service = SchedulerService(
        job_callable=job.run,
        interval_seconds=app_config.cleanup.interval_seconds,
        shutdown_event=shutdown_event,
    )

    def signal_handler(signum, frame):
        logger.info(
            f"Received signal {signum}, shutting down",
            extra={"event": "service.signal_received", "signal": signum},
        )
        scheduler_service.shutdown(wait=False)

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    scheduler_service.start()
    logger.info(
        "Scheduler started. Press Ctrl+C to stop",
        extra={"event": "service.daemon_mode.started"},
    )

    try:
        shutdown_event.wait()
    except KeyboardInterrupt:
        logger.info(
            "Keyboard interrupt received, shutting down",
            extra={"event": "service.keyboard_interrupt"},
        )
        scheduler_service.shutdown(wait=False)
    finally:
        close_database()

    return 0


def run_server(app_config: AppConfig, config_path: Optional[Path], host: Optional[str], port: Optional[int]) -> int:
    """Serve the HTTP trigger with uvicorn."""
    host = host or app_config.server.host
    port = port or app_config.server.port
    logger.info(
        f"Serving cleanup trigger on {host}:{port}",
        extra={"event": "service.serve.started", "host": host, "port": port},
    )
    # log_config=None keeps our root handler instead of uvicorn's defaults
    uvicorn.run(create_app(config_path=config_path), host=host, port=port, log_config=None)
    return 0


def main(argv=None) -> int:
    """
    Main entry point for the maintenance service.

    Returns:
        Exit code (0 for success, non-zero for failure).
    """
    start_time = time.time()
    args = build_parser().parse_args(argv)

    try:
        if args.serve:
            # Credentials are checked per request so the server can report them as 500s
            app_config = load_app_config(args.config)
            env_config = None
            log_level = resolve_log_level(app_config, None, args.log_level)
        else:
            app_config, env_config = load_runtime_config(args.config, args.log_level)
            log_level = env_config.log_level

        environment = env_config.environment if env_config else "local"
        configure_logging(
            level=log_level,
            format_type=app_config.logging.format,
            environment=environment,
        )

        logger.info(
            "EduThree maintenance starting",
            extra={
                "event": "service.starting",
                "config_path": str(args.config) if args.config else None,
                "log_level": log_level,
                "mode": "serve" if args.serve else "manual" if args.manual_run else "daemon",
                "cleanup_interval_seconds": app_config.cleanup.interval_seconds,
            },
        )

        if args.serve:
            exit_code = run_server(app_config, args.config, args.host, args.port)
        elif args.manual_run:
            exit_code = run_manual(app_config, env_config)
        else:
            exit_code = run_daemon(app_config, env_config)

        logger.info(
            "EduThree maintenance stopped",
            extra={
                "event": "service.stopping",
                "uptime_seconds": round(time.time() - start_time, 2),
                "exit_code": exit_code,
            },
        )
        return exit_code

    except ConfigurationError as e:
        print(f"Configuration Error: {e}", file=sys.stderr)
        logger.error(
            f"Configuration error: {e.message}",
            extra={"event": "config.error", "error_type": "ConfigurationError"},
        )
        return 1
    except KeyboardInterrupt:
        print("\nShutdown requested by user", file=sys.stderr)
        return 0
    except Exception as e:
        print(f"Fatal error: {e}", file=sys.stderr)
        logger.critical(
            "Fatal error during startup",
            extra={
                "event": "service.startup.failed",
                "error_type": type(e).__name__,
                "error": str(e),
            },
            exc_info=True,
        )
        return 1


if __name__ == "__main__":
    sys.exit(main())

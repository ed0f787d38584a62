"""FastAPI application exposing the cleanup job over HTTP."""

from pathlib import Path
import threading
from typing import Callable, Optional

from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse

from eduthree.cleanup import OrphanCleanupJob, fatal_error_response
from eduthree.config.loader import load_config
from eduthree.logging import get_logger
from eduthree.persistence.database import init_database, is_initialized
from eduthree.utils.timestamps import utc_now

logger = get_logger(__name__, component="api")

CLEANUP_PATH = "/cleanup-orphaned-data"

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type",
}

JobFactory = Callable[[], OrphanCleanupJob]

# Requests run on a threadpool; only one of them may open the store
_init_lock = threading.Lock()


def default_job_factory(config_path: Optional[Path] = None) -> JobFactory:
    """Build a factory that loads credentials and opens the store on first use.

    Configuration is read per request so that missing credentials surface as
    a 500 response rather than preventing the app from starting.
    """

    def factory() -> OrphanCleanupJob:
        app_config, env_config = load_config(config_path)
        if not is_initialized():
            with _init_lock:
                if not is_initialized():
                    init_database(env_config.database_url)
        return OrphanCleanupJob.from_config(app_config.cleanup)

    return factory


def create_app(
    job_factory: Optional[JobFactory] = None,
    config_path: Optional[Path] = None,
) -> FastAPI:
    """
    Create the HTTP application.

    Args:
        job_factory: Callable returning a ready OrphanCleanupJob. Defaults to
            one built from the environment and the YAML settings file.
        config_path: Settings file used by the default factory

    Returns:
        FastAPI application
    """
    make_job = job_factory or default_job_factory(config_path)
    app = FastAPI(title="EduThree Maintenance", version="0.1.0")

    @app.middleware("http")
    async def add_cors_headers(request: Request, call_next):
        response = await call_next(request)
        response.headers.update(CORS_HEADERS)
        return response

    @app.options(CLEANUP_PATH)
    def cleanup_preflight() -> Response:
        return Response(status_code=200)

    @app.api_route(CLEANUP_PATH, methods=["GET", "POST"])
    def cleanup_orphaned_data() -> JSONResponse:
        logger.info(
            "Cleanup requested over HTTP",
            extra={"event": "api.cleanup.requested"},
        )
        try:
            report = make_job().run()
        except Exception as e:
            logger.error(
                f"Fatal error during cleanup: {e}",
                extra={"event": "api.cleanup.failed", "error_type": type(e).__name__},
                exc_info=True,
            )
            return JSONResponse(
                status_code=500,
                content=fatal_error_response(e, utc_now()),
            )

        return JSONResponse(status_code=200, content=report.to_response())

    @app.get("/health")
    def health() -> dict:
        return {"status": "ok"}

    return app

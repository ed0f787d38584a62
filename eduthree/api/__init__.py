"""HTTP trigger for the cleanup job."""

from .app import CORS_HEADERS, CLEANUP_PATH, create_app

__all__ = ["create_app", "CORS_HEADERS", "CLEANUP_PATH"]

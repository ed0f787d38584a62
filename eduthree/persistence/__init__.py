"""Persistence layer for the tables the maintenance job inspects.

Public API:
    # Database initialization and session management
    - init_database(database_url: str) -> None
    - get_session() -> ContextManager[Session]
    - close_database() -> None
    - get_engine() -> Engine

    # Repository classes
    - ProjectRepository: projects and the orphaned-project sweep
    - ProjectFormRepository / ProjectMetadataRepository: child rows of projects
    - GenerationQueueRepository: project-generation queue
    - FilterCacheRepository: company-filter cache
    - GenerationRunRepository: project-generation runs

    # Exceptions
    - PersistenceError: Base exception for all persistence errors
    - DatabaseConnectionError: Store unreachable or not initialised
    - DataIntegrityError: Constraint violations

Example usage:
    >>> from eduthree.persistence import init_database, get_session, ProjectRepository
    >>> init_database("sqlite:///./data/eduthree.db")
    >>> with get_session() as session:
    ...     orphan_ids = ProjectRepository(session).find_orphaned_ids()
"""

from .database import close_database, get_engine, get_session, init_database, is_initialized
from .exceptions import DatabaseConnectionError, DataIntegrityError, PersistenceError
from .repositories import (
    FilterCacheRepository,
    GenerationQueueRepository,
    GenerationRunRepository,
    ProjectFormRepository,
    ProjectMetadataRepository,
    ProjectRepository,
)

__all__ = [
    # Database functions
    "init_database",
    "get_session",
    "close_database",
    "get_engine",
    "is_initialized",
    # Repositories
    "ProjectRepository",
    "ProjectFormRepository",
    "ProjectMetadataRepository",
    "GenerationQueueRepository",
    "FilterCacheRepository",
    "GenerationRunRepository",
    # Exceptions
    "PersistenceError",
    "DatabaseConnectionError",
    "DataIntegrityError",
]

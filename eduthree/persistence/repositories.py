"""Data access layer for the maintained tables.

Each repository wraps one table. Query and delete helpers translate
SQLAlchemy failures into PersistenceError (DataIntegrityError for
constraint violations) after logging them, so callers never see driver
exceptions.
"""

import json
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import delete, exists, func, or_, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from eduthree.utils.timestamps import to_storage, utc_now

from .exceptions import DataIntegrityError, PersistenceError
from .schema import (
    CompanyFilterCacheModel,
    GenerationQueueModel,
    GenerationRunModel,
    ProjectFormModel,
    ProjectMetadataModel,
    ProjectModel,
)

logger = logging.getLogger(__name__)


class _Repository:
    """Shared session handling and insert helper."""

    model = None

    def __init__(self, session: Session):
        """Initialize repository with database session.

        Args:
            session: SQLAlchemy session for database operations
        """
        self.session = session

    def _insert(self, row):
        try:
            self.session.add(row)
            self.session.flush()
            return row
        except IntegrityError as e:
            logger.error(f"Integrity error inserting into {row.__tablename__}: {e}", exc_info=True)
            raise DataIntegrityError(
                f"Failed to insert into {row.__tablename__} due to constraint violation: {e}"
            ) from e
        except SQLAlchemyError as e:
            logger.error(f"Error inserting into {row.__tablename__}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to insert into {row.__tablename__}: {e}") from e

    def get(self, row_id: str):
        """Fetch a row by primary key, or None."""
        try:
            return self.session.get(self.model, row_id)
        except SQLAlchemyError as e:
            logger.error(f"Error loading {self.model.__tablename__} {row_id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to load {self.model.__tablename__}: {e}") from e

    def count(self) -> int:
        """Total number of rows in the table."""
        try:
            return self.session.scalar(select(func.count()).select_from(self.model))
        except SQLAlchemyError as e:
            logger.error(f"Error counting {self.model.__tablename__}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to count {self.model.__tablename__}: {e}") from e


class ProjectRepository(_Repository):
    """Projects and the orphaned-project sweep."""

    model = ProjectModel

    def add(
        self,
        title: str,
        course_id: Optional[str] = None,
        created_at: Optional[datetime] = None,
        project_id: Optional[str] = None,
    ) -> ProjectModel:
        """Insert a project row."""
        row = ProjectModel(
            title=title,
            course_id=course_id,
            created_at=to_storage(created_at or utc_now()),
        )
        if project_id:
            row.id = project_id
        return self._insert(row)

    def find_orphaned_ids(self) -> List[str]:
        """IDs of projects missing a form row or a metadata row.

        Raises:
            PersistenceError: If the query fails
        """
        has_form = exists().where(ProjectFormModel.project_id == ProjectModel.id)
        has_metadata = exists().where(ProjectMetadataModel.project_id == ProjectModel.id)
        stmt = select(ProjectModel.id).where(or_(~has_form, ~has_metadata))

        try:
            return list(self.session.scalars(stmt).all())
        except SQLAlchemyError as e:
            logger.error(f"Error finding orphaned projects: {e}", exc_info=True)
            raise PersistenceError(f"Failed to find orphaned projects: {e}") from e

    def cleanup_orphaned_projects(self) -> List[str]:
        """Delete projects missing a form or metadata row.

        Child rows that did exist keep living with a NULL project_id; the
        orphaned form and metadata sweeps pick them up.

        Returns:
            IDs of the deleted projects

        Raises:
            PersistenceError: If the query or delete fails
        """
        orphan_ids = self.find_orphaned_ids()
        if not orphan_ids:
            return []

        try:
            self.session.execute(
                delete(ProjectModel).where(ProjectModel.id.in_(orphan_ids)),
                execution_options={"synchronize_session": False},
            )
            self.session.flush()
            return orphan_ids
        except SQLAlchemyError as e:
            logger.error(f"Error deleting orphaned projects: {e}", exc_info=True)
            raise PersistenceError(f"Failed to delete orphaned projects: {e}") from e


class _ProjectChildRepository(_Repository):
    """Rows that hang off a project through a nullable project_id."""

    def count_orphaned(self) -> int:
        """Number of rows whose project reference is NULL.

        Raises:
            PersistenceError: If the count fails
        """
        stmt = select(func.count()).select_from(self.model).where(self.model.project_id.is_(None))
        try:
            return self.session.scalar(stmt) or 0
        except SQLAlchemyError as e:
            logger.error(f"Error counting orphaned {self.model.__tablename__}: {e}", exc_info=True)
            raise PersistenceError(
                f"Failed to count orphaned {self.model.__tablename__}: {e}"
            ) from e

    def delete_orphaned(self) -> int:
        """Delete rows whose project reference is NULL.

        Returns:
            Number of rows deleted

        Raises:
            PersistenceError: If the delete fails
        """
        stmt = delete(self.model).where(self.model.project_id.is_(None))
        try:
            result = self.session.execute(stmt, execution_options={"synchronize_session": False})
            self.session.flush()
            return result.rowcount
        except SQLAlchemyError as e:
            logger.error(f"Error deleting orphaned {self.model.__tablename__}: {e}", exc_info=True)
            raise PersistenceError(
                f"Failed to delete orphaned {self.model.__tablename__}: {e}"
            ) from e


class ProjectFormRepository(_ProjectChildRepository):
    """Form submissions attached to projects."""

    model = ProjectFormModel

    def add(self, project_id: Optional[str], form_data: Optional[Dict[str, Any]] = None):
        """Insert a form row."""
        return self._insert(
            ProjectFormModel(
                project_id=project_id,
                form_data=json.dumps(form_data) if form_data is not None else None,
            )
        )


class ProjectMetadataRepository(_ProjectChildRepository):
    """Generation metadata attached to projects."""

    model = ProjectMetadataModel

    def add(
        self,
        project_id: Optional[str],
        algorithm_version: Optional[str] = None,
        created_at: Optional[datetime] = None,
    ):
        """Insert a metadata row."""
        return self._insert(
            ProjectMetadataModel(
                project_id=project_id,
                algorithm_version=algorithm_version,
                created_at=to_storage(created_at or utc_now()),
            )
        )


class GenerationQueueRepository(_Repository):
    """Project-generation queue."""

    model = GenerationQueueModel

    def add(
        self,
        status: str = "pending",
        last_error_at: Optional[datetime] = None,
        last_error: Optional[str] = None,
        course_id: Optional[str] = None,
        attempts: int = 0,
    ) -> GenerationQueueModel:
        """Insert a queue entry."""
        return self._insert(
            GenerationQueueModel(
                course_id=course_id,
                status=status,
                attempts=attempts,
                last_error=last_error,
                last_error_at=to_storage(last_error_at),
                created_at=to_storage(utc_now()),
            )
        )

    def delete_failed_before(self, cutoff: datetime) -> List[str]:
        """Delete failed entries whose last error happened before ``cutoff``.

        Args:
            cutoff: Entries with last_error_at strictly earlier are removed

        Returns:
            IDs of the deleted entries

        Raises:
            PersistenceError: If the query or delete fails
        """
        # Status and age are checked by the DELETE itself so a concurrent retry is never removed
        stmt = (
            delete(GenerationQueueModel)
            .where(
                GenerationQueueModel.status == "failed",
                GenerationQueueModel.last_error_at < to_storage(cutoff),
            )
            .returning(GenerationQueueModel.id)
        )
        try:
            result = self.session.execute(stmt, execution_options={"synchronize_session": False})
            deleted_ids = list(result.scalars())
            self.session.flush()
            return deleted_ids
        except SQLAlchemyError as e:
            logger.error(f"Error deleting stale queue entries: {e}", exc_info=True)
            raise PersistenceError(f"Failed to delete stale queue entries: {e}") from e


class FilterCacheRepository(_Repository):
    """Company-filter cache entries."""

    model = CompanyFilterCacheModel

    def add(
        self,
        cache_key: str,
        expires_at: datetime,
        filtered_companies: Optional[List[Any]] = None,
        course_id: Optional[str] = None,
    ) -> CompanyFilterCacheModel:
        """Insert a cache entry."""
        return self._insert(
            CompanyFilterCacheModel(
                cache_key=cache_key,
                course_id=course_id,
                filtered_companies=json.dumps(filtered_companies or []),
                expires_at=to_storage(expires_at),
                created_at=to_storage(utc_now()),
            )
        )

    def delete_expired(self, now: datetime) -> int:
        """Delete entries that expired before ``now``.

        Returns:
            Number of rows deleted

        Raises:
            PersistenceError: If the delete fails
        """
        stmt = delete(CompanyFilterCacheModel).where(
            CompanyFilterCacheModel.expires_at < to_storage(now)
        )
        try:
            result = self.session.execute(stmt, execution_options={"synchronize_session": False})
            self.session.flush()
            return result.rowcount
        except SQLAlchemyError as e:
            logger.error(f"Error deleting expired cache entries: {e}", exc_info=True)
            raise PersistenceError(f"Failed to delete expired cache entries: {e}") from e


class GenerationRunRepository(_Repository):
    """Project-generation run records."""

    model = GenerationRunModel

    def add(
        self,
        started_at: datetime,
        status: str = "in_progress",
        course_id: Optional[str] = None,
    ) -> GenerationRunModel:
        """Insert a run record."""
        return self._insert(
            GenerationRunModel(
                course_id=course_id,
                status=status,
                started_at=to_storage(started_at),
            )
        )

    def fail_stale_runs(
        self,
        cutoff: datetime,
        completed_at: datetime,
        error_message: str,
        error_category: str = "timeout",
    ) -> List[str]:
        """Mark in-progress runs started before ``cutoff`` as failed.

        Args:
            cutoff: Runs with started_at strictly earlier are updated
            completed_at: Completion timestamp written to each updated run
            error_message: Explanation stored on each updated run
            error_category: Error category stored on each updated run

        Returns:
            IDs of the updated runs

        Raises:
            PersistenceError: If the query or update fails
        """
        # A run that finishes concurrently no longer matches the UPDATE and keeps its outcome
        stmt = (
            update(GenerationRunModel)
            .where(
                GenerationRunModel.status == "in_progress",
                GenerationRunModel.started_at < to_storage(cutoff),
            )
            .values(
                status="failed",
                error_message=error_message,
                error_category=error_category,
                completed_at=to_storage(completed_at),
            )
            .returning(GenerationRunModel.id)
        )
        try:
            result = self.session.execute(stmt, execution_options={"synchronize_session": False})
            updated_ids = list(result.scalars())
            self.session.flush()
            return updated_ids
        except SQLAlchemyError as e:
            logger.error(f"Error failing stale generation runs: {e}", exc_info=True)
            raise PersistenceError(f"Failed to update stale generation runs: {e}") from e

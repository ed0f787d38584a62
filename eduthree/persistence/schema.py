"""ORM models for the tables the maintenance job inspects.

Only the columns the cleanup predicates read or write, plus enough payload
columns to seed realistic rows, are mapped here. Timestamps are stored as
fixed-width ISO 8601 UTC strings (see eduthree.utils.timestamps), so the
``<`` comparisons in the repositories order them correctly.
"""

import logging
import uuid

from sqlalchemy import Column, ForeignKey, Index, Integer, String, Text, inspect
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base

logger = logging.getLogger(__name__)

Base = declarative_base()


def _new_id() -> str:
    return str(uuid.uuid4())


class ProjectModel(Base):
    """Generated project. Needs both a form row and a metadata row to be complete."""

    __tablename__ = "projects"

    id = Column(String(36), primary_key=True, default=_new_id)
    course_id = Column(String(36), nullable=True)
    title = Column(Text, nullable=False, default="")
    created_at = Column(String(50), nullable=True)


class ProjectFormModel(Base):
    """Form submission for a project. Parent reference is nulled when the project goes."""

    __tablename__ = "project_forms"

    id = Column(String(36), primary_key=True, default=_new_id)
    project_id = Column(
        String(36),
        ForeignKey("projects.id", ondelete="SET NULL"),
        nullable=True,
    )
    form_data = Column(Text, nullable=True)

    __table_args__ = (Index("idx_project_forms_project_id", "project_id"),)


class ProjectMetadataModel(Base):
    """Generation metadata for a project."""

    __tablename__ = "project_metadata"

    id = Column(String(36), primary_key=True, default=_new_id)
    project_id = Column(
        String(36),
        ForeignKey("projects.id", ondelete="SET NULL"),
        nullable=True,
    )
    algorithm_version = Column(String(50), nullable=True)
    created_at = Column(String(50), nullable=True)

    __table_args__ = (Index("idx_project_metadata_project_id", "project_id"),)


class GenerationQueueModel(Base):
    """Pending or failed project-generation request."""

    __tablename__ = "project_generation_queue"

    id = Column(String(36), primary_key=True, default=_new_id)
    course_id = Column(String(36), nullable=True)
    status = Column(String(20), nullable=False, default="pending")
    attempts = Column(Integer, nullable=False, default=0)
    last_error = Column(Text, nullable=True)
    last_error_at = Column(String(50), nullable=True)
    created_at = Column(String(50), nullable=True)

    __table_args__ = (Index("idx_generation_queue_status", "status", "last_error_at"),)


class CompanyFilterCacheModel(Base):
    """Cached company-filter result with an expiry."""

    __tablename__ = "company_filter_cache"

    id = Column(String(36), primary_key=True, default=_new_id)
    cache_key = Column(String(255), nullable=False, unique=True)
    course_id = Column(String(36), nullable=True)
    filtered_companies = Column(Text, nullable=True)
    expires_at = Column(String(50), nullable=False)
    created_at = Column(String(50), nullable=True)

    __table_args__ = (Index("idx_company_filter_cache_expires", "expires_at"),)


class GenerationRunModel(Base):
    """One execution of the project-generation pipeline."""

    __tablename__ = "generation_runs"

    id = Column(String(36), primary_key=True, default=_new_id)
    course_id = Column(String(36), nullable=True)
    status = Column(String(20), nullable=False, default="in_progress")
    started_at = Column(String(50), nullable=False)
    completed_at = Column(String(50), nullable=True)
    error_message = Column(Text, nullable=True)
    error_category = Column(String(50), nullable=True)

    __table_args__ = (Index("idx_generation_runs_status", "status", "started_at"),)


def create_schema(engine: Engine) -> None:
    """Create all tables and indexes if they don't exist (idempotent).

    Args:
        engine: SQLAlchemy engine instance
    """
    logger.info("Creating database schema if not exists")

    try:
        Base.metadata.create_all(engine, checkfirst=True)
        tables = inspect(engine).get_table_names()
        logger.info(f"Database schema ready. Tables: {', '.join(sorted(tables))}")
    except Exception as e:
        logger.error(f"Failed to create database schema: {e}", exc_info=True)
        raise

"""Database connection and session management.

Engine creation, schema bootstrap and the transactional session scope used
by every repository call.
"""

from contextlib import contextmanager
from pathlib import Path
from typing import Generator, Optional

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from eduthree.logging import get_logger

from .exceptions import DatabaseConnectionError

_engine: Optional[Engine] = None
_session_factory: Optional[sessionmaker] = None

logger = get_logger(__name__, component="database")


def init_database(database_url: str) -> None:
    """Initialise the engine, validate the connection and create the schema.

    Call once at startup. Calling again replaces the previous engine.

    Args:
        database_url: SQLAlchemy URL, e.g. "postgresql+psycopg://..." or
            "sqlite:///./data/eduthree.db"

    Raises:
        DatabaseConnectionError: If initialisation fails
    """
    global _engine, _session_factory

    if not database_url or not isinstance(database_url, str):
        raise DatabaseConnectionError("Database URL must be a non-empty string")

    logger.info(
        "Initializing database",
        extra={
            "event": "database.initializing",
            "database_url": redact_url(database_url),
        },
    )

    try:
        is_sqlite = database_url.startswith("sqlite")

        if is_sqlite:
            _ensure_sqlite_directory(database_url)

        if _engine is not None:
            _engine.dispose()

        engine_options = {"pool_pre_ping": True}
        if is_sqlite:
            engine_options["connect_args"] = {"check_same_thread": False, "timeout": 30}
            if _is_sqlite_memory(database_url):
                # One shared connection so every thread sees the same in-memory database
                engine_options["poolclass"] = StaticPool

        engine = create_engine(database_url, **engine_options)

        if is_sqlite:
            _configure_sqlite(engine)

        _validate_connection(engine)

        from .schema import create_schema

        create_schema(engine)

        _engine = engine
        _session_factory = sessionmaker(bind=engine, autoflush=True, expire_on_commit=False)

        logger.info(
            "Database initialized successfully",
            extra={
                "event": "database.initialized",
                "database_url": redact_url(database_url),
            },
        )

    except DatabaseConnectionError:
        raise
    except Exception as e:
        error_msg = f"Failed to initialize database: {e}"
        logger.error(error_msg, exc_info=True)
        raise DatabaseConnectionError(error_msg) from e


def _is_sqlite_memory(database_url: str) -> bool:
    database = make_url(database_url).database
    return not database or database == ":memory:"


def _ensure_sqlite_directory(database_url: str) -> None:
    if _is_sqlite_memory(database_url):
        return

    parent = Path(make_url(database_url).database).parent
    if not parent.exists():
        logger.info(f"Creating database directory: {parent}")
        parent.mkdir(parents=True, exist_ok=True)


def _configure_sqlite(engine: Engine) -> None:
    """Enable foreign keys so ON DELETE SET NULL behaves as on Postgres."""

    @event.listens_for(engine, "connect")
    def set_sqlite_pragma(dbapi_conn, connection_record):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def _validate_connection(engine: Engine) -> None:
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1")).fetchone()
        logger.debug("Database connection validated successfully")
    except Exception as e:
        raise DatabaseConnectionError(f"Failed to validate database connection: {e}") from e


def redact_url(url: str) -> str:
    """Hide the password of a database URL for logging.

    Args:
        url: Database connection URL

    Returns:
        URL with the password replaced by ***
    """
    try:
        return make_url(url).render_as_string(hide_password=True)
    except Exception:
        return "<unparseable database url>"


@contextmanager
def get_session() -> Generator[Session, None, None]:
    """Provide a session that commits on success and rolls back on error.

    Yields:
        Session: SQLAlchemy session for database operations

    Raises:
        DatabaseConnectionError: If init_database() has not been called

    Example:
        >>> with get_session() as session:
        ...     GenerationRunRepository(session).fail_stale_runs(cutoff, now, message)
    """
    if _session_factory is None:
        raise DatabaseConnectionError(
            "Database not initialized. Call init_database() before using get_session()"
        )

    session = _session_factory()
    try:
        yield session
        session.commit()
        logger.debug(
            "Database session committed",
            extra={"event": "database.session.committed"},
        )
    except Exception as e:
        session.rollback()
        logger.warning(
            f"Database session rolled back due to exception: {e}",
            extra={
                "event": "database.session.rolled_back",
                "error_type": type(e).__name__,
            },
        )
        raise
    finally:
        session.close()


def get_engine() -> Engine:
    """Get the initialised engine.

    Raises:
        DatabaseConnectionError: If init_database() has not been called
    """
    if _engine is None:
        raise DatabaseConnectionError(
            "Database not initialized. Call init_database() before using get_engine()"
        )

    return _engine


def is_initialized() -> bool:
    """Whether init_database() has completed."""
    return _session_factory is not None


def close_database() -> None:
    """Dispose of the engine and forget the session factory."""
    global _engine, _session_factory

    if _engine is not None:
        logger.info("Closing database connections")
        _engine.dispose()
        _engine = None
        _session_factory = None
        logger.info("Database connections closed")

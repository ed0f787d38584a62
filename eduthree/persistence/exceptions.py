"""Persistence layer exceptions.

All of them derive from PersistenceError. The cleanup job treats a
PersistenceError as a failure the store reported, and anything else as an
unexpected exception.
"""


class PersistenceError(Exception):
    """Base exception for all persistence layer errors."""

    pass


class DatabaseConnectionError(PersistenceError):
    """Raised when the store cannot be reached or has not been initialised.

    Examples:
    - Invalid or empty database URL
    - Driver missing for the URL's dialect
    - get_session() called before init_database()
    """

    pass


class DataIntegrityError(PersistenceError):
    """Raised when a write violates a constraint (unique key, foreign key, check)."""

    pass

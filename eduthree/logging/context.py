"""Scoped logging context backed by contextvars.

Fields pushed here (``run_id``, ``step``) are copied onto every log record
emitted inside the scope by the ContextualFilter in ``config.py``.
"""

from contextvars import ContextVar, Token
from typing import Any, Dict, Optional

_log_context: ContextVar[Dict[str, Any]] = ContextVar("eduthree_log_context", default={})


def get_log_context() -> Dict[str, Any]:
    """Return a copy of the active logging context."""
    return dict(_log_context.get())


def push_log_context(**fields: Any) -> Token:
    """Merge fields into the active context.

    Args:
        **fields: Key-value pairs to attach to subsequent log records

    Returns:
        Token for restoring the previous context with pop_log_context()
    """
    return _log_context.set({**_log_context.get(), **fields})


def pop_log_context(token: Token) -> None:
    """Restore the context captured by ``token``."""
    _log_context.reset(token)


def clear_log_context() -> None:
    """Drop all context fields. Intended for tests."""
    _log_context.set({})


class log_context:
    """Context manager that pushes fields on entry and restores on exit.

    Example:
        >>> with log_context(run_id="4f1c", step="Stale queue"):
        ...     logger.info("Deleting stale queue entries")
    """

    def __init__(self, **fields: Any):
        self.fields = fields
        self.token: Optional[Token] = None

    def __enter__(self):
        self.token = push_log_context(**self.fields)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self.token is not None:
            pop_log_context(self.token)
            self.token = None
        return False

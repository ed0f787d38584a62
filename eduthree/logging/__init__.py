"""Structured logging for the EduThree maintenance toolkit."""

import logging
from typing import Optional, Union


class ComponentLoggerAdapter(logging.LoggerAdapter):
    """LoggerAdapter that stamps a component name onto every record.

    Fields passed through ``extra`` at the call site win over the adapter's
    defaults.
    """

    def process(self, msg, kwargs):
        kwargs["extra"] = {**self.extra, **kwargs.get("extra", {})}
        return msg, kwargs


def get_logger(
    name: str, component: Optional[str] = None
) -> Union[logging.Logger, ComponentLoggerAdapter]:
    """Get a logger, optionally bound to a component label.

    Args:
        name: Logger name (typically __name__)
        component: Component identifier added to every record (e.g. "cleanup")

    Returns:
        Plain logger, or a ComponentLoggerAdapter when component is given

    Example:
        >>> logger = get_logger(__name__, component="cleanup")
        >>> logger.info("Cleanup started", extra={"event": "cleanup.run.started"})
    """
    logger = logging.getLogger(name)

    if component:
        return ComponentLoggerAdapter(logger, {"component": component})

    return logger


__all__ = ["get_logger", "ComponentLoggerAdapter"]

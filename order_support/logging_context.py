"""User ID logging context for tracing a session across modules.

Provides a user_id-aware logger that attaches the end user's identifier
to every log record, so a single participant's turns can be followed
through the state machine, the model client and the audit logger.

Usage:
    from order_support.logging_context import get_session_logger, set_user_id

    set_user_id("participant-17")
    logger = get_session_logger(__name__)
    logger.info("Handling turn")  # -> ... [participant-17] Handling turn
"""

import logging
from contextvars import ContextVar

_user_id: ContextVar[str] = ContextVar("user_id", default="-")

LOG_FORMAT = "%(asctime)s [%(name)s] %(levelname)s [%(user_id)s]: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def set_user_id(user_id: str) -> None:
    """Set the user identifier for the current async context."""
    _user_id.set(user_id)


def get_user_id() -> str:
    """Retrieve the current user identifier."""
    return _user_id.get()


class UserIdFilter(logging.Filter):
    """Injects user_id into every log record."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "user_id"):
            record.user_id = _user_id.get()  # type: ignore[attr-defined]
        return True


def get_session_logger(name: str) -> logging.Logger:
    """Return a logger with the UserIdFilter attached.

    The filter adds ``user_id`` to each record so formatters can
    include ``%(user_id)s`` in their format string.
    """
    logger = logging.getLogger(name)
    if not any(isinstance(f, UserIdFilter) for f in logger.filters):
        logger.addFilter(UserIdFilter())
    return logger


def configure_logging(level: str) -> None:
    """Install a root stream handler whose format carries the user id."""
    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    if any(getattr(h, "_order_support", False) for h in root.handlers):
        return
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    handler.addFilter(UserIdFilter())
    handler._order_support = True  # type: ignore[attr-defined]
    root.addHandler(handler)

"""Correlation ID logging context for tracing requests across modules.

Provides a request_id-aware filter that attaches a correlation ID to every
log record, so a single webhook delivery or HTTP request can be followed
from signature check through calendar insert and notification.

Usage:
    from healthassist.logging_context import get_request_logger, set_request_id

    set_request_id("evt_1Nv0...")
    logger = get_request_logger(__name__)
    logger.info("Processing webhook")  # -> [evt_1Nv0...] Processing webhook
"""

import logging
from contextvars import ContextVar, Token

_request_id: ContextVar[str] = ContextVar("request_id", default="-")


def set_request_id(request_id: str) -> Token:
    """Set the correlation ID for the current async context."""
    return _request_id.set(request_id)


def reset_request_id(token: Token) -> None:
    """Restore the correlation ID that was active before ``set_request_id``."""
    _request_id.reset(token)


def get_request_id() -> str:
    """Retrieve the current correlation ID."""
    return _request_id.get()


class RequestIdFilter(logging.Filter):
    """Injects request_id into every log record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = _request_id.get()  # type: ignore[attr-defined]
        return True


def get_request_logger(name: str) -> logging.Logger:
    """Return a logger with the RequestIdFilter attached.

    The filter adds ``request_id`` to each record so formatters can
    include ``%(request_id)s`` in their format string.
    """
    logger = logging.getLogger(name)
    if not any(isinstance(f, RequestIdFilter) for f in logger.filters):
        logger.addFilter(RequestIdFilter())
    return logger

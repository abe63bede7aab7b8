"""Propagate the request ID through the call stack using contextvars."""

import logging
from contextlib import contextmanager
from contextvars import ContextVar

_current_request_id: ContextVar[str | None] = ContextVar("current_request_id", default=None)


def get_request_id() -> str | None:
    """
    Get current request ID from context.

    Returns None outside of a request (startup, background work).
    """
    return _current_request_id.get()


def set_request_id(request_id: str) -> None:
    """
    Set current request ID in context.

    Called by RequestIDMiddleware at the start of every request.
    """
    _current_request_id.set(request_id)


def clear_request_id() -> None:
    """
    Clear request context.

    Must be called in finally block to prevent context leakage.
    """
    _current_request_id.set(None)


@contextmanager
def request_context(request_id: str):
    """
    Context manager for temporarily setting the request ID.

    Example:
        with request_context("abc-123"):
            logger.info("polling")  # record carries request_id=abc-123
    """
    previous = _current_request_id.get()
    set_request_id(request_id)
    try:
        yield
    finally:
        if previous is None:
            clear_request_id()
        else:
            set_request_id(previous)


class RequestIDLogFilter(logging.Filter):
    """Attach the current request ID to every log record as ``request_id``."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = get_request_id() or "-"
        return True

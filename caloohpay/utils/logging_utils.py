"""Structured logging helpers: per-rota context, redaction and call tracing."""

import functools
import logging
import threading
from contextlib import contextmanager
from typing import Any, Callable, Dict, Iterator

_state = threading.local()

# Parameter names containing any of these never have their value logged
SENSITIVE_KEY_PARTS = (
    "token",
    "key",
    "secret",
    "password",
    "authorization",
    "credential",
)

REDACTED = "***REDACTED***"


def get_log_context() -> Dict[str, Any]:
    """Return a copy of the fields bound by the enclosing log_context blocks."""
    return dict(getattr(_state, "fields", {}))


@contextmanager
def log_context(**fields: Any) -> Iterator[Dict[str, Any]]:
    """Bind structured fields to every record logged inside the block.

    Blocks nest: inner fields are added to (or override) the outer ones, and
    the outer fields are restored on exit, even when the block raises. The
    fields are copied onto records by ContextFilter, which configure_logging
    installs on every handler.

    Example:
        with log_context(rota_id="PQRSTUV"):
            logger.info("Fetching schedule")  # record carries rota_id
    """
    outer = get_log_context()
    _state.fields = {**outer, **fields}
    try:
        yield get_log_context()
    finally:
        _state.fields = outer


class ContextFilter(logging.Filter):
    """Copy the fields bound by log_context onto each record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.__dict__.update(get_log_context())
        return True


def _is_sensitive(key: Any) -> bool:
    name = str(key).lower()
    return any(part in name for part in SENSITIVE_KEY_PARTS)


def sanitize_sensitive_data(data: Any) -> Any:
    """
    Redact credentials from request parameters or headers before logging.

    Keys are matched case-insensitively against SENSITIVE_KEY_PARTS and
    nested dictionaries are handled recursively. A missing value (None) is
    left as None so the log does not claim a secret was present. The input
    is not modified.

    Example:
        >>> sanitize_sensitive_data({"api_token": "abc", "since": "2024-08-01"})
        {'api_token': '***REDACTED***', 'since': '2024-08-01'}
    """
    if not isinstance(data, dict):
        return data

    return {
        key: (
            (REDACTED if value is not None else None)
            if _is_sensitive(key)
            else sanitize_sensitive_data(value)
        )
        for key, value in data.items()
    }


def log_function_call(func: Callable) -> Callable:
    """Trace entry to and exit from func at DEBUG; log its exceptions as errors."""
    logger = logging.getLogger(func.__module__)

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        logger.debug(f"Entering {func.__name__}")
        try:
            result = func(*args, **kwargs)
        except Exception as e:
            logger.error(
                f"{func.__name__} failed: {type(e).__name__}: {e}", exc_info=True
            )
            raise
        logger.debug(f"Exiting {func.__name__}")
        return result

    return wrapper

"""
Helpers for turning exceptions into log records and client-facing messages.
"""

import logging


def _safe_str(obj) -> str:
    """
    Convert an object to string without ever raising.

    Args:
        obj: The object to convert

    Returns:
        ``str(obj)``, ``repr(obj)`` or a placeholder naming the type
    """
    try:
        return str(obj)
    except Exception:
        try:
            return repr(obj)
        except Exception:
            return f"<{type(obj).__name__} object (string conversion failed)>"


def format_exception_message(exception: Exception) -> str:
    """
    Format an exception for a plain text response body.

    httpx raises several exceptions (timeouts in particular) whose ``str()``
    is empty; in that case the type name is used so the client still gets a
    meaningful message. Exception groups list their members.

    Args:
        exception: The exception to format

    Returns:
        A non-empty description of the exception
    """
    if exception is None:
        return "None"

    message = _safe_str(exception)
    if not message:
        message = type(exception).__name__

    sub_exceptions = list(getattr(exception, "exceptions", None) or [])
    if sub_exceptions:
        parts = [
            f"{type(sub).__name__}: {_safe_str(sub)}" for sub in sub_exceptions
        ]
        return f"{message} (Sub-exceptions: {'; '.join(parts)})"
    return message


def log_exception_with_details(
    logger: logging.Logger,
    prefix: str,
    exception: Exception,
    level: int = logging.ERROR,
) -> None:
    """
    Log an exception with its traceback, one record per member for groups.

    Args:
        logger: The logger instance to use
        prefix: Prefix for the log message (e.g. "[Proxy]")
        exception: The exception to log
        level: The logging level to use (default: ERROR)
    """
    sub_exceptions = list(getattr(exception, "exceptions", None) or [])
    if not sub_exceptions:
        logger.log(
            level,
            f"{prefix} Exception: {format_exception_message(exception)}",
            exc_info=exception,
        )
        return

    logger.log(
        level,
        f"{prefix} Exception with {len(sub_exceptions)} sub-exceptions: "
        f"{_safe_str(exception)}",
    )
    for i, sub_exc in enumerate(sub_exceptions):
        logger.log(
            level,
            f"{prefix} Sub-exception {i+1}: {type(sub_exc).__name__}: {_safe_str(sub_exc)}",
            exc_info=sub_exc,
        )

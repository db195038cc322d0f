r"""Structured logging utilities for machine-readable log output.

The executors attach attempt-level fields (attempt number, wait time,
status code, outcome) to their log records. This module provides an
opt-in JSON formatter that renders those fields together with a
context-local correlation ID, which is handy when many checkout or
integration calls run concurrently and their log lines interleave.

Example:
    Enable structured logging for arebound:

    ```python
    import logging
    from arebound.utils.structured_logging import StructuredFormatter

    handler = logging.StreamHandler()
    handler.setFormatter(StructuredFormatter())

    logger = logging.getLogger("arebound")
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG)
    ```

    Tag all log lines of one incoming request:

    ```python
    from arebound import RequestDescriptor, execute
    from arebound.utils.structured_logging import clear_correlation_id, set_correlation_id

    set_correlation_id("checkout-123")
    try:
        body = execute(RequestDescriptor(url="https://api.example.com/v1/checkouts"))
    finally:
        clear_correlation_id()
    ```
"""

from __future__ import annotations

__all__ = [
    "StructuredFormatter",
    "clear_correlation_id",
    "get_correlation_id",
    "log_structured",
    "set_correlation_id",
]

import contextvars
import json
import logging
import time
from typing import Any

# Context variable, so each asyncio task and thread sees its own value
_correlation_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "arebound_correlation_id", default=None
)

# Attributes every LogRecord has; anything else was passed through ``extra``
_RESERVED_RECORD_ATTRS = frozenset(
    {
        "args",
        "asctime",
        "created",
        "exc_info",
        "exc_text",
        "filename",
        "funcName",
        "levelname",
        "levelno",
        "lineno",
        "message",
        "module",
        "msecs",
        "msg",
        "name",
        "pathname",
        "process",
        "processName",
        "relativeCreated",
        "stack_info",
        "taskName",
        "thread",
        "threadName",
    }
)


def get_correlation_id() -> str | None:
    """Get the correlation ID of the current context.

    Returns:
        The current correlation ID, or ``None`` if not set.

    Example:
        ```pycon
        >>> from arebound.utils.structured_logging import (
        ...     clear_correlation_id,
        ...     get_correlation_id,
        ...     set_correlation_id,
        ... )
        >>> set_correlation_id("req-123")
        >>> get_correlation_id()
        'req-123'
        >>> clear_correlation_id()
        >>> get_correlation_id() is None
        True

        ```
    """
    return _correlation_id.get()


def set_correlation_id(correlation_id: str) -> None:
    """Set the correlation ID of the current context.

    Args:
        correlation_id: The correlation ID to set (e.g., request ID, trace ID).
    """
    _correlation_id.set(correlation_id)


def clear_correlation_id() -> None:
    """Clear the correlation ID of the current context."""
    _correlation_id.set(None)


class StructuredFormatter(logging.Formatter):
    """JSON formatter for structured logging.

    Each record is rendered as one JSON object with the fields
    ``timestamp``, ``level``, ``logger``, ``message``, ``module``,
    ``function`` and ``line``, plus ``correlation_id`` when one is set,
    ``exception`` when the record carries exception info, and every field
    passed through the ``extra`` argument of the logging call.

    Example:
        ```pycon
        >>> import json
        >>> import logging
        >>> from io import StringIO
        >>> from arebound.utils.structured_logging import StructuredFormatter
        >>> stream = StringIO()
        >>> handler = logging.StreamHandler(stream)
        >>> handler.setFormatter(StructuredFormatter())
        >>> logger = logging.getLogger("doctest_structured_formatter")
        >>> logger.addHandler(handler)
        >>> logger.setLevel(logging.INFO)
        >>> logger.info("attempt failed", extra={"attempt": 2})
        >>> json.loads(stream.getvalue())["attempt"]
        2

        ```
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        correlation_id = get_correlation_id()
        if correlation_id is not None:
            log_data["correlation_id"] = correlation_id

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        for key, value in record.__dict__.items():
            if key not in _RESERVED_RECORD_ATTRS:
                log_data[key] = value

        return json.dumps(log_data, default=str)

    def formatTime(self, record: logging.LogRecord, datefmt: str | None = None) -> str:  # noqa: N802
        """Format the record timestamp as ISO 8601 UTC with milliseconds.

        Args:
            record: The log record.
            datefmt: Ignored, the output is always ISO 8601.

        Returns:
            The formatted timestamp.
        """
        return (
            time.strftime("%Y-%m-%dT%H:%M:%S", time.gmtime(record.created))
            + f".{int(record.msecs):03d}Z"
        )


def log_structured(
    logger: logging.Logger,
    level: int,
    message: str,
    **extra: Any,
) -> None:
    """Log a message with structured fields.

    The fields are attached to the log record and rendered by
    ``StructuredFormatter``; plain formatters simply ignore them.

    Args:
        logger: Logger to use.
        level: Log level (e.g., ``logging.DEBUG``).
        message: Log message.
        **extra: Structured fields to attach to the record.

    Example:
        ```pycon
        >>> import logging
        >>> from arebound.utils.structured_logging import log_structured
        >>> log_structured(
        ...     logging.getLogger("doctest_log_structured"),
        ...     logging.DEBUG,
        ...     "waiting before retry",
        ...     attempt=1,
        ...     wait_time=1.5,
        ... )

        ```
    """
    if logger.isEnabledFor(level):
        logger.log(level, message, extra=extra, stacklevel=2)

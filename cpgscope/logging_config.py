"""Structured logging configuration for cpgscope.

Provides:
- ``get_logger``: module-level loggers under the ``cpgscope`` namespace
- ``configure_logging``: human-readable or JSON output to stderr and/or a file
- ``LogContext``: context manager adding fields to every record emitted inside it
- ``log_operation``: decorator that logs start, completion and duration

Context is stored in a ``contextvars.ContextVar`` so concurrent callers
analysing different snapshots never see each other's fields.

Example:
    >>> configure_logging(level="DEBUG", json_output=True)
    >>> logger = get_logger(__name__)
    >>> with LogContext(operation="pagerank", node_count=120):
    ...     logger.info("Converged", extra={"iterations": 14})
"""

import contextvars
import functools
import json
import logging
import sys
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Dict, Optional, TypeVar, Union

ROOT_LOGGER_NAME = "cpgscope"

_log_context: contextvars.ContextVar[Dict[str, Any]] = contextvars.ContextVar(
    "cpgscope_log_context", default={}
)

# Attributes every LogRecord carries; anything else came from ``extra``
_RESERVED_ATTRS = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", None, None)).keys()
) | {"message", "asctime", "context"}

F = TypeVar("F", bound=Callable[..., Any])


def get_logger(name: str) -> logging.Logger:
    """Get a logger, nesting it under the ``cpgscope`` namespace if needed."""
    if name != ROOT_LOGGER_NAME and not name.startswith(ROOT_LOGGER_NAME + "."):
        name = f"{ROOT_LOGGER_NAME}.{name}"
    return logging.getLogger(name)


def set_context(**fields: Any) -> contextvars.Token:
    """Merge fields into the current log context."""
    merged = {**_log_context.get(), **fields}
    return _log_context.set(merged)


def clear_context() -> None:
    """Drop all context fields."""
    _log_context.set({})


def get_context() -> Dict[str, Any]:
    """Return a copy of the current log context."""
    return dict(_log_context.get())


class LogContext:
    """Context manager that attaches fields to all records logged inside it."""

    def __init__(self, **fields: Any):
        self.fields = fields
        self._token: Optional[contextvars.Token] = None

    def __enter__(self) -> "LogContext":
        self._token = set_context(**self.fields)
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if self._token is not None:
            _log_context.reset(self._token)
            self._token = None


class ContextFilter(logging.Filter):
    """Copy the active log context onto each record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.context = get_context()
        return True


def _extra_fields(record: logging.LogRecord) -> Dict[str, Any]:
    fields = dict(getattr(record, "context", {}) or {})
    for key, value in record.__dict__.items():
        if key not in _RESERVED_ATTRS and not key.startswith("_"):
            fields[key] = value
    return fields


class HumanFormatter(logging.Formatter):
    """Readable single-line output with trailing key=value pairs."""

    def __init__(self) -> None:
        super().__init__("%(asctime)s %(levelname)-8s %(name)s: %(message)s")

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        fields = _extra_fields(record)
        if fields:
            line += " " + " ".join(f"{k}={v}" for k, v in sorted(fields.items()))
        return line


class JSONFormatter(logging.Formatter):
    """One JSON object per line for log aggregation."""

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        payload.update(_extra_fields(record))
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


def configure_logging(
    level: str = "INFO",
    json_output: bool = False,
    log_file: Optional[Union[str, Path]] = None,
) -> logging.Logger:
    """Configure the ``cpgscope`` logger hierarchy.

    Safe to call repeatedly; previously installed handlers are replaced.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_output: Emit JSON lines instead of human-readable text
        log_file: Optional file path to also write logs to

    Returns:
        The configured root ``cpgscope`` logger
    """
    root = logging.getLogger(ROOT_LOGGER_NAME)
    root.setLevel(level.upper())
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()

    formatter: logging.Formatter = JSONFormatter() if json_output else HumanFormatter()

    stream_handler = logging.StreamHandler(sys.stderr)
    stream_handler.setFormatter(formatter)
    stream_handler.addFilter(ContextFilter())
    root.addHandler(stream_handler)

    if log_file:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(path)
        file_handler.setFormatter(formatter)
        file_handler.addFilter(ContextFilter())
        root.addHandler(file_handler)

    root.propagate = False
    return root


def log_operation(operation: str) -> Callable[[F], F]:
    """Decorator logging start/completion/duration of ``operation``."""

    def decorator(func: F) -> F:
        op_logger = get_logger(func.__module__)

        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            start = time.perf_counter()
            with LogContext(operation=operation):
                op_logger.debug(f"Starting {operation}")
                try:
                    result = func(*args, **kwargs)
                except Exception:
                    op_logger.debug(
                        f"Failed {operation}",
                        extra={"duration_seconds": round(time.perf_counter() - start, 4)},
                    )
                    raise
                op_logger.debug(
                    f"Completed {operation}",
                    extra={"duration_seconds": round(time.perf_counter() - start, 4)},
                )
                return result

        return wrapper  # type: ignore[return-value]

    return decorator

"""Structured logging for RecipeBox.

Two formatters share one notion of log context:

- ``JsonFormatter``: one orjson object per line, for non-dev environments
- ``ConsoleFormatter``: a single readable line, coloured on a TTY

Request and correlation ids live in context variables set by
``CorrelationMiddleware`` (or ``LogContext`` outside HTTP) and are attached to
every record emitted while they are set.

Usage:
    from recipebox.observability.logging import configure_logging

    configure_logging(json_format=True, level="INFO")
    logging.getLogger(__name__).info("Request to store")
"""

from __future__ import annotations

import contextvars
import logging
import sys
from datetime import UTC, datetime
from typing import Any

import orjson

request_id_var: contextvars.ContextVar[str] = contextvars.ContextVar("request_id", default="")
correlation_id_var: contextvars.ContextVar[str] = contextvars.ContextVar(
    "correlation_id", default=""
)

_CONTEXT_VARS: dict[str, contextvars.ContextVar[str]] = {
    "request_id": request_id_var,
    "correlation_id": correlation_id_var,
}

# Attributes every LogRecord has; anything else came in through ``extra=``
_RESERVED = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime", "taskName"}

_NOISY_LOGGERS = {
    "uvicorn.access": logging.WARNING,
    "sqlalchemy.engine": logging.WARNING,
    "httpx": logging.WARNING,
}


def current_context() -> dict[str, str]:
    """Context ids that are set for the running task."""
    return {name: var.get() for name, var in _CONTEXT_VARS.items() if var.get()}


def record_extras(record: logging.LogRecord) -> dict[str, Any]:
    """Fields passed through ``extra=`` on the logging call."""
    return {
        key: value
        for key, value in record.__dict__.items()
        if key not in _RESERVED and not key.startswith("_")
    }


class JsonFormatter(logging.Formatter):
    """Render a record as a single JSON object.

    Example line::

        {"timestamp":"2026-01-10T12:34:56.789012Z","level":"INFO",
         "logger":"recipebox.coordinator","message":"Request to Redis",
         "module":"coordinator","function":"list_all","line":87,
         "request_id":"abc-123","correlation_id":"abc-123"}

    Extra values that orjson cannot encode are rendered with ``str``.
    """

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, UTC),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
            **current_context(),
            **record_extras(record),
        }
        if record.exc_info and record.exc_info[0] is not None:
            exc_type, exc_value, _ = record.exc_info
            payload["exception"] = {
                "type": exc_type.__name__,
                "message": str(exc_value),
                "traceback": self.formatException(record.exc_info),
            }
        return orjson.dumps(
            payload, default=str, option=orjson.OPT_UTC_Z | orjson.OPT_NON_STR_KEYS
        ).decode()


class ConsoleFormatter(logging.Formatter):
    """One line per record for local development.

    ``12:34:56 INFO     recipebox.coordinator  Request to Redis  [req=abc12345]``
    """

    LEVEL_COLORS = {
        logging.DEBUG: "\033[36m",
        logging.INFO: "\033[32m",
        logging.WARNING: "\033[33m",
        logging.ERROR: "\033[31m",
        logging.CRITICAL: "\033[35m",
    }
    RESET = "\033[0m"

    def __init__(self, use_colors: bool = True) -> None:
        super().__init__()
        self.use_colors = use_colors and sys.stderr.isatty()

    def format(self, record: logging.LogRecord) -> str:
        level = f"{record.levelname:8}"
        if self.use_colors:
            level = f"{self.LEVEL_COLORS.get(record.levelno, '')}{level}{self.RESET}"

        line = (
            f"{datetime.fromtimestamp(record.created):%H:%M:%S} {level} "
            f"{record.name}  {record.getMessage()}"
        )
        request_id = request_id_var.get()
        if request_id:
            line += f"  [req={request_id[:8]}]"
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


def configure_logging(
    json_format: bool = True,
    level: str = "INFO",
    use_colors: bool = True,
) -> None:
    """Install a single stderr handler on the root logger.

    Existing root handlers are replaced, so call this once at startup.
    """
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(JsonFormatter() if json_format else ConsoleFormatter(use_colors))

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level.upper())

    for name, noisy_level in _NOISY_LOGGERS.items():
        logging.getLogger(name).setLevel(noisy_level)


class LogContext:
    """Temporarily set context ids outside of an HTTP request.

    Usage:
        with LogContext(request_id="seed"):
            logger.info("Seeding recipes")
    """

    def __init__(self, **ids: str) -> None:
        unknown = set(ids) - set(_CONTEXT_VARS)
        if unknown:
            raise TypeError(f"Unknown log context fields: {sorted(unknown)}")
        self.ids = ids
        self._tokens: list[tuple[contextvars.ContextVar[str], contextvars.Token[str]]] = []

    def __enter__(self) -> LogContext:
        for name, value in self.ids.items():
            var = _CONTEXT_VARS[name]
            self._tokens.append((var, var.set(value)))
        return self

    def __exit__(self, *exc: object) -> None:
        while self._tokens:
            var, token = self._tokens.pop()
            var.reset(token)

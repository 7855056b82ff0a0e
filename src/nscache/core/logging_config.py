"""
Structured Logging Configuration

structlog events are handed to the stdlib ``nscache`` logger, so cache events
and the storage layer's plain logging records share one handler. In JSON mode
the event fields become top-level keys of python-json-logger output.
"""

import logging
import sys
from typing import Any

import structlog
from pythonjsonlogger import jsonlogger

LIBRARY_LOGGER = "nscache"
PLAIN_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
JSON_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"

# Silent until the application configures logging
logging.getLogger(LIBRARY_LOGGER).addHandler(logging.NullHandler())


def _build_handler(json_logs: bool) -> logging.Handler:
    handler = logging.StreamHandler(sys.stderr)
    if json_logs:
        handler.setFormatter(
            jsonlogger.JsonFormatter(JSON_FORMAT, rename_fields={"asctime": "timestamp", "levelname": "level"})
        )
    else:
        handler.setFormatter(logging.Formatter(PLAIN_FORMAT))
    return handler


def configure_logging(level: str = "INFO", json_logs: bool = False) -> None:
    """
    Configure structured logging for the cache library.

    Only the ``nscache`` logger tree gets a handler; the root logger is left
    to the application.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_logs: Emit one JSON object per event
    """
    library_logger = logging.getLogger(LIBRARY_LOGGER)
    library_logger.handlers = [_build_handler(json_logs)]
    library_logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    library_logger.propagate = False

    if json_logs:
        # Fields go to LogRecord extras, JsonFormatter serializes them
        renderer: list[Any] = [structlog.stdlib.render_to_log_kwargs]
    else:
        renderer = [structlog.dev.ConsoleRenderer(colors=False)]

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            *renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """
    Structured logger for a module (pass ``__name__``).

    Events always go to the stdlib logger of that name, never straight to
    stdout, even when structlog has not been configured.
    """
    return structlog.wrap_logger(logging.getLogger(name), wrapper_class=structlog.stdlib.BoundLogger)


class LogContext:
    """Bind key/value pairs to every log event emitted in scope."""

    def __init__(self, **kwargs: Any):
        self.context = kwargs

    def __enter__(self) -> "LogContext":
        structlog.contextvars.bind_contextvars(**self.context)
        return self

    def __exit__(self, *args: Any) -> None:
        structlog.contextvars.unbind_contextvars(*self.context.keys())

"""Logging configuration for todo-api.

Supports two logging formats:
- JSON logging (production): Structured logs for log aggregation systems
- Standard logging (development): Human-readable logs with stacktraces

Configure via TODO_API_LOG_FORMAT_JSON environment variable (default: True).
"""

import logging
import sys
from contextvars import ContextVar

from pythonjsonlogger.json import JsonFormatter

from todo_api.config import settings

# Context variable for request ID (set by RequestIDMiddleware)
request_id_context: ContextVar[str | None] = ContextVar("request_id", default=None)

# Attributes every LogRecord carries; anything else came in through `extra`
_RECORD_ATTRS = frozenset(
    logging.LogRecord("", logging.NOTSET, "", 0, "", (), None).__dict__
) | {"message", "asctime", "request_id", "service", "taskName"}


class RequestContextFilter(logging.Filter):
    """Stamp request_id and service name onto every log record."""

    def __init__(self, service: str | None = None) -> None:
        super().__init__()
        self.service = service or settings.app_name

    def filter(self, record: logging.LogRecord) -> bool:
        """Add request context to the record.

        Args:
            record: Log record to modify

        Returns:
            True (always pass through)
        """
        record.request_id = request_id_context.get()
        record.service = self.service
        return True


class CustomJsonFormatter(JsonFormatter):
    """JSON formatter with stable top-level field names.

    `extra` fields passed to the logging call end up as top-level keys.
    """

    def add_fields(
        self,
        log_record: dict[str, object],
        record: logging.LogRecord,
        message_dict: dict[str, object],
    ) -> None:
        super().add_fields(log_record, record, message_dict)

        log_record["timestamp"] = self.formatTime(record, self.datefmt)
        log_record["level"] = record.levelname
        log_record["logger"] = record.name
        log_record["message"] = record.getMessage()

        for field in ("service", "request_id"):
            value = getattr(record, field, None)
            if value:
                log_record[field] = value

        if record.exc_info:
            log_record["exception"] = self.formatException(record.exc_info)

        log_record.update({
            key: value
            for key, value in record.__dict__.items()
            if key not in _RECORD_ATTRS and not key.startswith("_")
        })


def build_formatter(*, json_format: bool) -> logging.Formatter:
    if json_format:
        return CustomJsonFormatter(
            "%(timestamp)s %(level)s %(logger)s %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    return logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - [%(request_id)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def setup_logger(
    logger: logging.Logger, log_level: str | None = None
) -> logging.Logger:
    """Attach a single stdout handler with the configured format to logger."""
    logger.handlers.clear()
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(build_formatter(json_format=settings.log_format_json))
    handler.addFilter(RequestContextFilter())
    logger.addHandler(handler)
    logger.setLevel(log_level or settings.log_level)
    # Prevent log messages from being propagated to the root logger and duplicated
    logger.propagate = False
    return logger


def setup_logging() -> logging.Logger:
    """Configure the root logger and return the application logger.

    Loggers listed in TODO_API_LOG_EXCLUDE_LOGGERS (comma-separated) are capped
    at WARNING so a DEBUG root level does not drown the output in SQL echo or
    access log lines.

    Returns:
        The "todo_api" logger
    """
    setup_logger(logging.getLogger())

    for name in settings.log_exclude_loggers.split(","):
        if name.strip():
            logging.getLogger(name.strip()).setLevel(logging.WARNING)

    return logging.getLogger("todo_api")


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance for a specific module.

    Args:
        name: Logger name (usually __name__)

    Returns:
        Logger inheriting the root handler configuration
    """
    return logging.getLogger(name)

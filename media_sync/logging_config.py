"""Structured logging configuration for Media Sync.

JSON lines go to a rotating file (logs/media_sync.log, 10MB x 5) and a
plain-text copy goes to stdout. Context passed to ``log_with_context`` ends
up as top-level keys in the JSON record, so poll and command events can be
filtered by ``event_type`` or ``session_id``.
"""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any

from pythonjsonlogger import jsonlogger

LOG_FILE_NAME = "media_sync.log"
DEFAULT_LOG_DIR = Path(__file__).parent.parent / "logs"

# Chatty per-request loggers; the poll cycle makes several requests a second
QUIET_LOGGERS = ("httpx", "httpcore", "uvicorn.access", "PIL")

# LogRecord attributes that extra= may not overwrite
_RESERVED_ATTRS = frozenset(logging.makeLogRecord({}).__dict__) | {"message", "asctime"}


class ServiceFilter(logging.Filter):
    """Stamp every record with the service name for shared log sinks."""

    def __init__(self, service: str = "media-sync"):
        super().__init__()
        self.service = service

    def filter(self, record: logging.LogRecord) -> bool:
        record.service = self.service
        return True


def setup_logging(log_level: str = "INFO", log_dir: Path | None = None) -> logging.Logger:
    """Configure JSON file logging plus console logging on the root logger.

    Calling it again replaces the handlers rather than stacking new ones.

    Args:
        log_level: Logging level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_dir: Directory for the rotating JSON log (defaults to <repo>/logs)

    Returns:
        Configured root logger instance
    """
    level = logging.getLevelName(log_level.upper())
    log_dir = log_dir or DEFAULT_LOG_DIR
    log_dir.mkdir(parents=True, exist_ok=True)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
        handler.close()

    service_filter = ServiceFilter()

    file_handler = RotatingFileHandler(
        log_dir / LOG_FILE_NAME,
        maxBytes=10 * 1024 * 1024,
        backupCount=5,
        encoding="utf-8",
    )
    file_handler.setFormatter(
        jsonlogger.JsonFormatter(
            "%(asctime)s %(service)s %(name)s %(levelname)s %(message)s",
            rename_fields={"levelname": "level", "name": "logger"},
            timestamp=True,
        )
    )
    file_handler.setLevel(logging.DEBUG)
    file_handler.addFilter(service_filter)
    root_logger.addHandler(file_handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(
        logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%H:%M:%S",
        )
    )
    console_handler.setLevel(level)
    console_handler.addFilter(service_filter)
    root_logger.addHandler(console_handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    return root_logger


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def log_with_context(
    logger: logging.Logger,
    level: str,
    message: str,
    **extra_fields: Any,
) -> None:
    """Log a message with additional structured context fields.

    Keys that collide with LogRecord attributes (``name``, ``filename``...)
    are prefixed with ``ctx_`` instead of making the logging call fail.

    Args:
        logger: Logger instance
        level: Log level (debug, info, warning, error, critical)
        message: Log message
        **extra_fields: Context for the JSON record (e.g. session_id, event_type)
    """
    extra = {f"ctx_{key}" if key in _RESERVED_ATTRS else key: value for key, value in extra_fields.items()}
    getattr(logger, level.lower())(message, extra=extra)

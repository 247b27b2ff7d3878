"""Structured logging utilities."""

import json
import logging
import logging.handlers
import sys
from contextvars import ContextVar, Token
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

PACKAGE_LOGGER = "multipart_checksum"


class StructuredFormatter(logging.Formatter):
    """JSON formatter; fields passed as ``extra={"extra_fields": {...}}`` are merged in."""

    def format(self, record: logging.LogRecord) -> str:
        log_data: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "function": record.funcName,
            "line": record.lineno,
        }

        if record.exc_info:
            log_data["exception"] = {
                "type": record.exc_info[0].__name__,
                "message": str(record.exc_info[1]),
                "traceback": self.formatException(record.exc_info),
            }

        log_data.update(getattr(record, "context_fields", None) or {})
        log_data.update(getattr(record, "extra_fields", None) or {})

        return json.dumps(log_data, default=str)


class DetailedFormatter(logging.Formatter):
    """Human-readable formatter with source location."""

    def __init__(self) -> None:
        super().__init__(
            fmt="%(asctime)s | %(levelname)-8s | %(name)s:%(funcName)s:%(lineno)d | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )


class SimpleFormatter(logging.Formatter):
    """Short formatter for console output."""

    def __init__(self) -> None:
        super().__init__(fmt="%(levelname)-8s | %(name)s | %(message)s")


_FORMATTERS = {
    "json": StructuredFormatter,
    "detailed": DetailedFormatter,
    "simple": SimpleFormatter,
}


def setup_logging(
    level: str = "INFO",
    format: str = "simple",
    log_file: Optional[Path] = None,
    max_file_size_mb: int = 10,
    backup_count: int = 5,
) -> logging.Logger:
    """Configure the package logger.

    Console output goes to stderr so stdout stays reserved for checksums.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        format: Console format (simple, detailed, json)
        log_file: Optional rotating log file, always written as JSON
        max_file_size_mb: Max log file size in MB
        backup_count: Number of rotated files to keep

    Returns:
        The configured package logger
    """
    if format not in _FORMATTERS:
        raise ValueError(f"Unknown log format: {format}")

    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(getattr(logging, level.upper()))
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(_FORMATTERS[format]())
    logger.addHandler(console_handler)

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=max_file_size_mb * 1024 * 1024,
            backupCount=backup_count,
            encoding="utf-8",
        )
        file_handler.setFormatter(StructuredFormatter())
        logger.addHandler(file_handler)

    return logger


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


_context_fields: ContextVar[Dict[str, Any]] = ContextVar("log_context_fields", default={})
_factory_installed = False


def _install_record_factory() -> None:
    """Wrap the current record factory once so records pick up LogContext fields."""
    global _factory_installed
    if _factory_installed:
        return
    base_factory = logging.getLogRecordFactory()

    def record_factory(*args: Any, **kwargs: Any) -> logging.LogRecord:
        record = base_factory(*args, **kwargs)
        fields = _context_fields.get()
        if fields:
            record.context_fields = fields
        return record

    logging.setLogRecordFactory(record_factory)
    _factory_installed = True


class LogContext:
    """Context manager adding structured fields to every record emitted inside it.

    Fields live in a ContextVar, so concurrent asyncio tasks each see their own
    fields. Nested contexts merge with the enclosing one. Fields are stored
    apart from per-call ``extra_fields`` so both can be used together.
    """

    def __init__(self, **fields: Any) -> None:
        self.fields = fields
        self._token: Optional[Token] = None

    def __enter__(self) -> "LogContext":
        _install_record_factory()
        self._token = _context_fields.set({**_context_fields.get(), **self.fields})
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        _context_fields.reset(self._token)

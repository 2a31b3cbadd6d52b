"""Structured logging utilities."""

import logging
import logging.handlers
import json
import sys
import threading
from typing import Any, Dict, Optional, Set
from datetime import datetime, timezone
from pathlib import Path


class StructuredFormatter(logging.Formatter):
    """JSON formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        log_data: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "thread": record.threadName,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        if record.exc_info:
            log_data["exception"] = {
                "type": record.exc_info[0].__name__,
                "message": str(record.exc_info[1]),
                "traceback": self.formatException(record.exc_info),
            }

        # Job-wide fields from LogContext, then per-call extra={"extra_fields": {...}}
        if hasattr(record, "context_fields"):
            log_data.update(record.context_fields)
        if hasattr(record, "extra_fields"):
            log_data.update(record.extra_fields)

        return json.dumps(log_data, default=str)


class DetailedFormatter(logging.Formatter):
    """Human-readable detailed formatter."""

    def __init__(self) -> None:
        fmt = (
            "%(asctime)s | %(levelname)-8s | %(threadName)s | "
            "%(name)s:%(funcName)s:%(lineno)d | %(message)s"
        )
        super().__init__(fmt=fmt, datefmt="%Y-%m-%d %H:%M:%S")


class SimpleFormatter(logging.Formatter):
    """Simple formatter for console output."""

    def __init__(self) -> None:
        fmt = "%(levelname)-8s | %(name)s | %(message)s"
        super().__init__(fmt=fmt)


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
) -> None:
    """Configure the root logger.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        format: Console format type (simple, detailed, json)
        log_file: Optional log file path, always written as JSON
        max_file_size_mb: Max log file size in MB before rotation
        backup_count: Number of rotated files to keep
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper()))
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stderr)
    formatter_class = _FORMATTERS.get(format, SimpleFormatter)
    console_handler.setFormatter(formatter_class())
    root_logger.addHandler(console_handler)

    if log_file:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=max_file_size_mb * 1024 * 1024,
            backupCount=backup_count,
        )
        file_handler.setFormatter(StructuredFormatter())
        root_logger.addHandler(file_handler)


def get_logger(name: str) -> logging.Logger:
    """Get logger with structured logging support."""
    return logging.getLogger(name)


_factory_lock = threading.Lock()


class LogContext:
    """Context manager that adds structured fields to records logged inside it.

    Fields apply to records from the entering thread and from threads that
    call bind_current_thread(). Nested contexts merge their fields, inner
    values winning. Fields are stored on ``context_fields`` so they never
    collide with per-call extras.
    """

    def __init__(self, logger: logging.Logger, **fields: Any) -> None:
        self.logger = logger
        self.fields = fields
        self.old_factory = None
        self._factory = None
        self._thread_ids: Set[int] = set()
        self._active = False

    def bind_current_thread(self) -> None:
        """Apply this context to records logged by the calling thread."""
        self._thread_ids.add(threading.get_ident())

    def __enter__(self) -> "LogContext":
        self.bind_current_thread()
        self._active = True

        with _factory_lock:
            old_factory = logging.getLogRecordFactory()

            def record_factory(*args: Any, **kwargs: Any) -> logging.LogRecord:
                record = old_factory(*args, **kwargs)
                if self._active and threading.get_ident() in self._thread_ids:
                    record.context_fields = {**getattr(record, "context_fields", {}), **self.fields}
                return record

            self.old_factory = old_factory
            self._factory = record_factory
            logging.setLogRecordFactory(record_factory)
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self._active = False
        with _factory_lock:
            # Contexts exited out of order stay installed as pass-through
            if logging.getLogRecordFactory() is self._factory:
                logging.setLogRecordFactory(self.old_factory)

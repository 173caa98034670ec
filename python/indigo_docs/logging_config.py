"""
Logging configuration for the Indigo Docs tool server.

In stdio mode stdout carries the MCP JSON-RPC stream, so nothing may be
printed there. Logs go to a daily file under ~/.indigo-docs/logs/ and,
optionally (HTTP mode), to stderr as well.

Modules log through ``logging.getLogger("indigo_docs.<area>")``; everything
propagates to the package logger configured here.
"""

import logging
import logging.handlers
import sys
from datetime import date
from pathlib import Path
from typing import Optional

from .config import default_data_dir

LOGGER_NAME = "indigo_docs"

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s:%(funcName)s:%(lineno)d | %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Daily files kept by the rotating handler
LOG_RETENTION_DAYS = 14


class FlushingHandler(logging.handlers.TimedRotatingFileHandler):
    """Daily rotating file handler that flushes every record."""

    def emit(self, record):
        super().emit(record)
        self.flush()


def _is_stderr_handler(handler: logging.Handler) -> bool:
    return type(handler) is logging.StreamHandler and handler.stream is sys.stderr


def _make_file_handler(log_dir: Path, retention_days: int) -> FlushingHandler:
    log_dir.mkdir(parents=True, exist_ok=True)
    log_path = log_dir / f"indigo-docs-{date.today().isoformat()}.log"
    return FlushingHandler(
        log_path,
        when="midnight",
        backupCount=retention_days,
        encoding="utf-8",
    )


def setup_logging(
    log_dir: Optional[Path] = None,
    level: int = logging.INFO,
    backup_count: int = LOG_RETENTION_DAYS,
    console: bool = False,
) -> logging.Logger:
    """
    Configure the package logger (file always, stderr on request).

    Safe to call repeatedly: a handler kind that is already attached is not
    added again, so the HTTP entry point can enable console output after the
    server module configured the file handler.

    Args:
        log_dir: Directory for log files (default: <data dir>/logs)
        level: Logging level (default: INFO)
        backup_count: Number of daily files to keep
        console: Also log to stderr (never in stdio mode)

    Returns:
        The package logger
    """
    package_logger = logging.getLogger(LOGGER_NAME)
    package_logger.setLevel(level)
    formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

    if not any(isinstance(h, FlushingHandler) for h in package_logger.handlers):
        handler = _make_file_handler(log_dir or default_data_dir() / "logs", backup_count)
        handler.setFormatter(formatter)
        package_logger.addHandler(handler)
        package_logger.info(
            f"Indigo Docs logging to {handler.baseFilename} "
            f"(level {logging.getLevelName(level)})"
        )

    if console and not any(_is_stderr_handler(h) for h in package_logger.handlers):
        stderr_handler = logging.StreamHandler(sys.stderr)
        stderr_handler.setFormatter(formatter)
        package_logger.addHandler(stderr_handler)

    return package_logger

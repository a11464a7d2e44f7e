"""Logging setup helpers for compliancesim.

The library never configures logging on import: the ``compliancesim``
logger only carries a NullHandler until one of the ``enable_*`` helpers is
called. Engine modules log per-decision and per-message detail at DEBUG and
period summaries at INFO.

Example usage:
    import compliancesim

    # Human-readable output on stderr
    compliancesim.enable_console_logging(level="DEBUG")

    # Size-capped log files for long population runs
    compliancesim.enable_file_logging("runs/compliance.log", max_bytes=5_000_000)

    # One JSON object per line, for log shippers
    compliancesim.enable_json_logging()

    # Let the shell decide
    compliancesim.configure_from_env()

Environment variables:
    CS_LOGGING: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    CS_LOG_FILE: Path of a rotating log file
    CS_LOG_JSON: "1" switches the output to JSON lines
"""

from __future__ import annotations

import json
import logging
import os
from datetime import UTC, datetime
from logging.handlers import RotatingFileHandler, TimedRotatingFileHandler
from pathlib import Path
from typing import Literal

__all__ = [
    "configure_from_env",
    "disable_logging",
    "enable_console_logging",
    "enable_file_logging",
    "enable_json_file_logging",
    "enable_json_logging",
    "enable_timed_file_logging",
    "set_level",
    "set_module_level",
]

DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DEFAULT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

DEFAULT_MAX_BYTES = 10 * 1024 * 1024
DEFAULT_BACKUP_COUNT = 5

LOGGER_NAME = "compliancesim"

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class JsonFormatter(logging.Formatter):
    """Render each record as a single-line JSON object.

    Example output:
        {"timestamp": "2026-03-02T09:15:00.120000+00:00", "level": "INFO",
         "logger": "compliancesim.behavior.environment",
         "message": "Period 2026-03-02 statute tax-1: 41/100 complied"}
    """

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        if hasattr(record, "extra"):
            payload["extra"] = record.extra
        return json.dumps(payload)


def _get_level(level: str | int) -> int:
    """Map a level name (any case) or number to a logging constant."""
    if isinstance(level, int):
        return level
    return getattr(logging, level.upper(), logging.INFO)


def _get_logger() -> logging.Logger:
    return logging.getLogger(LOGGER_NAME)


def _clear_handlers() -> None:
    """Detach and close every non-null handler on the package logger."""
    logger = _get_logger()
    for handler in logger.handlers[:]:
        if not isinstance(handler, logging.NullHandler):
            logger.removeHandler(handler)
            handler.close()


def _attach(handler: logging.Handler, level: LogLevel | int) -> None:
    logger = _get_logger()
    logger.setLevel(_get_level(level))
    handler.setLevel(_get_level(level))
    logger.addHandler(handler)


def _rotating_handler(path: str | Path, max_bytes: int, backup_count: int) -> RotatingFileHandler:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    return RotatingFileHandler(path, maxBytes=max_bytes, backupCount=backup_count)


def enable_console_logging(
    level: LogLevel | int = "INFO",
    format: str = DEFAULT_FORMAT,
    date_format: str = DEFAULT_DATE_FORMAT,
) -> logging.StreamHandler:
    """Send compliancesim logs to stderr.

    Args:
        level: Level name or number.
        format: Record format string.
        date_format: Format for ``%(asctime)s``.

    Returns:
        The handler that was attached.
    """
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(format, date_format))
    _attach(handler, level)
    return handler


def enable_file_logging(
    path: str | Path,
    level: LogLevel | int = "INFO",
    max_bytes: int = DEFAULT_MAX_BYTES,
    backup_count: int = DEFAULT_BACKUP_COUNT,
    format: str = DEFAULT_FORMAT,
    date_format: str = DEFAULT_DATE_FORMAT,
) -> RotatingFileHandler:
    """Write compliancesim logs to a size-rotated file.

    Missing parent directories are created. Once the file reaches
    ``max_bytes`` it is rolled over, keeping ``backup_count`` old files.

    Returns:
        The handler that was attached.
    """
    handler = _rotating_handler(path, max_bytes, backup_count)
    handler.setFormatter(logging.Formatter(format, date_format))
    _attach(handler, level)
    return handler


def enable_timed_file_logging(
    path: str | Path,
    level: LogLevel | int = "INFO",
    when: str = "midnight",
    interval: int = 1,
    backup_count: int = DEFAULT_BACKUP_COUNT,
    format: str = DEFAULT_FORMAT,
    date_format: str = DEFAULT_DATE_FORMAT,
) -> TimedRotatingFileHandler:
    """Write compliancesim logs to a file rolled over on a schedule.

    ``when`` and ``interval`` take the values TimedRotatingFileHandler
    accepts ("H", "D", "midnight", "W0".."W6", ...). Handy for
    simulations driven by a long-lived service, one file per day.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    handler = TimedRotatingFileHandler(
        path, when=when, interval=interval, backupCount=backup_count
    )
    handler.setFormatter(logging.Formatter(format, date_format))
    _attach(handler, level)
    return handler


def enable_json_logging(level: LogLevel | int = "INFO") -> logging.StreamHandler:
    """Send compliancesim logs to stderr as JSON lines."""
    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter())
    _attach(handler, level)
    return handler


def enable_json_file_logging(
    path: str | Path,
    level: LogLevel | int = "INFO",
    max_bytes: int = DEFAULT_MAX_BYTES,
    backup_count: int = DEFAULT_BACKUP_COUNT,
) -> RotatingFileHandler:
    """Write JSON-line logs to a size-rotated file."""
    handler = _rotating_handler(path, max_bytes, backup_count)
    handler.setFormatter(JsonFormatter())
    _attach(handler, level)
    return handler


def configure_from_env() -> None:
    """Configure logging from ``CS_LOGGING``, ``CS_LOG_FILE`` and ``CS_LOG_JSON``.

    Does nothing when neither a level nor a file is given. A file without a
    level logs at INFO.
    """
    level = os.environ.get("CS_LOGGING", "").upper()
    log_file = os.environ.get("CS_LOG_FILE", "")
    use_json = os.environ.get("CS_LOG_JSON", "") == "1"

    if not level and not log_file:
        return

    level = level or "INFO"

    if use_json:
        if log_file:
            enable_json_file_logging(log_file, level=level)
        else:
            enable_json_logging(level=level)
    elif log_file:
        enable_file_logging(log_file, level=level)
    else:
        enable_console_logging(level=level)


def set_level(level: LogLevel | int) -> None:
    """Change the level of the package logger."""
    _get_logger().setLevel(_get_level(level))


def set_module_level(module: str, level: LogLevel | int) -> None:
    """Change the level of one submodule logger.

    Args:
        module: Dotted path below ``compliancesim`` (e.g. "behavior.network").
        level: Level name or number.

    Example:
        >>> compliancesim.enable_console_logging(level="INFO")
        >>> compliancesim.set_module_level("behavior.decision", "WARNING")
    """
    logging.getLogger(f"{LOGGER_NAME}.{module}").setLevel(_get_level(level))


def disable_logging() -> None:
    """Remove configured handlers and silence the package logger."""
    _clear_handlers()
    logger = _get_logger()
    if not any(isinstance(h, logging.NullHandler) for h in logger.handlers):
        logger.addHandler(logging.NullHandler())
    logger.setLevel(logging.CRITICAL + 1)

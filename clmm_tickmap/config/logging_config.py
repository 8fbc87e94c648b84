"""
Logging configuration for the CLMM tick-map tooling.

Reports are printed on stdout, so every log line goes to stderr. File
logging is opt-in: set CLMM_TICKMAP_LOG_DIR to get a daily-rotated log
and a separate error log in that directory.
"""

import logging
import os
import sys
from logging.handlers import RotatingFileHandler, TimedRotatingFileHandler
from pathlib import Path
from typing import Optional


# Log formats
DETAILED_FORMAT = "%(asctime)s %(levelname)-8s %(name)s [%(filename)s:%(lineno)d] %(message)s"
SIMPLE_FORMAT = "%(asctime)s %(levelname)-8s %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

LOG_RETENTION_DAYS = 30
ERROR_LOG_MAX_BYTES = 10 * 1024 * 1024
ERROR_LOG_BACKUPS = 5


def get_log_dir() -> Optional[Path]:
    """Return the log directory, creating it, or None when file logging is off."""
    log_dir = os.getenv("CLMM_TICKMAP_LOG_DIR")
    if not log_dir:
        return None
    path = Path(log_dir)
    path.mkdir(parents=True, exist_ok=True)
    return path


def _file_handlers(log_dir: Path, name: str, log_file: str, level: int, formatter) -> list:
    daily = TimedRotatingFileHandler(
        log_dir / log_file,
        when="midnight",
        backupCount=LOG_RETENTION_DAYS,
        encoding="utf-8",
    )
    daily.setLevel(level)
    daily.setFormatter(formatter)

    errors = RotatingFileHandler(
        log_dir / f"{name}_errors.log",
        maxBytes=ERROR_LOG_MAX_BYTES,
        backupCount=ERROR_LOG_BACKUPS,
        encoding="utf-8",
    )
    errors.setLevel(logging.ERROR)
    errors.setFormatter(logging.Formatter(DETAILED_FORMAT, datefmt=DATE_FORMAT))
    return [daily, errors]


def setup_logger(
    name: str,
    level: int = logging.INFO,
    log_file: Optional[str] = None,
    console: bool = True,
    detailed: bool = False,
) -> logging.Logger:
    """
    Configure a named logger for stderr and optional log files.

    Calling it again for the same name only updates the level.

    Args:
        name: Logger name, usually "clmm_tickmap"
        level: Threshold for the console and daily handlers
        log_file: Daily log file name inside CLMM_TICKMAP_LOG_DIR (default "<name>.log")
        console: Attach a stderr handler
        detailed: Include logger name and source location in console lines

    Returns:
        The configured logger

    Example:
        >>> logger = setup_logger("clmm_tickmap", level=logging.DEBUG)
        >>> logger.debug("Decoded 12 populated tick arrays")
    """
    logger = logging.getLogger(name)
    logger.setLevel(level)

    if logger.handlers:
        # Error logs keep their own threshold
        for handler in logger.handlers:
            if not isinstance(handler, RotatingFileHandler):
                handler.setLevel(level)
        return logger

    formatter = logging.Formatter(DETAILED_FORMAT if detailed else SIMPLE_FORMAT, datefmt=DATE_FORMAT)
    handlers = []
    if console:
        stream = logging.StreamHandler(sys.stderr)
        stream.setLevel(level)
        stream.setFormatter(formatter)
        handlers.append(stream)

    log_dir = get_log_dir()
    if log_dir is not None:
        handlers.extend(_file_handlers(log_dir, name, log_file or f"{name}.log", level, formatter))

    for handler in handlers:
        logger.addHandler(handler)
    return logger


def get_cli_logger(debug: bool = False) -> logging.Logger:
    """Get the package logger configured for command-line runs."""
    level = logging.DEBUG if debug else logging.WARNING
    return setup_logger("clmm_tickmap", level=level, detailed=debug)

"""
Logging for backup rotation.

Usage:
    from backup_rotate.logger import get_logger, create_logger

    logger = get_logger()
    logger.info("Rotation started")

    logger = create_logger(level=logging.DEBUG, json_format=True, console=False,
                           log_file="/var/log/backup-rotate.log")

Environment Variables:
    {PREFIX}_LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    {PREFIX}_LOG_FILE: Optional file path for log output
    {PREFIX}_LOG_JSON: Set to "true" for JSON output format

    Where {PREFIX} is derived from the logger name ("backup-rotate" -> BACKUP_ROTATE)
"""

import logging
import os
from typing import Dict, Optional

from .interface import Logger
from .structured_logger import JsonFormatter, StructuredLogger, TextFormatter

DEFAULT_SYSLOG_ADDRESS = "/dev/log"

# Most recently created logger per name, reused by get_logger
_loggers: Dict[str, Logger] = {}


def _get_env_prefix(name: str) -> str:
    return name.upper().replace("-", "_")


def parse_level(value: Optional[str], default: int = logging.INFO) -> int:
    """Map a level name such as "debug" to its logging constant."""
    if not value:
        return default
    level = logging.getLevelName(value.upper())
    return level if isinstance(level, int) else default


def create_logger(
    name: str = "backup-rotate",
    level: Optional[int] = None,
    log_file: Optional[str] = None,
    json_format: Optional[bool] = None,
    console: bool = True,
    syslog_address: Optional[str] = None,
) -> Logger:
    """Create a logger, filling unset options from the environment.

    Args:
        name: Logger name, also the source of the environment prefix
        level: Logging level (defaults to INFO or env var)
        log_file: Optional file path for log output
        json_format: If True, output logs as JSON
        console: Write to stderr
        syslog_address: Syslog socket or None to skip syslog

    Returns:
        A configured Logger instance
    """
    env_prefix = _get_env_prefix(name)

    if level is None:
        level = parse_level(os.environ.get(f"{env_prefix}_LOG_LEVEL"))

    if log_file is None:
        log_file = os.environ.get(f"{env_prefix}_LOG_FILE")

    if json_format is None:
        json_format = os.environ.get(f"{env_prefix}_LOG_JSON", "false").lower() == "true"

    logger = StructuredLogger(
        name=name,
        level=level,
        log_file=log_file,
        json_format=json_format,
        console=console,
        syslog_address=syslog_address,
    )
    _loggers[name] = logger
    return logger


def get_logger(name: str = "backup-rotate") -> Logger:
    """Return the logger already created for ``name``, or a new console logger.

    An existing logger is returned as is, so components that fall back to
    get_logger() keep the handlers the command line configured.
    """
    existing = _loggers.get(name)
    if existing is not None:
        return existing
    return create_logger(name=name)


__all__ = [
    "Logger",
    "StructuredLogger",
    "JsonFormatter",
    "TextFormatter",
    "DEFAULT_SYSLOG_ADDRESS",
    "create_logger",
    "get_logger",
    "parse_level",
]

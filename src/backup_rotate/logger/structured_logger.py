"""
Structured logger with JSON output, file and syslog support.

Console output goes to stderr so that command output on stdout (for
example the ``list`` monitoring lines) stays machine readable.
"""

import json
import logging
import logging.handlers
import sys
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from .interface import Logger

# Attributes of a LogRecord that are not user supplied context
RESERVED_KEYS = frozenset({
    "args", "asctime", "created", "exc_info", "exc_text", "filename",
    "funcName", "levelname", "levelno", "lineno", "module",
    "msecs", "message", "msg", "name", "pathname", "process",
    "processName", "relativeCreated", "stack_info", "thread",
    "threadName", "taskName",
})


def _extra_fields(record: logging.LogRecord) -> Dict[str, Any]:
    return {
        key: value
        for key, value in record.__dict__.items()
        if key not in RESERVED_KEYS and key != "session_id"
    }


class JsonFormatter(logging.Formatter):
    """Formats records as one JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "message": record.getMessage(),
            "logger": record.name,
        }

        session_id = getattr(record, "session_id", None)
        if session_id:
            log_data["session_id"] = str(session_id)

        log_data.update(_extra_fields(record))
        return json.dumps(log_data, default=str)


class TextFormatter(logging.Formatter):
    """Human-readable formatter that appends context as key=value pairs."""

    def format(self, record: logging.LogRecord) -> str:
        s = super().format(record)

        extra_args = _extra_fields(record)
        if extra_args:
            s += " " + " ".join(f"{k}={v}" for k, v in extra_args.items())

        return s


class StructuredLogger(Logger):
    """Logger backed by the standard logging module.

    Handlers:
    - console (stderr), enabled by default
    - file, when log_file is given
    - syslog on facility local0, when syslog_address is given

    With every handler disabled the logger is silent (``--no-log``).

    Example:
        logger = StructuredLogger(name="backup-rotate", json_format=True)
        logger.info("Artifact promoted", target="web1:databases:shop")
    """

    def __init__(
        self,
        name: str = "backup-rotate",
        level: int = logging.INFO,
        log_file: Optional[str] = None,
        json_format: bool = False,
        console: bool = True,
        syslog_address: Optional[str] = None,
    ):
        self._name = name
        self._session_id = str(uuid.uuid4())[:8]
        self._logger = logging.getLogger(name)
        self._logger.setLevel(level)

        # Replace handlers from an earlier initialisation, releasing open files
        for handler in list(self._logger.handlers):
            self._logger.removeHandler(handler)
            handler.close()

        self._logger.propagate = False

        if json_format:
            formatter: logging.Formatter = JsonFormatter()
        else:
            formatter = TextFormatter(
                "%(asctime)s [%(levelname)s] [%(name)s] [session:%(session_id)s] %(message)s"
            )

        if console:
            console_handler = logging.StreamHandler(sys.stderr)
            console_handler.setFormatter(formatter)
            self._logger.addHandler(console_handler)

        if log_file:
            try:
                file_handler = logging.FileHandler(log_file)
                file_handler.setFormatter(formatter)
                self._logger.addHandler(file_handler)
            except OSError as e:
                print(f"Failed to setup log file {log_file}: {e}", file=sys.stderr)

        if syslog_address:
            try:
                syslog_handler = logging.handlers.SysLogHandler(
                    address=syslog_address,
                    facility=logging.handlers.SysLogHandler.LOG_LOCAL0,
                )
                syslog_handler.setFormatter(logging.Formatter(f"{name}: %(message)s"))
                self._logger.addHandler(syslog_handler)
            except OSError as e:
                print(f"Failed to setup syslog at {syslog_address}: {e}", file=sys.stderr)

        if not self._logger.handlers:
            self._logger.addHandler(logging.NullHandler())

    @property
    def name(self) -> str:
        return self._name

    def get_session_id(self) -> str:
        return self._session_id

    def _log(self, level: int, message: str, **kwargs: Any) -> None:
        extra = {"session_id": self._session_id}

        for k, v in kwargs.items():
            if k not in RESERVED_KEYS:
                extra[k] = v
            else:
                # Prefix reserved keys to preserve them but avoid collision
                extra[f"_{k}"] = v

        self._logger.log(level, message, extra=extra)

    def debug(self, message: str, **kwargs: Any) -> None:
        self._log(logging.DEBUG, message, **kwargs)

    def info(self, message: str, **kwargs: Any) -> None:
        self._log(logging.INFO, message, **kwargs)

    def warning(self, message: str, **kwargs: Any) -> None:
        self._log(logging.WARNING, message, **kwargs)

    def error(self, message: str, **kwargs: Any) -> None:
        self._log(logging.ERROR, message, **kwargs)

    def critical(self, message: str, **kwargs: Any) -> None:
        self._log(logging.CRITICAL, message, **kwargs)

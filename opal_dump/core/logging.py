"""Logging setup for the OPAL dump extractor.

Messages go to stderr and, when available, to the system log under the
``OPAL_DUMP`` ident on the LOCAL1 facility.

Features:
    - Plain or JSON structured console format
    - Syslog handler with graceful fallback when /dev/log is missing
    - NOTICE accepted as a level name (mapped to INFO)
"""

from __future__ import annotations

import json
import logging
import logging.handlers
import os
from datetime import datetime, timezone

SYSLOG_IDENT = "OPAL_DUMP"
SYSLOG_ADDRESS = "/dev/log"
CONSOLE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
SYSLOG_FORMAT = "%(message)s"

# syslog has NOTICE between INFO and WARNING; Python does not.
_LEVEL_ALIASES = {"NOTICE": "INFO", "ERR": "ERROR", "WARN": "WARNING", "CRIT": "CRITICAL"}


def resolve_level(level: str) -> int:
    """Map a level name (syslog or Python spelling) to a logging level.

    Raises:
        ValueError: If the name is not a known level.
    """
    name = level.strip().upper()
    name = _LEVEL_ALIASES.get(name, name)
    value = logging.getLevelName(name)
    if not isinstance(value, int):
        raise ValueError(f"Unknown log level: {level}")
    return value


class JSONFormatter(logging.Formatter):
    """JSON formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as a single JSON line.

        Args:
            record: The log record to format.

        Returns:
            JSON-formatted log message.
        """
        log_data: dict[str, str | int] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "pid": os.getpid(),
            "message": record.getMessage(),
        }
        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_data)


def _syslog_handler(level: int) -> logging.Handler | None:
    if not os.path.exists(SYSLOG_ADDRESS):
        return None
    try:
        handler = logging.handlers.SysLogHandler(
            address=SYSLOG_ADDRESS,
            facility=logging.handlers.SysLogHandler.LOG_LOCAL1,
        )
    except OSError:
        return None
    handler.ident = f"{SYSLOG_IDENT}[{os.getpid()}]: "
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(SYSLOG_FORMAT))
    return handler


def configure_logging(
    level: str = "NOTICE",
    json_format: bool = False,
    syslog: bool = True,
) -> None:
    """Configure logging for the application.

    Args:
        level: Logging level (DEBUG, INFO, NOTICE, WARNING, ERROR).
        json_format: Use JSON format on the console.
        syslog: Also send records to the local system log.
    """
    numeric_level = resolve_level(level)

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(numeric_level)
    if json_format:
        formatter: logging.Formatter = JSONFormatter()
    else:
        formatter = logging.Formatter(fmt=CONSOLE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if syslog:
        syslog_handler = _syslog_handler(numeric_level)
        if syslog_handler is None:
            logging.getLogger(__name__).debug("System log unavailable, logging to console only")
        else:
            root_logger.addHandler(syslog_handler)

"""
Log formatters for console, structured and audit output.
"""

import json
import logging
from datetime import datetime
from typing import Optional


AUDIT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class StructuredFormatter(logging.Formatter):
    """
    JSON formatter for machine-readable log files.

    Each record becomes one JSON object with a consistent set of keys.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.fromtimestamp(record.created).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno
        }

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry, default=str, ensure_ascii=False)


class ColoredFormatter(logging.Formatter):
    """
    Console formatter that colors each line by level with ANSI codes.
    """

    COLORS = {
        'DEBUG': '\033[36m',      # Cyan
        'INFO': '\033[32m',       # Green
        'WARNING': '\033[33m',    # Yellow
        'ERROR': '\033[31m',      # Red
        'CRITICAL': '\033[35m',   # Magenta
        'RESET': '\033[0m',
        'BOLD': '\033[1m'
    }

    def __init__(self, fmt: Optional[str] = None, datefmt: Optional[str] = None):
        super().__init__(fmt, datefmt)

    def format(self, record: logging.LogRecord) -> str:
        formatted = super().format(record)

        level_color = self.COLORS.get(record.levelname, '')
        if not level_color:
            return formatted

        reset_color = self.COLORS['RESET']
        bold_level = f"{self.COLORS['BOLD']}{record.levelname}{reset_color}{level_color}"
        formatted = formatted.replace(record.levelname, bold_level, 1)
        return f"{level_color}{formatted}{reset_color}"


class AuditFormatter(logging.Formatter):
    """
    Formatter for the audit trail: ``YYYY-MM-DD HH:MM:SS - message``.

    Line breaks inside the message are escaped so that every event occupies
    exactly one line of the audit file.
    """

    def __init__(self):
        super().__init__("%(asctime)s - %(message)s", datefmt=AUDIT_DATE_FORMAT)

    def format(self, record: logging.LogRecord) -> str:
        formatted = super().format(record)
        return formatted.replace("\r\n", "\\n").replace("\n", "\\n").replace("\r", "\\r")

"""
Log handlers for file, console and audit output.
"""

import logging
import logging.handlers
import sys
from pathlib import Path
from typing import Optional, TextIO


class RotatingFileHandler(logging.handlers.RotatingFileHandler):
    """
    Rotating file handler that creates the log directory on demand.
    """

    def __init__(
        self,
        filename: str,
        mode: str = 'a',
        maxBytes: int = 0,
        backupCount: int = 0,
        encoding: Optional[str] = None,
        delay: bool = False
    ):
        """
        Initialize rotating file handler.

        Args:
            filename: Log file path
            mode: File open mode
            maxBytes: Maximum file size before rotation
            backupCount: Number of backup files to keep
            encoding: File encoding
            delay: Whether to delay file opening
        """
        Path(filename).parent.mkdir(parents=True, exist_ok=True)
        super().__init__(filename, mode, maxBytes, backupCount, encoding, delay)


class ConsoleHandler(logging.StreamHandler):
    """
    Console handler writing to stderr by default so that command output on
    stdout stays clean.
    """

    def __init__(self, stream: Optional[TextIO] = None):
        super().__init__(stream if stream is not None else sys.stderr)


class AuditFileHandler(logging.FileHandler):
    """
    Append-only handler for the audit trail.

    The file is opened lazily on the first event. Any failure to open or
    write the file is dropped silently: auditing is best-effort and must
    never interrupt the operation being audited.
    """

    def __init__(self, filename: str, encoding: str = 'utf-8'):
        super().__init__(filename, mode='a', encoding=encoding, delay=True)
        self.failures = 0

    def emit(self, record: logging.LogRecord) -> None:
        try:
            super().emit(record)
        except Exception:
            self.handleError(record)

    def handleError(self, record: logging.LogRecord) -> None:
        self.failures += 1

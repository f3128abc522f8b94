"""
Logger configuration and setup for GitMaster.
"""

import logging
import sys
from typing import Optional, Dict
from dataclasses import dataclass

from ..config import get_config
from .log_formatter import StructuredFormatter, ColoredFormatter, AuditFormatter
from .log_handler import RotatingFileHandler, ConsoleHandler, AuditFileHandler

AUDIT_LOGGER_NAME = "gitmaster.audit"


@dataclass
class LoggerConfig:
    """Configuration for logging system."""
    level: str = "INFO"
    file_path: Optional[str] = None
    format_string: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    max_file_size: int = 10  # MB
    backup_count: int = 5
    audit_file: Optional[str] = "gitmaster_log.txt"
    enable_console: bool = True
    enable_structured: bool = False
    enable_colors: bool = True


class LoggingManager:
    """
    Centralized logging manager for GitMaster.

    Owns the root logger handlers (console and optional rotating file) and
    the separate, non-propagating audit logger.
    """

    def __init__(self):
        self._handlers: Dict[str, logging.Handler] = {}
        self._configured = False
        self.config: Optional[LoggerConfig] = None

    @property
    def configured(self) -> bool:
        return self._configured

    def setup_logging(self, config: Optional[LoggerConfig] = None) -> None:
        """
        Set up the logging system with the specified configuration.

        Args:
            config: Logging configuration (uses app config if not provided)
        """
        if self._configured:
            return

        if config is None:
            app_config = get_config()
            config = LoggerConfig(
                level=app_config.logging.level,
                file_path=app_config.logging.file,
                format_string=app_config.logging.format,
                max_file_size=app_config.logging.max_file_size,
                backup_count=app_config.logging.backup_count,
                audit_file=app_config.logging.audit_file
            )

        self.config = config

        root_logger = logging.getLogger()
        root_logger.setLevel(self._get_log_level(config.level))

        if config.enable_console:
            self.add_handler('console', self._create_console_handler(config))

        if config.file_path:
            self.add_handler('file', self._create_file_handler(config))

        if config.audit_file:
            self.ensure_audit_logger(config.audit_file)

        self._configure_third_party_loggers()

        logger = logging.getLogger(__name__)
        logger.debug(f"Logging system initialized with level: {config.level}")

        self._configured = True

    def _create_console_handler(self, config: LoggerConfig) -> logging.Handler:
        """Create console handler with appropriate formatter."""
        handler = ConsoleHandler()
        handler.setLevel(self._get_log_level(config.level))

        if config.enable_colors and sys.stderr.isatty():
            formatter = ColoredFormatter(config.format_string)
        elif config.enable_structured:
            formatter = StructuredFormatter()
        else:
            formatter = logging.Formatter(config.format_string)

        handler.setFormatter(formatter)
        return handler

    def _create_file_handler(self, config: LoggerConfig) -> logging.Handler:
        """Create rotating file handler."""
        handler = RotatingFileHandler(
            filename=config.file_path,
            maxBytes=config.max_file_size * 1024 * 1024,
            backupCount=config.backup_count,
            encoding='utf-8'
        )
        handler.setLevel(self._get_log_level(config.level))

        if config.enable_structured:
            handler.setFormatter(StructuredFormatter())
        else:
            handler.setFormatter(logging.Formatter(config.format_string))

        return handler

    def ensure_audit_logger(self, audit_file: str) -> None:
        """Attach the audit file handler unless one is already installed."""
        if 'audit' in self._handlers:
            return
        self._setup_audit_logger(audit_file)

    def _setup_audit_logger(self, audit_file: str) -> None:
        """Attach the audit file handler to the dedicated audit logger."""
        handler = AuditFileHandler(audit_file)
        handler.setFormatter(AuditFormatter())

        audit_logger = logging.getLogger(AUDIT_LOGGER_NAME)
        audit_logger.setLevel(logging.INFO)
        audit_logger.propagate = False
        audit_logger.addHandler(handler)
        self._handlers['audit'] = handler

    def _configure_third_party_loggers(self) -> None:
        """Configure third-party library loggers to reduce noise."""
        for logger_name in ('urllib3', 'requests', 'git'):
            logging.getLogger(logger_name).setLevel(logging.WARNING)

    def _get_log_level(self, level_str: str) -> int:
        """Convert string log level to logging constant."""
        level_mapping = {
            'DEBUG': logging.DEBUG,
            'INFO': logging.INFO,
            'WARNING': logging.WARNING,
            'ERROR': logging.ERROR,
            'CRITICAL': logging.CRITICAL
        }
        return level_mapping.get(level_str.upper(), logging.INFO)

    def add_handler(self, name: str, handler: logging.Handler) -> None:
        """
        Add a handler to the root logger.

        Args:
            name: Handler name
            handler: Handler instance
        """
        logging.getLogger().addHandler(handler)
        self._handlers[name] = handler

    def set_level(self, level: str) -> None:
        """
        Change the logging level for the root logger and its handlers.

        Args:
            level: New logging level
        """
        log_level = self._get_log_level(level)
        logging.getLogger().setLevel(log_level)

        for name, handler in self._handlers.items():
            if name != 'audit':
                handler.setLevel(log_level)

    def close_handlers(self) -> None:
        """Detach and close every handler installed by this manager."""
        audit_logger = logging.getLogger(AUDIT_LOGGER_NAME)
        root_logger = logging.getLogger()

        for handler in self._handlers.values():
            root_logger.removeHandler(handler)
            audit_logger.removeHandler(handler)
            handler.close()

        self._handlers.clear()
        self._configured = False


# Global logging manager instance
_logging_manager = LoggingManager()


def setup_logging(config: Optional[LoggerConfig] = None) -> None:
    """
    Set up the global logging system.

    Args:
        config: Logging configuration
    """
    _logging_manager.setup_logging(config)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def set_log_level(level: str) -> None:
    _logging_manager.set_level(level)


def close_logging() -> None:
    """Close logging system and clean up resources."""
    _logging_manager.close_handlers()


def audit(message: str) -> None:
    """
    Record one event in the audit trail.

    Failures are swallowed by the audit handler, so this never raises
    because of the log file.
    """
    try:
        logging.getLogger(AUDIT_LOGGER_NAME).info(message)
    except Exception:
        # a broken handler chain must not affect the caller
        pass


def ensure_audit_logging(audit_file: str) -> None:
    """
    Make sure audit events reach ``audit_file``.

    Used when the core is wired up without the CLI; a no-op once
    ``setup_logging`` (or an earlier call) has installed the audit handler.
    """
    _logging_manager.ensure_audit_logger(audit_file)

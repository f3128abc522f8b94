"""
Logging system for GitMaster.
"""

from .logger_config import (
    setup_logging, get_logger, set_log_level, close_logging, audit, ensure_audit_logging,
    LoggerConfig, AUDIT_LOGGER_NAME
)
from .log_formatter import StructuredFormatter, ColoredFormatter, AuditFormatter
from .log_handler import RotatingFileHandler, ConsoleHandler, AuditFileHandler

__all__ = [
    "setup_logging",
    "get_logger",
    "set_log_level",
    "close_logging",
    "audit",
    "ensure_audit_logging",
    "LoggerConfig",
    "AUDIT_LOGGER_NAME",
    "StructuredFormatter",
    "ColoredFormatter",
    "AuditFormatter",
    "RotatingFileHandler",
    "ConsoleHandler",
    "AuditFileHandler"
]

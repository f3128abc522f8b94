"""
Configuration management for GitMaster.
"""

from .config_manager import (
    ConfigManager, AppConfig, GitConfig, GitHubConfig, CredentialsConfig,
    LoggingConfig, get_config_manager, get_config, reset_config_manager
)

__all__ = [
    "ConfigManager",
    "AppConfig",
    "GitConfig",
    "GitHubConfig",
    "CredentialsConfig",
    "LoggingConfig",
    "get_config_manager",
    "get_config",
    "reset_config_manager"
]

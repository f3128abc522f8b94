"""
Configuration management system for GitMaster.
"""

import os
import yaml
from pathlib import Path
from typing import Dict, Any, Optional, Union
from dataclasses import dataclass, field, asdict
import logging

from ..error_handling import ConfigurationError

logger = logging.getLogger(__name__)


@dataclass
class GitConfig:
    """External git executable configuration."""
    executable: str = "git"
    working_dir: Optional[str] = None
    default_branch: Optional[str] = "main"  # empty disables the pull/push default
    timeout: Optional[float] = None  # seconds, None waits indefinitely


@dataclass
class GitHubConfig:
    """GitHub API configuration."""
    access_token: Optional[str] = None
    api_base_url: str = "https://api.github.com"
    timeout: int = 30
    per_page: int = 100


@dataclass
class CredentialsConfig:
    """Location of the persisted access token."""
    file: str = "github_config.json"


@dataclass
class LoggingConfig:
    """Logging configuration."""
    level: str = "INFO"
    file: Optional[str] = None
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    max_file_size: int = 10  # MB
    backup_count: int = 5
    audit_file: Optional[str] = "gitmaster_log.txt"


@dataclass
class AppConfig:
    """Complete application configuration."""
    git: GitConfig = field(default_factory=GitConfig)
    github: GitHubConfig = field(default_factory=GitHubConfig)
    credentials: CredentialsConfig = field(default_factory=CredentialsConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


class ConfigManager:
    """
    Manages application configuration from multiple sources.

    Configuration is loaded in the following order (later sources override earlier):
    1. Default configuration
    2. Configuration file
    3. Environment variables
    """

    def __init__(self, config_file: Optional[Union[str, Path]] = None):
        """
        Initialize configuration manager.

        Args:
            config_file: Path to a YAML configuration file
        """
        self.config_file = Path(config_file) if config_file else None
        self._config: Optional[AppConfig] = None
        self._env_var_mapping = self._create_env_var_mapping()

    def _create_env_var_mapping(self) -> Dict[str, str]:
        """Create mapping of environment variables to config paths."""
        return {
            # GitHub configuration
            "GITHUB_TOKEN": "github.access_token",
            "GITHUB_API_URL": "github.api_base_url",
            "GITHUB_TIMEOUT": "github.timeout",

            # Git configuration
            "GITMASTER_GIT_EXECUTABLE": "git.executable",
            "GITMASTER_WORKING_DIR": "git.working_dir",
            "GITMASTER_DEFAULT_BRANCH": "git.default_branch",
            "GITMASTER_GIT_TIMEOUT": "git.timeout",

            # Credential storage
            "GITMASTER_CREDENTIALS_FILE": "credentials.file",

            # Logging configuration
            "LOG_LEVEL": "logging.level",
            "LOG_FILE": "logging.file",
            "GITMASTER_AUDIT_LOG": "logging.audit_file",
        }

    def load_config(self) -> AppConfig:
        """
        Load configuration from all sources.

        Returns:
            Complete application configuration

        Raises:
            ConfigurationError: If the merged configuration is invalid
        """
        if self._config is not None:
            return self._config

        config_dict = self._get_default_config()

        if self.config_file and self.config_file.exists():
            file_config = self._load_config_file(self.config_file)
            config_dict = self._merge_configs(config_dict, file_config)

        env_config = self._load_env_config()
        config_dict = self._merge_configs(config_dict, env_config)

        config_dict = self._substitute_env_vars(config_dict)

        self._validate_config(config_dict)

        self._config = self._dict_to_config(config_dict)

        return self._config

    def _get_default_config(self) -> Dict[str, Any]:
        """Get default configuration values."""
        return asdict(AppConfig())

    def _load_config_file(self, config_path: Path) -> Dict[str, Any]:
        """
        Load configuration from YAML file.

        Args:
            config_path: Path to configuration file

        Returns:
            Configuration dictionary (empty if the file cannot be read)
        """
        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                config = yaml.safe_load(f)
                logger.info(f"Loaded configuration from {config_path}")
        except (OSError, yaml.YAMLError) as e:
            logger.warning(f"Failed to load config file {config_path}: {e}")
            return {}

        if not isinstance(config, dict):
            if config is not None:
                logger.warning(f"Ignoring config file {config_path}: top level is not a mapping")
            return {}
        return config

    def _load_env_config(self) -> Dict[str, Any]:
        """
        Load configuration from environment variables.

        Returns:
            Configuration dictionary from environment variables
        """
        env_config = {}

        for env_var, config_path in self._env_var_mapping.items():
            value = os.getenv(env_var)
            if value is not None:
                value = self._convert_env_value(config_path, value)
                self._set_nested_value(env_config, config_path, value)

        return env_config

    def _convert_env_value(self, config_path: str, value: str) -> Any:
        """
        Convert environment variable string to the type of its config field.

        Args:
            config_path: Dot-separated config path the value is destined for
            value: String value from environment variable

        Returns:
            Converted value
        """
        if config_path in ("github.timeout",):
            try:
                return int(value)
            except ValueError:
                raise ConfigurationError(
                    f"Invalid integer for {config_path}: {value!r}",
                    config_section=config_path.split('.')[0],
                    config_key=config_path.split('.')[1]
                )

        if config_path in ("git.timeout",):
            if not value.strip():
                return None
            try:
                return float(value)
            except ValueError:
                raise ConfigurationError(
                    f"Invalid number for {config_path}: {value!r}",
                    config_section="git",
                    config_key="timeout"
                )

        return value

    def _set_nested_value(self, config: Dict[str, Any], path: str, value: Any) -> None:
        """
        Set a nested configuration value using dot notation.

        Args:
            config: Configuration dictionary
            path: Dot-separated path (e.g., 'github.access_token')
            value: Value to set
        """
        keys = path.split('.')
        current = config

        for key in keys[:-1]:
            if key not in current:
                current[key] = {}
            current = current[key]

        current[keys[-1]] = value

    def _substitute_env_vars(self, config: Dict[str, Any]) -> Dict[str, Any]:
        """
        Substitute ``${VAR}`` references in configuration values.

        Args:
            config: Configuration dictionary

        Returns:
            Configuration with environment variables substituted
        """
        def substitute_recursive(obj):
            if isinstance(obj, dict):
                return {k: substitute_recursive(v) for k, v in obj.items()}
            elif isinstance(obj, list):
                return [substitute_recursive(item) for item in obj]
            elif isinstance(obj, str) and obj.startswith('${') and obj.endswith('}'):
                env_var = obj[2:-1]
                return os.getenv(env_var, obj)
            else:
                return obj

        return substitute_recursive(config)

    def _merge_configs(self, base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
        """
        Merge two configuration dictionaries.

        Args:
            base: Base configuration
            override: Override configuration

        Returns:
            Merged configuration
        """
        result = base.copy()

        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._merge_configs(result[key], value)
            else:
                result[key] = value

        return result

    def _validate_config(self, config: Dict[str, Any]) -> None:
        """
        Validate configuration values.

        Args:
            config: Configuration dictionary

        Raises:
            ConfigurationError: If configuration is invalid
        """
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        log_level = str(config.get("logging", {}).get("level", "INFO")).upper()
        if log_level not in valid_levels:
            raise ConfigurationError(
                f"Invalid log level: {log_level}. Valid levels: {sorted(valid_levels)}",
                config_section="logging",
                config_key="level"
            )
        config["logging"]["level"] = log_level

        github_timeout = config.get("github", {}).get("timeout")
        if not isinstance(github_timeout, (int, float)) or github_timeout <= 0:
            raise ConfigurationError(
                f"GitHub timeout must be a positive number, got {github_timeout!r}",
                config_section="github",
                config_key="timeout"
            )

        git_timeout = config.get("git", {}).get("timeout")
        if git_timeout is not None and (not isinstance(git_timeout, (int, float)) or git_timeout <= 0):
            raise ConfigurationError(
                f"Git timeout must be a positive number, got {git_timeout!r}",
                config_section="git",
                config_key="timeout"
            )

        if not config.get("git", {}).get("executable"):
            raise ConfigurationError(
                "Git executable must be set",
                config_section="git",
                config_key="executable"
            )

        if not config.get("git", {}).get("default_branch"):
            logger.debug("No default branch configured - pull/push require an explicit branch")

    def _dict_to_config(self, config_dict: Dict[str, Any]) -> AppConfig:
        """
        Convert configuration dictionary to AppConfig object.

        Args:
            config_dict: Configuration dictionary

        Returns:
            AppConfig object
        """
        try:
            return AppConfig(
                git=GitConfig(**config_dict.get("git", {})),
                github=GitHubConfig(**config_dict.get("github", {})),
                credentials=CredentialsConfig(**config_dict.get("credentials", {})),
                logging=LoggingConfig(**config_dict.get("logging", {}))
            )
        except TypeError as e:
            raise ConfigurationError(f"Unknown configuration key: {e}", cause=e)

    def get_config(self) -> AppConfig:
        """
        Get the current configuration.

        Returns:
            Application configuration
        """
        if self._config is None:
            return self.load_config()
        return self._config

    def reload_config(self) -> AppConfig:
        """
        Reload configuration from all sources.

        Returns:
            Reloaded application configuration
        """
        self._config = None
        return self.load_config()

    def save_config(self, config_path: Optional[Path] = None) -> None:
        """
        Save current configuration to file.

        The access token is never written; it belongs in the credential store.

        Args:
            config_path: Path to save configuration file
        """
        if config_path is None:
            config_path = self.config_file or Path("gitmaster.yaml")

        config_dict = asdict(self.get_config())
        config_dict["github"].pop("access_token", None)

        with open(config_path, 'w', encoding='utf-8') as f:
            yaml.dump(config_dict, f, default_flow_style=False, indent=2)

        logger.info(f"Configuration saved to {config_path}")


# Global configuration manager instance
_config_manager: Optional[ConfigManager] = None


def get_config_manager(config_file: Optional[Union[str, Path]] = None) -> ConfigManager:
    """
    Get the global configuration manager instance.

    Args:
        config_file: Path to configuration file (only used on first call)

    Returns:
        ConfigManager instance
    """
    global _config_manager
    if _config_manager is None:
        _config_manager = ConfigManager(config_file)
    return _config_manager


def get_config() -> AppConfig:
    """
    Get the current application configuration.

    Returns:
        Application configuration
    """
    return get_config_manager().get_config()


def reset_config_manager() -> None:
    """Drop the global configuration manager so the next call rebuilds it."""
    global _config_manager
    _config_manager = None

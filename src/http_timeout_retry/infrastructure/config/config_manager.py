"""Configuration manager for loading and validating .http-retry.yml"""

import copy
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import ValidationError

from http_timeout_retry.domain.config import AppConfig, RetryConfig
from http_timeout_retry.domain.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = ".http-retry.yml"

# Environment variable -> path inside the configuration dictionary
ENV_OVERRIDES = {
    "HTTP_RETRY_ENABLED": ("retry", "enabled"),
    "HTTP_RETRY_ATTEMPTS": ("retry", "attempts"),
    "HTTP_RETRY_DELAY": ("retry", "delay"),
    "HTTP_RETRY_LOGGING_ENABLED": ("retry", "logging", "enabled"),
    "HTTP_RETRY_LOGGING_LEVEL": ("retry", "logging", "level"),
    "HTTP_RETRY_LOGGING_CHANNEL": ("retry", "logging", "channel"),
    "HTTP_RETRY_ALLOWED_METHODS": ("retry", "allowed_methods"),
}


class ConfigManager:
    """Manages configuration from .http-retry.yml and environment variables

    Configuration priority:
    1. Default values (defined in Pydantic models)
    2. .http-retry.yml file (searched from current directory)
    3. Environment variables (HTTP_RETRY_*)
    4. Per-call overrides (handled by ``PendingRequest.with_timeout_retry``)
    """

    DEFAULT_CONFIG = {
        "retry": {
            "enabled": True,
            "attempts": 3,
            "delay": 100,
            "logging": {
                "enabled": False,
                "level": "info",
                "channel": None,
            },
            "allowed_methods": [],
        },
    }

    def __init__(self, config_path: Optional[Path] = None):
        """Initialize config manager

        Args:
            config_path: Path to .http-retry.yml (searches from current dir if None)

        Raises:
            ConfigurationError: If configuration validation fails
        """
        if isinstance(config_path, str):
            config_path = Path(config_path)
        self.config_path = config_path or self._find_config_file()
        try:
            self.config: AppConfig = self._load_config()
        except ValidationError as e:
            errors = []
            for error in e.errors():
                field = ".".join(str(x) for x in error["loc"])
                msg = error["msg"]
                errors.append(f"  - {field}: {msg}")
            raise ConfigurationError(
                "Configuration validation failed:\n" + "\n".join(errors)
            ) from e

    def _find_config_file(self) -> Optional[Path]:
        """Find .http-retry.yml starting from current directory

        Returns:
            Path to config file or None if not found
        """
        current = Path.cwd()
        for parent in [current] + list(current.parents):
            config_file = parent / CONFIG_FILE_NAME
            if config_file.exists():
                logger.info(f"Found config file: {config_file}")
                return config_file
        logger.debug(f"No {CONFIG_FILE_NAME} found, using defaults")
        return None

    def _load_config(self) -> AppConfig:
        """Load configuration from file and validate with Pydantic

        Raises:
            ValidationError: If configuration is structurally invalid
        """
        config_dict = copy.deepcopy(self.DEFAULT_CONFIG)

        if self.config_path and self.config_path.exists():
            try:
                with open(self.config_path, "r", encoding="utf-8") as f:
                    file_config = yaml.safe_load(f) or {}
                if not isinstance(file_config, dict):
                    raise ValueError("top-level YAML value must be a mapping")
                config_dict = self._merge_config(config_dict, file_config)
                logger.info(f"Loaded configuration from {self.config_path}")
            except (OSError, ValueError, yaml.YAMLError) as e:
                logger.warning(f"Failed to load config from {self.config_path}: {e}")
                logger.info("Using default configuration")

        config_dict = self._apply_env_overrides(config_dict)

        return AppConfig(**config_dict)

    def _merge_config(self, base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
        """Recursively merge configuration dictionaries"""
        result = base.copy()
        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._merge_config(result[key], value)
            else:
                result[key] = value
        return result

    def _apply_env_overrides(self, config: Dict[str, Any]) -> Dict[str, Any]:
        """Apply HTTP_RETRY_* environment variable overrides

        Values are passed through as strings; the retry models coerce them.
        """
        for env_name, path in ENV_OVERRIDES.items():
            value = os.getenv(env_name)
            if value is None:
                continue
            section = config
            for key in path[:-1]:
                if not isinstance(section.get(key), dict):
                    section[key] = {}
                section = section[key]
            section[path[-1]] = value
            logger.debug(f"Applied {env_name} override")
        return config

    def get_retry_config(self) -> RetryConfig:
        """Get retry configuration

        Returns:
            Retry configuration model
        """
        return self.config.retry

    def is_retry_enabled(self) -> bool:
        return self.config.retry.enabled

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value by key (supports dot notation)

        Args:
            key: Configuration key (e.g., "retry.logging.level" or "retry")
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        keys = key.split(".")
        value = self.config.model_dump(mode="json")
        for k in keys:
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return default
        return value

"""
================================================================================
Configuration Loader
================================================================================

YAML-based configuration management with environment variable override support.

Features:
    - Base configuration (config/config.yaml)
    - Environment-specific overlay (config/{UI_ENV}.yaml, default "dev")
    - Environment variable override (UI_BASE_URL overrides ui.base_url)
    - Dot notation path access with typed getters
    - Fail-fast access for required keys

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from loguru import logger

from .exceptions import ConfigurationError


# Default configuration directory (loginsuite/config)
DEFAULT_CONFIG_DIR = Path(__file__).parent.parent.parent / "config"

# Environment variable selecting the overlay file
ENV_SELECTOR = "UI_ENV"


def to_env_key(key: str) -> str:
    """Map a dot-notation key to its environment variable name."""
    return re.sub(r"[^A-Za-z0-9]", "_", key).upper()


def _deep_merge(base: Dict, override: Dict) -> Dict:
    """Deep merge two dictionaries, override taking precedence."""
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


class ConfigLoader:
    """
    Configuration loader with YAML and environment variable support.

    Configuration hierarchy (highest to lowest priority):
        1. Environment variables (UI_BROWSER)
        2. Environment overlay YAML (config/dev.yaml)
        3. Base YAML (config/config.yaml)
        4. Default values

    Usage:
        >>> config = ConfigLoader()
        >>> config.get("ui.browser", "chrome")
        'chrome'
        >>> config.get_required("login.email")
        'user@example.com'

    Environment Variable Mapping:
        - ui.base_url -> UI_BASE_URL
        - ui.timeouts.default_wait -> UI_TIMEOUTS_DEFAULT_WAIT
        - login.email -> LOGIN_EMAIL
    """

    _instance: Optional["ConfigLoader"] = None
    _config: Dict[str, Any] = {}

    def __new__(
        cls,
        config_dir: Optional[Path] = None,
        env: Optional[str] = None,
    ) -> "ConfigLoader":
        """Singleton: configuration is loaded once per process."""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(
        self,
        config_dir: Optional[Path] = None,
        env: Optional[str] = None,
    ) -> None:
        """
        Initialize configuration loader.

        Args:
            config_dir: Directory holding config.yaml and {env}.yaml files.
                        Uses DEFAULT_CONFIG_DIR if not specified.
            env: Overlay name. Defaults to the UI_ENV variable, then "dev".
        """
        if getattr(self, "_initialized", False):
            return

        self._config_dir = Path(config_dir) if config_dir else DEFAULT_CONFIG_DIR
        self._env = env or os.environ.get(ENV_SELECTOR, "dev")
        self._load_config()
        self._initialized = True

    @property
    def env(self) -> str:
        return self._env

    def _read_yaml(self, path: Path) -> Dict[str, Any]:
        try:
            with open(path, "r", encoding="utf-8") as f:
                return yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(
                f"Invalid YAML in configuration file {path}: {e}"
            ) from e

    def _load_config(self) -> None:
        """Load base configuration and merge the environment overlay."""
        base_path = self._config_dir / "config.yaml"
        if base_path.exists():
            config = self._read_yaml(base_path)
            logger.debug(f"Loaded configuration from: {base_path}")
        else:
            logger.warning(
                f"Configuration file not found: {base_path}. "
                f"Using defaults and environment variables only."
            )
            config = {}

        overlay_path = self._config_dir / f"{self._env}.yaml"
        if overlay_path.exists():
            config = _deep_merge(config, self._read_yaml(overlay_path))
            logger.debug(f"Merged environment config: {overlay_path}")

        self._config = config

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get configuration value by dot-notation path.

        First checks environment variables, then YAML config, then default.

        Args:
            key: Dot-notation path (e.g., "ui.base_url")
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        env_value = os.environ.get(to_env_key(key))
        if env_value is not None and env_value.strip():
            return self._convert_type(env_value, default)

        value: Any = self._config
        for part in key.split("."):
            if isinstance(value, dict):
                value = value.get(part)
            else:
                value = None

            if value is None:
                return default

        return value

    def get_int(self, key: str, default: int = 0) -> int:
        try:
            return int(self.get(key, default))
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"Config key '{key}' is not an integer") from e

    def get_float(self, key: str, default: float = 0.0) -> float:
        try:
            return float(self.get(key, default))
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"Config key '{key}' is not a number") from e

    def get_bool(self, key: str, default: bool = False) -> bool:
        value = self.get(key, default)
        if isinstance(value, str):
            return value.strip().lower() in ("true", "1", "yes", "on")
        return bool(value)

    def get_required(self, key: str) -> Any:
        """
        Get a value that must be configured.

        Raises:
            ConfigurationError: When the key is missing or blank
        """
        value = self.get(key)
        if value is None or (isinstance(value, str) and not value.strip()):
            raise ConfigurationError(
                f"Required config key '{key}' is missing. Provide it via "
                f"environment variable '{to_env_key(key)}' or in "
                f"'{self._env}.yaml' / 'config.yaml' under {self._config_dir}."
            )
        return value

    def exists(self, key: str) -> bool:
        value = self.get(key)
        return value is not None and not (isinstance(value, str) and not value.strip())

    def get_section(self, section: str) -> Dict[str, Any]:
        """
        Get entire configuration section.

        Args:
            section: Section name (e.g., "ui", "login")

        Returns:
            Section dictionary or empty dict if not found
        """
        return self._config.get(section, {})

    def reload(self) -> None:
        """Reload configuration from disk."""
        self._load_config()
        logger.info(f"Configuration reloaded from: {self._config_dir}")

    def _convert_type(self, value: str, reference: Any) -> Any:
        """
        Convert string value to match reference type.

        Used for environment variables which are always strings.
        """
        if reference is None:
            return value

        if isinstance(reference, bool):
            return value.lower() in ("true", "1", "yes", "on")
        if isinstance(reference, int):
            try:
                return int(value)
            except ValueError:
                return value
        if isinstance(reference, float):
            try:
                return float(value)
            except ValueError:
                return value

        return value

    @classmethod
    def reset(cls) -> None:
        """
        Reset singleton instance.

        Useful for testing when configuration needs to be reloaded
        with different settings.
        """
        cls._instance = None
        cls._config = {}


__all__ = [
    "ConfigLoader",
    "ConfigurationError",
    "to_env_key",
]

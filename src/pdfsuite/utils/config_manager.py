"""
PdfSuite - Configuration Manager

This module provides centralized JSON-based configuration management.
It handles loading, saving, and upgrading the user's tool defaults.
"""

import copy
import json
import os
from typing import Any, Final

from pdfsuite.config import CONFIG_FILE_PATH, OUTPUT_PREFIXES
from pdfsuite.constants import (
    DEFAULT_CROP_MARGIN_PT,
    DEFAULT_IMAGE_DPI,
    DEFAULT_IMAGE_QUALITY,
    DEFAULT_NUMBER_FONT_SIZE,
    DEFAULT_STAMP_COLOR,
    DEFAULT_WATERMARK_OPACITY,
    DEFAULT_WATERMARK_ROTATION,
)
from pdfsuite.utils.exceptions import ConfigurationError
from pdfsuite.utils.logger import logger

# Default configuration values
DEFAULT_CONFIG: Final[dict[str, Any]] = {
    "version": 1,
    "output": {
        "prefixes": dict(OUTPUT_PREFIXES),
    },
    "split": {
        "package_as_archive": True,
    },
    "compress": {
        "image_quality": DEFAULT_IMAGE_QUALITY,
        "image_dpi": DEFAULT_IMAGE_DPI,
    },
    "crop": {
        "margin": DEFAULT_CROP_MARGIN_PT,
    },
    "numbering": {
        "position": "bc",
        "font_size": DEFAULT_NUMBER_FONT_SIZE,
        "color": DEFAULT_STAMP_COLOR,
        "start_at": 1,
    },
    "watermark": {
        "text": "CONFIDENTIAL",
        "opacity": DEFAULT_WATERMARK_OPACITY,
        "rotation": DEFAULT_WATERMARK_ROTATION,
        "scale": 1.0,
        "color": DEFAULT_STAMP_COLOR,
        "alignment": "MC",
    },
}


class ConfigManager:
    """Manages application configuration in JSON format.

    This class provides a centralized way to load, save, and access
    configuration settings. Missing keys are filled from DEFAULT_CONFIG
    whenever the stored file is older than the current version.
    """

    def __init__(self, config_path: str | None = None) -> None:
        """Initialize the configuration manager.

        Args:
            config_path: Optional path to the configuration file.
                        Defaults to CONFIG_FILE_PATH.
        """
        self.config_path = config_path or CONFIG_FILE_PATH
        self._config: dict[str, Any] = {}

        os.makedirs(os.path.dirname(self.config_path), exist_ok=True)

        self._load_config()

    def _load_config(self) -> None:
        """Load configuration from file or create default."""
        if os.path.exists(self.config_path):
            try:
                with open(self.config_path, encoding="utf-8") as f:
                    self._config = json.load(f)
                logger.info("Configuration loaded from JSON")

                self._upgrade_config()

            except (OSError, json.JSONDecodeError) as e:
                logger.error(f"Error loading config: {e}")
                self._config = self._get_default_config()
        else:
            self._config = self._get_default_config()
            self.save()

    def _get_default_config(self) -> dict[str, Any]:
        """Get a copy of the default configuration.

        Returns:
            Deep copy of default configuration dictionary.
        """
        return copy.deepcopy(DEFAULT_CONFIG)

    def _upgrade_config(self) -> None:
        """Upgrade configuration to latest version if needed."""
        current_version = self._config.get("version", 0)

        if current_version < DEFAULT_CONFIG["version"]:
            self._merge_defaults(self._config, DEFAULT_CONFIG)
            self._config["version"] = DEFAULT_CONFIG["version"]
            logger.info(f"Configuration upgraded to version {DEFAULT_CONFIG['version']}")

    def _merge_defaults(self, config: dict, defaults: dict) -> None:
        """Merge default values into config for missing keys.

        Args:
            config: Current configuration dictionary.
            defaults: Default configuration dictionary.
        """
        for key, value in defaults.items():
            if key not in config:
                config[key] = copy.deepcopy(value)
            elif isinstance(value, dict) and isinstance(config.get(key), dict):
                self._merge_defaults(config[key], value)

    def save(self) -> bool:
        """Save configuration to file.

        Returns:
            True if save was successful, False otherwise.
        """
        try:
            with open(self.config_path, "w", encoding="utf-8") as f:
                json.dump(self._config, f, indent=2, ensure_ascii=False)
            logger.debug("Configuration saved to JSON")
            return True
        except OSError as e:
            logger.error(f"Error saving config: {e}")
            return False

    def get(self, key_path: str, default: Any = None) -> Any:
        """Get a configuration value by dot-separated path.

        Args:
            key_path: Dot-separated path to the config value (e.g., "compress.image_dpi")
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        keys = key_path.split(".")
        value = self._config

        for key in keys:
            if isinstance(value, dict) and key in value:
                value = value[key]
            else:
                return default

        return value

    def set(self, key_path: str, value: Any, save_immediately: bool = True) -> None:
        """Set a configuration value by dot-separated path.

        Args:
            key_path: Dot-separated path to the config value
            value: Value to set
            save_immediately: Whether to save to file immediately

        Raises:
            ConfigurationError: If a parent key holds a value instead of a section.
        """
        keys = key_path.split(".")
        config = self._config

        for key in keys[:-1]:
            if key not in config:
                config[key] = {}
            config = config[key]
            if not isinstance(config, dict):
                raise ConfigurationError(key_path, f"'{key}' is not a section")

        config[keys[-1]] = value

        if save_immediately:
            self.save()

    def output_prefix(self, tool: str) -> str:
        """Return the file name prefix configured for a tool's output."""
        return self.get(f"output.prefixes.{tool}", OUTPUT_PREFIXES.get(tool, ""))


# Singleton instance for global access
_config_manager: ConfigManager | None = None


def get_config_manager() -> ConfigManager:
    """Get the global configuration manager instance.

    Returns:
        The singleton ConfigManager instance
    """
    global _config_manager
    if _config_manager is None:
        _config_manager = ConfigManager()
    return _config_manager

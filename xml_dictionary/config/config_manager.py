"""
Centralized configuration management for the XML dictionary mapping engine.

This module provides the ConfigManager class that serves as the single source of truth
for configuration: parser policies, logging level, XML loader flags, dictionary file
loading and environment variable handling.
"""

import os
import json
import logging

from pathlib import Path
from typing import Dict, Any, Optional, Union
from dataclasses import dataclass, field

import yaml

from ..interfaces import ConfigurationManagerInterface
from ..models import DictionaryEntry, ParserConfig, build_dictionary
from ..exceptions import ConfigurationError, DictionaryError
from .parser_defaults import ParserDefaults


PACKAGE_LOGGER_NAME = "xml_dictionary"


def _env_flag(name: str, default: bool) -> bool:
    return os.environ.get(name, str(default)).strip().lower() in ('1', 'true', 'yes')


@dataclass
class ParserSettings:
    """Parser settings with environment variable support."""
    unknown_transform_policy: str = ParserDefaults.UNKNOWN_TRANSFORM_POLICY
    per_node_policy: str = ParserDefaults.PER_NODE_POLICY
    log_level: str = ParserDefaults.LOG_LEVEL
    recover: bool = ParserDefaults.RECOVER

    @classmethod
    def from_environment(cls) -> 'ParserSettings':
        """Create parser settings from environment variables."""
        return cls(
            unknown_transform_policy=os.environ.get('XML_DICTIONARY_UNKNOWN_TRANSFORM', cls.unknown_transform_policy).strip().lower(),
            per_node_policy=os.environ.get('XML_DICTIONARY_PER_NODE_POLICY', cls.per_node_policy).strip().lower(),
            log_level=os.environ.get('XML_DICTIONARY_LOG_LEVEL', cls.log_level).strip().upper(),
            recover=_env_flag('XML_DICTIONARY_RECOVER', cls.recover)
        )


@dataclass
class ConfigPaths:
    """Configuration file paths with environment variable support."""
    base_config_path: Path = field(default_factory=lambda: Path.cwd())
    dictionary_path: str = ParserDefaults.DICTIONARY_PATH

    @classmethod
    def from_environment(cls, base_path: Optional[Union[str, Path]] = None) -> 'ConfigPaths':
        """Create configuration paths from environment variables."""
        if base_path:
            base_config_path = Path(base_path)
        else:
            base_config_path = Path(os.environ.get('XML_DICTIONARY_CONFIG_PATH', Path.cwd()))

        return cls(
            base_config_path=base_config_path,
            dictionary_path=os.environ.get('XML_DICTIONARY_DICTIONARY_PATH', cls.dictionary_path)
        )


class ConfigManager(ConfigurationManagerInterface):
    """
    Centralized configuration manager serving as single source of truth.

    This class consolidates:
    - Parser policies (unknown transforms, per-node callbacks)
    - Logging level of the engine's loggers
    - XML loader flags
    - Dictionary file loading (JSON and YAML) with caching
    - Environment variable handling
    """

    def __init__(self, base_config_path: Optional[Union[str, Path]] = None):
        """
        Initialize the centralized configuration manager.

        Args:
            base_config_path: Base path for configuration files. If None, uses current directory.
        """
        self.logger = logging.getLogger(__name__)

        self.paths = ConfigPaths.from_environment(base_config_path)
        self.settings = ParserSettings.from_environment()

        self._dictionary_cache: Dict[str, Dict[str, DictionaryEntry]] = {}

        self.logger.info(f"ConfigManager initialized with base path: {self.paths.base_config_path}")
        self.logger.debug(f"Parser settings: {self.settings}")

    def get_settings(self) -> ParserSettings:
        return self.settings

    def get_parser_config(self, namespaces: Optional[Dict[str, str]] = None) -> ParserConfig:
        """
        Get parser configuration with environment-configured policies.

        Args:
            namespaces: Optional prefix to URI mapping for XPath selectors

        Returns:
            ParserConfig object

        Raises:
            ConfigurationError: If a policy name is not recognized
        """
        try:
            return ParserConfig(
                per_node_policy=self.settings.per_node_policy,
                unknown_transform_policy=self.settings.unknown_transform_policy,
                namespaces=dict(namespaces or {})
            )
        except ValueError as e:
            raise ConfigurationError(f"Invalid parser policy: {e}")

    def configure_logging(self) -> None:
        """Apply the configured log level to the engine's package logger (handlers are left alone)."""
        level = logging.getLevelName(self.settings.log_level)
        if not isinstance(level, int):
            raise ConfigurationError(f"Unknown log level: {self.settings.log_level}")
        logging.getLogger(PACKAGE_LOGGER_NAME).setLevel(level)

    def load_dictionary(self, dictionary_path: Optional[str] = None) -> Dict[str, DictionaryEntry]:
        """
        Load a dictionary file with caching.

        Args:
            dictionary_path: Optional path to a .json, .yaml or .yml file, relative to the
                             base configuration path. If None, uses the configured default.

        Returns:
            Dictionary of keys to DictionaryEntry objects

        Raises:
            ConfigurationError: If the file is missing, unreadable or not a valid dictionary
        """
        if dictionary_path is None:
            dictionary_path = self.paths.dictionary_path

        if dictionary_path in self._dictionary_cache:
            self.logger.debug(f"Returning cached dictionary for {dictionary_path}")
            return self._dictionary_cache[dictionary_path]

        full_path = self.paths.base_config_path / dictionary_path

        if not full_path.exists():
            raise ConfigurationError(f"Dictionary file not found: {full_path}")

        try:
            with open(full_path, 'r', encoding='utf-8') as file:
                if full_path.suffix.lower() in ['.yaml', '.yml']:
                    dictionary_data = yaml.safe_load(file)
                elif full_path.suffix.lower() == '.json':
                    dictionary_data = json.load(file)
                else:
                    raise ConfigurationError(f"Unsupported file format: {full_path.suffix}")
        except (json.JSONDecodeError, yaml.YAMLError) as e:
            raise ConfigurationError(f"Failed to parse dictionary file {full_path}: {e}")
        except OSError as e:
            raise ConfigurationError(f"Failed to read dictionary file {full_path}: {e}")

        try:
            dictionary = build_dictionary(dictionary_data or {})
        except DictionaryError as e:
            raise ConfigurationError(f"Invalid dictionary in {full_path}: {e}", entry_key=e.entry_key)

        self._dictionary_cache[dictionary_path] = dictionary

        self.logger.info(f"Loaded dictionary with {len(dictionary)} entries from {dictionary_path}")
        return dictionary

    def validate_configuration(self) -> bool:
        """
        Validate all configuration settings.

        Returns:
            True if all configurations are valid

        Raises:
            ConfigurationError: If any configuration is invalid
        """
        errors = []

        try:
            ParserConfig(
                per_node_policy=self.settings.per_node_policy,
                unknown_transform_policy=self.settings.unknown_transform_policy
            )
        except ValueError as e:
            errors.append(f"Invalid parser policy: {e}")

        if not isinstance(logging.getLevelName(self.settings.log_level), int):
            errors.append(f"Unknown log level: {self.settings.log_level}")

        if not self.paths.base_config_path.exists():
            errors.append(f"Base configuration path does not exist: {self.paths.base_config_path}")

        if errors:
            raise ConfigurationError(f"Configuration validation failed: {'; '.join(errors)}")

        self.logger.info("Configuration validation passed")
        return True

    def get_configuration_summary(self) -> Dict[str, Any]:
        """
        Get a summary of all configuration settings.

        Returns:
            Dictionary containing configuration summary
        """
        return {
            'parser': {
                'unknown_transform_policy': self.settings.unknown_transform_policy,
                'per_node_policy': self.settings.per_node_policy,
                'log_level': self.settings.log_level,
                'recover': self.settings.recover
            },
            'paths': {
                'base_config_path': str(self.paths.base_config_path),
                'dictionary_path': self.paths.dictionary_path
            },
            'cached_dictionaries': sorted(self._dictionary_cache)
        }

    def clear_cache(self) -> None:
        """Clear all cached dictionaries."""
        self._dictionary_cache.clear()
        self.logger.info("Configuration cache cleared")

    def reload_configuration(self) -> None:
        """Reload configuration from environment variables and clear cache."""
        self.settings = ParserSettings.from_environment()
        self.clear_cache()
        self.logger.info("Configuration reloaded from environment variables")


# Global configuration manager instance
_global_config_manager: Optional[ConfigManager] = None


def get_config_manager(base_config_path: Optional[Union[str, Path]] = None) -> ConfigManager:
    """
    Get the global configuration manager instance.

    Args:
        base_config_path: Base path for configuration files. Only used on first call.

    Returns:
        Global ConfigManager instance
    """
    global _global_config_manager

    if _global_config_manager is None:
        _global_config_manager = ConfigManager(base_config_path)

    return _global_config_manager


def reset_config_manager() -> None:
    """Reset the global configuration manager instance."""
    global _global_config_manager
    _global_config_manager = None

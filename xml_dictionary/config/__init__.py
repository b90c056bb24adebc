"""Configuration management components."""

from .config_manager import ConfigManager, ParserSettings, ConfigPaths, get_config_manager, reset_config_manager
from .parser_defaults import ParserDefaults

__all__ = ['ConfigManager', 'ParserSettings', 'ConfigPaths', 'ParserDefaults', 'get_config_manager', 'reset_config_manager']

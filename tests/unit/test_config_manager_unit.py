"""
Tests for the centralized ConfigManager.

This module tests the configuration management system to ensure it properly
handles environment variables, dictionary file loading and caching, logging
setup and the global instance.
"""

import json
import logging
import os
import shutil
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from xml_dictionary.config.config_manager import (
    ConfigManager,
    ConfigPaths,
    ParserSettings,
    PACKAGE_LOGGER_NAME,
    get_config_manager,
    reset_config_manager,
)
from xml_dictionary.config.parser_defaults import ParserDefaults
from xml_dictionary.exceptions import ConfigurationError
from xml_dictionary.models import DictionaryEntry, PerNodePolicy, UnknownTransformPolicy


DICTIONARY_YAML = """
type:
  xpath: /document/type/@class
main_author:
  xpath: "//authors/author[@role='main']"
  process: parse
  dictionary:
    givenname:
      xpath: ./first
    surname:
      xpath: ./last
"""


class TestParserSettings(unittest.TestCase):
    """Test ParserSettings class."""

    def test_default_settings(self):
        """Test default parser settings."""
        with patch.dict(os.environ, {}, clear=True):
            settings = ParserSettings.from_environment()

        self.assertEqual(settings.unknown_transform_policy, 'null')
        self.assertEqual(settings.per_node_policy, 'last_wins')
        self.assertEqual(settings.log_level, 'WARNING')
        self.assertFalse(settings.recover)

    def test_environment_variable_override(self):
        """Test parser settings from environment variables."""
        env = {
            'XML_DICTIONARY_UNKNOWN_TRANSFORM': 'STRICT',
            'XML_DICTIONARY_PER_NODE_POLICY': ' collect_all ',
            'XML_DICTIONARY_LOG_LEVEL': 'debug',
            'XML_DICTIONARY_RECOVER': 'yes',
        }
        with patch.dict(os.environ, env, clear=True):
            settings = ParserSettings.from_environment()

        self.assertEqual(settings.unknown_transform_policy, 'strict')
        self.assertEqual(settings.per_node_policy, 'collect_all')
        self.assertEqual(settings.log_level, 'DEBUG')
        self.assertTrue(settings.recover)


class TestConfigPaths(unittest.TestCase):
    """Test ConfigPaths class."""

    def test_explicit_base_path_wins(self):
        with patch.dict(os.environ, {'XML_DICTIONARY_CONFIG_PATH': '/elsewhere'}, clear=True):
            paths = ConfigPaths.from_environment('/explicit')

        self.assertEqual(paths.base_config_path, Path('/explicit'))
        self.assertEqual(paths.dictionary_path, ParserDefaults.DICTIONARY_PATH)

    def test_environment_paths(self):
        env = {
            'XML_DICTIONARY_CONFIG_PATH': '/configured',
            'XML_DICTIONARY_DICTIONARY_PATH': 'dictionaries/article.json',
        }
        with patch.dict(os.environ, env, clear=True):
            paths = ConfigPaths.from_environment()

        self.assertEqual(paths.base_config_path, Path('/configured'))
        self.assertEqual(paths.dictionary_path, 'dictionaries/article.json')


class TestConfigManager(unittest.TestCase):
    """Test ConfigManager class."""

    def setUp(self):
        """Set up a temporary configuration directory with dictionary files."""
        reset_config_manager()

        self.temp_dir = tempfile.mkdtemp()
        self.temp_path = Path(self.temp_dir)

        (self.temp_path / 'article.yaml').write_text(DICTIONARY_YAML, encoding='utf-8')
        with open(self.temp_path / 'article.json', 'w', encoding='utf-8') as f:
            json.dump({'title': {'xpath': "//title[@lang='en']", 'transform': 'merge'}}, f)

        self.package_logger = logging.getLogger(PACKAGE_LOGGER_NAME)
        self.original_level = self.package_logger.level

    def tearDown(self):
        """Clean up test environment."""
        shutil.rmtree(self.temp_dir, ignore_errors=True)
        self.package_logger.setLevel(self.original_level)
        reset_config_manager()

    def test_config_manager_initialization(self):
        """Test ConfigManager initialization."""
        config_manager = ConfigManager(self.temp_path)

        self.assertEqual(config_manager.paths.base_config_path, self.temp_path)
        self.assertIsNotNone(config_manager.get_settings())

    def test_get_parser_config_defaults(self):
        config = ConfigManager(self.temp_path).get_parser_config({'dc': 'http://purl.org/dc/elements/1.1/'})

        self.assertIs(config.per_node_policy, PerNodePolicy.LAST_WINS)
        self.assertIs(config.unknown_transform_policy, UnknownTransformPolicy.NULL)
        self.assertEqual(config.namespaces, {'dc': 'http://purl.org/dc/elements/1.1/'})

    def test_get_parser_config_from_environment(self):
        env = {'XML_DICTIONARY_UNKNOWN_TRANSFORM': 'strict', 'XML_DICTIONARY_PER_NODE_POLICY': 'collect_all'}
        with patch.dict(os.environ, env):
            config = ConfigManager(self.temp_path).get_parser_config()

        self.assertIs(config.per_node_policy, PerNodePolicy.COLLECT_ALL)
        self.assertIs(config.unknown_transform_policy, UnknownTransformPolicy.STRICT)

    def test_invalid_policy_raises_configuration_error(self):
        with patch.dict(os.environ, {'XML_DICTIONARY_PER_NODE_POLICY': 'first_wins'}):
            config_manager = ConfigManager(self.temp_path)

        with self.assertRaises(ConfigurationError):
            config_manager.get_parser_config()
        with self.assertRaises(ConfigurationError):
            config_manager.validate_configuration()

    def test_load_yaml_dictionary(self):
        dictionary = ConfigManager(self.temp_path).load_dictionary('article.yaml')

        self.assertEqual(list(dictionary), ['type', 'main_author'])
        self.assertIsInstance(dictionary['main_author'], DictionaryEntry)
        self.assertEqual(dictionary['main_author'].transform.name, 'parse')
        self.assertEqual(list(dictionary['main_author'].dictionary), ['givenname', 'surname'])

    def test_load_json_dictionary(self):
        dictionary = ConfigManager(self.temp_path).load_dictionary('article.json')

        self.assertEqual(dictionary['title'].xpath, "//title[@lang='en']")

    def test_default_dictionary_path_from_environment(self):
        with patch.dict(os.environ, {'XML_DICTIONARY_DICTIONARY_PATH': 'article.json'}):
            config_manager = ConfigManager(self.temp_path)

        self.assertEqual(list(config_manager.load_dictionary()), ['title'])

    def test_load_dictionary_with_caching(self):
        """Test dictionary loading with caching."""
        config_manager = ConfigManager(self.temp_path)

        first = config_manager.load_dictionary('article.yaml')
        second = config_manager.load_dictionary('article.yaml')

        self.assertIs(first, second)

    def test_missing_dictionary_file(self):
        with self.assertRaises(ConfigurationError):
            ConfigManager(self.temp_path).load_dictionary('missing.yaml')

    def test_unsupported_dictionary_format(self):
        (self.temp_path / 'article.txt').write_text('type: x', encoding='utf-8')

        with self.assertRaises(ConfigurationError):
            ConfigManager(self.temp_path).load_dictionary('article.txt')

    def test_unparseable_dictionary_file(self):
        (self.temp_path / 'broken.json').write_text('{"type": ', encoding='utf-8')

        with self.assertRaises(ConfigurationError):
            ConfigManager(self.temp_path).load_dictionary('broken.json')

    def test_invalid_dictionary_entry_reports_key(self):
        (self.temp_path / 'invalid.yaml').write_text('broken:\n  process: bool\n', encoding='utf-8')

        with self.assertRaises(ConfigurationError) as context:
            ConfigManager(self.temp_path).load_dictionary('invalid.yaml')

        self.assertEqual(context.exception.entry_key, 'broken')

    def test_configuration_validation(self):
        """Test configuration validation."""
        self.assertTrue(ConfigManager(self.temp_path).validate_configuration())

    def test_validation_reports_missing_base_path(self):
        with self.assertRaises(ConfigurationError):
            ConfigManager(self.temp_path / 'nowhere').validate_configuration()

    def test_configuration_summary(self):
        """Test configuration summary."""
        config_manager = ConfigManager(self.temp_path)
        config_manager.load_dictionary('article.json')

        summary = config_manager.get_configuration_summary()

        self.assertIn('parser', summary)
        self.assertIn('paths', summary)
        self.assertEqual(summary['parser']['per_node_policy'], 'last_wins')
        self.assertEqual(summary['cached_dictionaries'], ['article.json'])

    def test_configure_logging(self):
        with patch.dict(os.environ, {'XML_DICTIONARY_LOG_LEVEL': 'DEBUG'}):
            config_manager = ConfigManager(self.temp_path)

        config_manager.configure_logging()

        self.assertEqual(self.package_logger.level, logging.DEBUG)

    def test_configure_logging_rejects_unknown_level(self):
        with patch.dict(os.environ, {'XML_DICTIONARY_LOG_LEVEL': 'CHATTY'}):
            config_manager = ConfigManager(self.temp_path)

        with self.assertRaises(ConfigurationError):
            config_manager.configure_logging()

    def test_cache_clearing(self):
        """Test cache clearing functionality."""
        config_manager = ConfigManager(self.temp_path)
        config_manager.load_dictionary('article.yaml')

        config_manager.clear_cache()

        self.assertEqual(len(config_manager._dictionary_cache), 0)

    def test_reload_configuration(self):
        config_manager = ConfigManager(self.temp_path)
        config_manager.load_dictionary('article.yaml')

        with patch.dict(os.environ, {'XML_DICTIONARY_UNKNOWN_TRANSFORM': 'strict'}):
            config_manager.reload_configuration()

        self.assertEqual(config_manager.get_settings().unknown_transform_policy, 'strict')
        self.assertEqual(len(config_manager._dictionary_cache), 0)


class TestParserDefaults(unittest.TestCase):
    """Test ParserDefaults export helpers."""

    def test_to_dict(self):
        defaults = ParserDefaults.to_dict()

        self.assertEqual(defaults['PER_NODE_POLICY'], 'last_wins')
        self.assertEqual(defaults['UNKNOWN_TRANSFORM_POLICY'], 'null')
        self.assertNotIn('to_dict', defaults)

    def test_log_summary(self):
        logger = logging.getLogger('xml_dictionary.tests')
        with self.assertLogs(logger, level='INFO') as captured:
            ParserDefaults.log_summary(logger)

        self.assertIn('PER_NODE_POLICY: last_wins', captured.output[0])


class TestGlobalConfigManager(unittest.TestCase):
    """Test global config manager functions."""

    def setUp(self):
        """Set up test environment."""
        reset_config_manager()

    def tearDown(self):
        """Clean up test environment."""
        reset_config_manager()

    def test_get_config_manager_singleton(self):
        """Test that get_config_manager returns singleton instance."""
        manager1 = get_config_manager()
        manager2 = get_config_manager()

        self.assertIs(manager1, manager2)

    def test_reset_config_manager(self):
        """Test resetting global config manager."""
        manager1 = get_config_manager()
        reset_config_manager()
        manager2 = get_config_manager()

        self.assertIsNot(manager1, manager2)


if __name__ == '__main__':
    unittest.main()

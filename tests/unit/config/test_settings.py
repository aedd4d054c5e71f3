"""Tests for settings layering and environment normalization."""

import os
from pathlib import Path

from fetchyourkeys.config import DEV, PROD, load_settings, normalize_environment
from fetchyourkeys.config.settings import DEFAULT_BASE_URL, DEFAULT_TIMEOUT
from ..base import API_KEY, BaseCacheTest


class TestNormalizeEnvironment(BaseCacheTest):

    def test_aliases(self):
        self.assertEqual(normalize_environment('development'), DEV)
        self.assertEqual(normalize_environment('PRODUCTION'), PROD)
        self.assertEqual(normalize_environment(' prod '), PROD)
        self.assertEqual(normalize_environment(None), DEV)

    def test_unknown_value_warns(self):
        with self.assertLogs('fetchyourkeys.config.settings', level='WARNING'):
            self.assertEqual(normalize_environment('staging'), DEV)


class TestLoadSettings(BaseCacheTest):

    def write_config(self, text):
        path = Path(self.cache_root) / 'fetchyourkeys.yaml'
        path.write_text(text)
        return path

    def test_defaults(self):
        settings = load_settings(Path(self.cache_root) / 'missing.yaml')
        self.assertIsNone(settings.api_key)
        self.assertEqual(settings.base_url, DEFAULT_BASE_URL)
        self.assertEqual(settings.environment, DEV)
        self.assertEqual(settings.timeout, DEFAULT_TIMEOUT)
        self.assertFalse(settings.debug)

    def test_yaml_file(self):
        path = self.write_config(
            "fetchyourkeys:\n"
            "  environment: production\n"
            "  timeout: 3\n"
            "  unknown_option: ignored\n"
        )
        settings = load_settings(path)
        self.assertEqual(settings.environment, PROD)
        self.assertEqual(settings.timeout, 3.0)

    def test_environment_overrides_file(self):
        path = self.write_config("environment: prod\nbase_url: https://file.example.test\n")
        os.environ['FYK_SECRET_KEY'] = API_KEY
        os.environ['FYK_ENVIRONMENT'] = 'dev'
        os.environ['FYK_DEBUG'] = 'true'
        settings = load_settings(path)
        self.assertEqual(settings.api_key, API_KEY)
        self.assertEqual(settings.environment, DEV)
        self.assertEqual(settings.base_url, 'https://file.example.test')
        self.assertTrue(settings.debug)

    def test_arguments_override_environment(self):
        os.environ['FYK_BASE_URL'] = 'https://env.example.test'
        settings = load_settings(Path(self.cache_root) / 'missing.yaml',
                                 base_url='https://arg.example.test', api_key=None)
        self.assertEqual(settings.base_url, 'https://arg.example.test')
        self.assertIsNone(settings.api_key)

    def test_invalid_yaml_is_ignored(self):
        path = self.write_config("environment: [unclosed\n")
        with self.assertLogs('fetchyourkeys.config.settings', level='WARNING'):
            settings = load_settings(path)
        self.assertEqual(settings.environment, DEV)

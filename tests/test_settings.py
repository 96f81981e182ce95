"""
Unit tests for environment-based configuration
"""
import os
import tempfile
import unittest
from unittest.mock import patch

from config.settings import (
    ConfigurationError, get_navigation_config, get_location_config, get_app_config
)


class TestNavigationConfig(unittest.TestCase):
    
    @patch.dict(os.environ, {}, clear=True)
    def test_defaults(self):
        config = get_navigation_config()
        self.assertEqual(config['arrival_threshold'], 15.0)
        self.assertEqual(config['update_interval_ms'], 2000)
        self.assertEqual(config['timeout_s'], 4.0)
        self.assertTrue(config['high_accuracy'])
        self.assertEqual(config['maximum_age_s'], 0.0)
        self.assertTrue(config['retain_heading'])
        self.assertEqual(config['path_file'], "")
    
    @patch.dict(os.environ, {
        'NAV_ARRIVAL_THRESHOLD_M': '8.5',
        'NAV_UPDATE_INTERVAL_MS': '500',
        'NAV_HIGH_ACCURACY': 'false',
        'NAV_RETAIN_HEADING': 'no',
    }, clear=True)
    def test_overrides(self):
        config = get_navigation_config()
        self.assertEqual(config['arrival_threshold'], 8.5)
        self.assertEqual(config['timeout_s'], 1.0)
        self.assertFalse(config['high_accuracy'])
        self.assertFalse(config['retain_heading'])
    
    @patch.dict(os.environ, {'NAV_ARRIVAL_THRESHOLD_M': 'far'}, clear=True)
    def test_invalid_number(self):
        with self.assertRaises(ConfigurationError):
            get_navigation_config()
    
    @patch.dict(os.environ, {'NAV_ARRIVAL_THRESHOLD_M': '0'}, clear=True)
    def test_non_positive_threshold(self):
        with self.assertRaises(ConfigurationError):
            get_navigation_config()
    
    @patch.dict(os.environ, {'NAV_PATH_FILE': '/nonexistent/path.json'}, clear=True)
    def test_missing_path_file_is_blanked(self):
        self.assertEqual(get_navigation_config()['path_file'], "")
    
    def test_existing_path_file(self):
        with tempfile.NamedTemporaryFile(suffix='.json') as f:
            with patch.dict(os.environ, {'NAV_PATH_FILE': f.name}, clear=True):
                self.assertEqual(get_navigation_config()['path_file'], f.name)


class TestLocationConfig(unittest.TestCase):
    
    @patch.dict(os.environ, {}, clear=True)
    def test_defaults(self):
        config = get_location_config()
        self.assertEqual(config['source'], 'nmea')
        self.assertEqual(config['port'], '/dev/ttyS0')
        self.assertEqual(config['baudrate'], 9600)
    
    @patch.dict(os.environ, {'LOCATION_SOURCE': 'bluetooth'}, clear=True)
    def test_unknown_source(self):
        with self.assertRaises(ConfigurationError):
            get_location_config()
    
    @patch.dict(os.environ, {'LOCATION_SOURCE': 'replay'}, clear=True)
    def test_replay_requires_file(self):
        with self.assertRaises(ConfigurationError):
            get_location_config()
    
    @patch.dict(os.environ, {'LOCATION_SOURCE': 'Manual'}, clear=True)
    def test_source_is_case_insensitive(self):
        self.assertEqual(get_location_config()['source'], 'manual')


class TestAppConfig(unittest.TestCase):
    
    @patch.dict(os.environ, {}, clear=True)
    def test_defaults(self):
        config = get_app_config()
        self.assertEqual(config['port'], 5002)
        self.assertFalse(config['debug'])
        self.assertEqual(config['session_log_dir'], "")
    
    @patch.dict(os.environ, {'FLASK_PORT': 'http'}, clear=True)
    def test_invalid_port(self):
        with self.assertRaises(ConfigurationError):
            get_app_config()


if __name__ == '__main__':
    unittest.main()

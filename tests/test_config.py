"""
Tests for the config module.
"""
import unittest
import sys
import os
from unittest.mock import patch

# Add the parent directory to the path so we can import the application modules
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from config import Config


class TestConfig(unittest.TestCase):
    """Test cases for the Config class."""

    def test_defaults(self):
        cfg = Config(load_from_env=False)
        self.assertEqual(cfg.INVIDIOUS_INSTANCE, "")
        self.assertEqual(cfg.PLAYLIST_ITEM_LIMIT, 2000)
        self.assertEqual(cfg.RAW_BODY_LOG_CHARS, 1000)
        self.assertEqual(cfg.API_TIMEOUT_SECONDS, 20.0)

    def test_defaults_are_not_shared(self):
        first = Config(load_from_env=False)
        second = Config(load_from_env=False)
        first.ALLOWED_ORIGINS.append("https://example.org")
        self.assertNotIn("https://example.org", second.ALLOWED_ORIGINS)

    @patch.dict(os.environ, {
        "INVIDIOUS_INSTANCE": " https://invidious.example.org ",
        "USER_AGENT": "mediaquery/1.0",
        "PLAYLIST_ITEM_LIMIT": "500",
        "API_TIMEOUT_SECONDS": "7.5",
        "ALLOWED_ORIGINS": "https://a.example, https://b.example,",
    })
    def test_load_from_env(self):
        cfg = Config()
        self.assertEqual(cfg.INVIDIOUS_INSTANCE, "https://invidious.example.org")
        self.assertEqual(cfg.USER_AGENT, "mediaquery/1.0")
        self.assertEqual(cfg.PLAYLIST_ITEM_LIMIT, 500)
        self.assertEqual(cfg.API_TIMEOUT_SECONDS, 7.5)
        self.assertEqual(cfg.ALLOWED_ORIGINS, ["https://a.example", "https://b.example"])

    @patch.dict(os.environ, {"PLAYLIST_ITEM_LIMIT": "lots"})
    def test_invalid_integer_keeps_default(self):
        with self.assertLogs("config", level="WARNING"):
            cfg = Config()
        self.assertEqual(cfg.PLAYLIST_ITEM_LIMIT, 2000)

    @patch.dict(os.environ, {"API_TIMEOUT_SECONDS": "soon"})
    def test_invalid_float_keeps_default(self):
        cfg = Config(load_from_env=False)
        self.assertFalse(cfg._load_float_from_env("API_TIMEOUT_SECONDS"))
        self.assertEqual(cfg.API_TIMEOUT_SECONDS, 20.0)


if __name__ == '__main__':
    unittest.main()

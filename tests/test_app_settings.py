"""Unit tests for environment-driven settings."""

import os
import unittest
from pathlib import Path
from unittest.mock import patch

from utils.app_settings import AppSettings

MISSING_ENV = os.path.join(os.path.dirname(__file__), "missing.env")


class TestAppSettings(unittest.TestCase):
    def test_defaults(self):
        with patch.dict(os.environ, {"DATABASE_DIR": "/tmp/lostfound"}, clear=True):
            settings = AppSettings.from_env(MISSING_ENV)
        self.assertEqual(settings.database_dir, Path("/tmp/lostfound"))
        self.assertEqual(settings.storage_dir, Path("/tmp/lostfound/objects"))
        self.assertEqual(settings.label_max, 10)
        self.assertEqual(settings.label_min_confidence, 70.0)
        self.assertFalse(settings.label_cache_enabled)
        self.assertFalse(settings.abort_on_upload_failure)
        self.assertEqual(settings.session_ttl_seconds, 3600)

    def test_overrides(self):
        env = {
            "DATABASE_DIR": "/tmp/lostfound",
            "STORAGE_BUCKET": "campus",
            "STORAGE_REGION": "us-east-1",
            "LABEL_MAX": "3",
            "LABEL_MIN_CONFIDENCE": "85.5",
            "LABEL_CACHE_ENABLED": "yes",
            "LOG_LEVEL": "debug",
        }
        with patch.dict(os.environ, env, clear=True):
            settings = AppSettings.from_env(MISSING_ENV)
        self.assertEqual(settings.storage_bucket, "campus")
        self.assertEqual(settings.storage_region, "us-east-1")
        self.assertEqual(settings.label_max, 3)
        self.assertEqual(settings.label_min_confidence, 85.5)
        self.assertTrue(settings.label_cache_enabled)
        self.assertEqual(settings.log_level, "DEBUG")

    def test_database_dir_required(self):
        with patch.dict(os.environ, {}, clear=True):
            with self.assertRaises(RuntimeError):
                AppSettings.from_env(MISSING_ENV)

    def test_bad_integer(self):
        with patch.dict(os.environ, {"DATABASE_DIR": "/tmp/x", "LABEL_MAX": "many"}, clear=True):
            with self.assertRaises(RuntimeError):
                AppSettings.from_env(MISSING_ENV)


if __name__ == "__main__":
    unittest.main()

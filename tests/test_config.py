from __future__ import annotations

import logging
import os
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from habit_tracker.config import Environment, LogLevel, TrackerConfig
from habit_tracker.utils.logger import setup_logging


class TestTrackerConfig(unittest.TestCase):
    def test_defaults(self) -> None:
        with patch.dict(os.environ, {}, clear=True):
            cfg = TrackerConfig()
        self.assertEqual(cfg.environment, Environment.DEVELOPMENT)
        self.assertEqual(cfg.log_level, LogLevel.INFO)
        self.assertEqual(cfg.storage.store_file, Path("data") / "habit_store.json")
        self.assertFalse(cfg.remote.enabled)
        self.assertIsNone(cfg.remote.request_timeout)
        self.assertIsNone(cfg.timezone)

    def test_remote_settings_from_env(self) -> None:
        env = {
            "ATLAS_APP_ID": "data-abcde",
            "ATLAS_API_KEY": "key-123456789",
            "ATLAS_CLUSTER": "Cluster9",
            "REMOTE_TIMEOUT": "12.5",
        }
        with patch.dict(os.environ, env, clear=True):
            cfg = TrackerConfig()
        self.assertTrue(cfg.remote.enabled)
        self.assertEqual(cfg.remote.data_source, "Cluster9")
        self.assertEqual(cfg.remote.request_timeout, 12.5)
        self.assertEqual(
            cfg.remote.endpoint,
            "https://data.mongodb-api.com/app/data-abcde/endpoint/data/v1/action",
        )
        self.assertEqual(cfg.to_dict()["remote"]["api_key"], "key-12...")

    def test_half_configured_remote_stays_disabled(self) -> None:
        with patch.dict(os.environ, {"ATLAS_APP_ID": "data-abcde"}, clear=True):
            cfg = TrackerConfig()
        self.assertFalse(cfg.remote.enabled)

    def test_validation_errors_are_collected(self) -> None:
        env = {"TIMEZONE": "Mars/Olympus", "MAX_BACKUPS": "0"}
        with patch.dict(os.environ, env, clear=True):
            with self.assertRaises(ValueError) as ctx:
                TrackerConfig()
        self.assertIn("TIMEZONE", str(ctx.exception))
        self.assertIn("MAX_BACKUPS", str(ctx.exception))

    def test_logging_config_with_file_handler(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            env = {"LOG_TO_FILE": "true", "LOG_DIR": td, "LOG_LEVEL": "debug"}
            with patch.dict(os.environ, env, clear=True):
                cfg = TrackerConfig()
            config = cfg.get_logging_config()
            self.assertEqual(config["loggers"][""]["handlers"], ["console", "file"])
            self.assertEqual(config["handlers"]["file"]["class"], "logging.handlers.RotatingFileHandler")

            root = logging.getLogger()
            saved_handlers, saved_level = root.handlers[:], root.level
            try:
                setup_logging(cfg)
                logging.getLogger("habit_tracker.test").debug("hello")
                self.assertTrue((Path(td) / "habit_tracker_development.log").exists())
            finally:
                for handler in root.handlers:
                    if handler not in saved_handlers:
                        handler.close()
                root.handlers[:] = saved_handlers
                root.setLevel(saved_level)


if __name__ == "__main__":
    unittest.main(verbosity=2)

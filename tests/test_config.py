# -*- coding: utf-8 -*-

import logging
import os
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from rootify import config
from rootify.launch import build_log_config, configure_logging


class TestConfig(unittest.TestCase):
    def test_data_dir_from_env(self):
        with tempfile.TemporaryDirectory() as td:
            with patch.dict(os.environ, {"ROOTIFY_DATA_DIR": td, "ROOTIFY_DB_NAME": "roots.db"}):
                s = config.load_settings()
            self.assertEqual(s.data_dir, Path(td).resolve())
            self.assertEqual(s.db_path, Path(td).resolve() / "roots.db")
            self.assertEqual(s.log_path, Path(td).resolve() / "logs" / "rootify.log")

    def test_defaults(self):
        with patch.dict(os.environ, {}, clear=True):
            with patch.object(config.Path, "home", return_value=Path("/home/someone")):
                s = config.load_settings()
                data_dir = config.app_data_dir("linux")
        self.assertEqual(data_dir, Path("/home/someone/.config/rootify"))
        self.assertEqual(s.db_name, "rootify.db")
        self.assertEqual(s.cors_origins, tuple(config.DEFAULT_CORS_ORIGINS))
        self.assertEqual(s.history_limit, 100)
        self.assertEqual(s.port, 8000)

    def test_cors_and_int_env(self):
        env = {
            "ROOTIFY_DATA_DIR": "/tmp/rootify",
            "CORS_ORIGINS": "https://a.example, https://b.example,,",
            "ROOTIFY_PORT": "9001",
            "ROOTIFY_HISTORY_LIMIT": "not a number",
        }
        with patch.dict(os.environ, env, clear=True):
            s = config.load_settings()
        self.assertEqual(s.cors_origins, ("https://a.example", "https://b.example"))
        self.assertEqual(s.port, 9001)
        self.assertEqual(s.history_limit, 100)

    def test_platform_data_dirs(self):
        with patch.object(config.Path, "home", return_value=Path("/Users/someone")):
            self.assertEqual(
                config.app_data_dir("darwin"),
                Path("/Users/someone/Library/Application Support/rootify"),
            )
        with patch.dict(os.environ, {"APPDATA": "/appdata"}):
            self.assertEqual(config.app_data_dir("win32"), Path("/appdata") / "rootify")
        with patch.dict(os.environ, {}, clear=True):
            with self.assertRaises(RuntimeError):
                config.app_data_dir("win32")


class TestLogging(unittest.TestCase):
    def test_log_config_routes_uvicorn(self):
        cfg = build_log_config(Path("/tmp/rootify.log"))
        self.assertIn("file", cfg["handlers"])
        self.assertIn("file", cfg["loggers"]["uvicorn.access"]["handlers"])
        self.assertEqual(cfg["root"]["level"], "INFO")

    def test_configure_logging_creates_log_dir(self):
        with tempfile.TemporaryDirectory() as td:
            s = config.Settings(data_dir=Path(td))
            path = configure_logging(s)
            self.assertTrue(path.parent.is_dir())
            # release the file handler so the temp dir can be removed
            for h in list(logging.getLogger().handlers):
                h.close()
                logging.getLogger().removeHandler(h)


if __name__ == "__main__":
    unittest.main()

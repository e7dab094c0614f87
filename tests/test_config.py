"""Tests for meter.config -- configuration persistence and validation."""

import os
import tempfile
import unittest
from unittest import mock

from meter.config import (
    DEFAULTS,
    get_config_value,
    load_config,
    save_config,
    set_config_value,
    validate_config,
)
from meter.exceptions import ConfigError


class TestConfigDefaults(unittest.TestCase):
    def test_defaults_have_required_keys(self):
        for key in ("ping_count", "ping_url", "download_url", "download_size",
                    "concurrency", "time_budget", "probe_timeout", "ramp_steps",
                    "ramp_interval", "history_file", "log_level"):
            self.assertIn(key, DEFAULTS)

    def test_defaults_are_valid(self):
        validate_config(dict(DEFAULTS))


class TestLoadSaveConfig(unittest.TestCase):
    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        path = os.path.join(self.tmp.name, "nested", "config.json")
        patcher = mock.patch("meter.config._config_path", return_value=path)
        patcher.start()
        self.addCleanup(patcher.stop)
        self.addCleanup(self.tmp.cleanup)
        self.path = path

    def test_load_defaults_when_missing(self):
        cfg = load_config()
        self.assertEqual(cfg["concurrency"], 4)
        self.assertEqual(cfg["time_budget"], 6.0)

    def test_save_and_load(self):
        save_config({"concurrency": 8, "ping_count": 10})
        cfg = load_config()
        self.assertEqual(cfg["concurrency"], 8)
        self.assertEqual(cfg["ping_count"], 10)
        # Defaults still present
        self.assertEqual(cfg["ramp_steps"], 20)

    def test_corrupt_file_returns_defaults(self):
        os.makedirs(os.path.dirname(self.path))
        with open(self.path, "w") as f:
            f.write("NOT JSON")
        with self.assertLogs("meter.config", level="WARNING"):
            cfg = load_config()
        self.assertEqual(cfg["concurrency"], 4)

    def test_get_set_value(self):
        set_config_value("time_budget", 12.5)
        self.assertEqual(get_config_value("time_budget"), 12.5)
        set_config_value("log_level", "DEBUG")
        self.assertEqual(get_config_value("log_level"), "DEBUG")

    def test_unknown_key_falls_back_to_none(self):
        self.assertIsNone(get_config_value("no_such_key"))


class TestValidateConfig(unittest.TestCase):
    def _cfg(self, **overrides):
        cfg = dict(DEFAULTS)
        cfg.update(overrides)
        return cfg

    def test_concurrency_range(self):
        validate_config(self._cfg(concurrency=1))
        validate_config(self._cfg(concurrency=32))
        with self.assertRaises(ConfigError):
            validate_config(self._cfg(concurrency=0))
        with self.assertRaises(ConfigError):
            validate_config(self._cfg(concurrency=33))

    def test_ping_count_range(self):
        with self.assertRaises(ConfigError):
            validate_config(self._cfg(ping_count=0))

    def test_time_budget_range(self):
        with self.assertRaises(ConfigError):
            validate_config(self._cfg(time_budget=0.5))
        with self.assertRaises(ConfigError):
            validate_config(self._cfg(time_budget=301))

    def test_non_numeric(self):
        with self.assertRaises(ConfigError):
            validate_config(self._cfg(concurrency="many"))

    def test_missing_key(self):
        cfg = self._cfg()
        del cfg["download_size"]
        with self.assertRaises(ConfigError) as cm:
            validate_config(cfg)
        self.assertIn("download_size", str(cm.exception))

    def test_empty_urls(self):
        with self.assertRaises(ConfigError):
            validate_config(self._cfg(download_url=""))

    def test_ramp_settings(self):
        with self.assertRaises(ConfigError):
            validate_config(self._cfg(ramp_steps=0))
        with self.assertRaises(ConfigError):
            validate_config(self._cfg(ramp_interval=-1))

    def test_config_error_is_value_error(self):
        self.assertTrue(issubclass(ConfigError, ValueError))


if __name__ == "__main__":
    unittest.main()

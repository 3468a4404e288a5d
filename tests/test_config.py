"""Tests for read-only config loading and input sanitization."""

from __future__ import annotations

import json
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from cargo_select import config


class ConfigBehaviorTests(unittest.TestCase):
    def _with_config(self, payload: object | None, raw: str | None = None):
        tmp = tempfile.TemporaryDirectory()
        self.addCleanup(tmp.cleanup)
        config_path = Path(tmp.name) / "config.json"
        if raw is not None:
            config_path.write_text(raw, encoding="utf-8")
        elif payload is not None:
            config_path.write_text(json.dumps(payload), encoding="utf-8")
        patcher = mock.patch("cargo_select.config.CONFIG_PATH", config_path)
        patcher.start()
        self.addCleanup(patcher.stop)

    def test_missing_config_uses_defaults(self) -> None:
        self._with_config(None)

        self.assertEqual(config.load_config(), {})
        self.assertIsNone(config.load_theme_name())
        self.assertEqual(config.load_skip_dirs(), ("target",))
        self.assertEqual(config.load_default_command(), "run")

    def test_malformed_or_non_object_config_is_ignored(self) -> None:
        for raw in ("{not json", "[1, 2]", '"text"'):
            with self.subTest(raw=raw):
                self._with_config(None, raw=raw)
                self.assertEqual(config.load_config(), {})

    def test_values_are_read_and_sanitized(self) -> None:
        self._with_config({"theme": "  ocean ", "skip_dirs": ["target", " vendor ", 3, ""], "default_command": "build"})

        self.assertEqual(config.load_theme_name(), "ocean")
        self.assertEqual(config.load_skip_dirs(), ("target", "vendor"))
        self.assertEqual(config.load_default_command(), "build")

    def test_configured_skip_dirs_extend_the_build_directory(self) -> None:
        for configured, expected in (([], ("target",)), (["vendor"], ("target", "vendor"))):
            with self.subTest(configured=configured):
                self._with_config({"skip_dirs": configured})
                self.assertEqual(config.load_skip_dirs(), expected)

    def test_wrong_types_fall_back(self) -> None:
        self._with_config({"theme": 5, "skip_dirs": "target", "default_command": ""})

        self.assertIsNone(config.load_theme_name())
        self.assertEqual(config.load_skip_dirs(), ("target",))
        self.assertEqual(config.load_default_command(), "run")


if __name__ == "__main__":
    unittest.main()

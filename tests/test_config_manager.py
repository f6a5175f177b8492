"""Tests for config_manager module."""

import json
import os
import tempfile

import pytest

from pdfsuite.utils.config_manager import DEFAULT_CONFIG, ConfigManager
from pdfsuite.utils.exceptions import ConfigurationError


class TestConfigManager:
    def _make_manager(self, tmp_dir, initial=None):
        path = os.path.join(tmp_dir, "config.json")
        if initial:
            with open(path, "w") as f:
                json.dump(initial, f)
        return ConfigManager(config_path=path)

    def test_get_default_value(self):
        with tempfile.TemporaryDirectory() as d:
            cm = self._make_manager(d)
            assert cm.get("nonexistent.key", "fallback") == "fallback"

    def test_defaults_written_on_first_run(self):
        with tempfile.TemporaryDirectory() as d:
            self._make_manager(d)
            with open(os.path.join(d, "config.json")) as f:
                assert json.load(f)["version"] == DEFAULT_CONFIG["version"]

    def test_set_and_get(self):
        with tempfile.TemporaryDirectory() as d:
            cm = self._make_manager(d)
            cm.set("watermark.text", "DRAFT", save_immediately=False)
            assert cm.get("watermark.text") == "DRAFT"

    def test_save_and_reload(self):
        with tempfile.TemporaryDirectory() as d:
            path = os.path.join(d, "config.json")
            cm = ConfigManager(config_path=path)
            cm.set("compress.image_quality", 42)
            # Reload from disk
            cm2 = ConfigManager(config_path=path)
            assert cm2.get("compress.image_quality") == 42

    def test_nested_key_path(self):
        with tempfile.TemporaryDirectory() as d:
            cm = self._make_manager(d)
            cm.set("a.b.c", 42, save_immediately=False)
            assert cm.get("a.b.c") == 42

    def test_set_through_value_raises(self):
        with tempfile.TemporaryDirectory() as d:
            cm = self._make_manager(d)
            with pytest.raises(ConfigurationError):
                cm.set("split.package_as_archive.nested", 1, save_immediately=False)

    def test_default_split_archives(self):
        with tempfile.TemporaryDirectory() as d:
            cm = self._make_manager(d)
            assert cm.get("split.package_as_archive") is True

    def test_old_config_upgraded(self):
        with tempfile.TemporaryDirectory() as d:
            initial = {"version": 0, "watermark": {"text": "SECRET"}}
            cm = self._make_manager(d, initial=initial)
            assert cm.get("watermark.text") == "SECRET"
            assert cm.get("watermark.opacity") == DEFAULT_CONFIG["watermark"]["opacity"]
            assert cm.get("version") == DEFAULT_CONFIG["version"]

    def test_corrupt_file_falls_back_to_defaults(self):
        with tempfile.TemporaryDirectory() as d:
            path = os.path.join(d, "config.json")
            with open(path, "w") as f:
                f.write("{not json")
            cm = ConfigManager(config_path=path)
            assert cm.get("numbering.position") == "bc"

    def test_output_prefix(self):
        with tempfile.TemporaryDirectory() as d:
            cm = self._make_manager(d)
            assert cm.output_prefix("delete") == "cleaned_"
            assert cm.output_prefix("unknown") == ""

    def test_save_returns_true(self):
        with tempfile.TemporaryDirectory() as d:
            cm = self._make_manager(d)
            assert cm.save() is True

"""
Tests for configuration validation and loading
"""

import os
import shutil
import tempfile
import unittest
from unittest.mock import patch

import yaml

from src.target_vision.config import (
    ConfigValidationError,
    ContourFilterSchema,
    ThresholdSchema,
    find_config_file,
    load_config,
    load_config_with_env,
    load_raw_config,
    validate_config_full,
)
from src.target_vision.models import ContourFilterConfig, FilterMode, ThresholdConfig


def minimal_config():
    return {"cameras": [{"name": "front", "source": 0}]}


class TestValidateConfigFull(unittest.TestCase):
    """Test validate_config_full() errors and warnings."""

    def test_minimal_config_valid(self):
        result = validate_config_full(minimal_config())

        self.assertTrue(result.valid, result.errors)
        self.assertEqual(result.derived["cameras"], ["front"])
        self.assertEqual(result.derived["telemetry"], {"front": ["log"]})

    def test_missing_cameras(self):
        result = validate_config_full({"runtime": {}})

        self.assertFalse(result.valid)
        self.assertIn("Missing required section: 'cameras'", result.errors)

    def test_empty_camera_list(self):
        self.assertFalse(validate_config_full({"cameras": []}).valid)

    def test_duplicate_camera_names(self):
        config = {"cameras": [{"name": "front", "source": 0}, {"name": "front", "source": 1}]}

        result = validate_config_full(config)

        self.assertFalse(result.valid)
        self.assertTrue(any("duplicate camera names: front" in e for e in result.errors))

    def test_unknown_field_rejected(self):
        config = minimal_config()
        config["cameras"][0]["colour"] = "green"

        result = validate_config_full(config)

        self.assertFalse(result.valid)
        self.assertTrue(any("colour" in e for e in result.errors))

    def test_bad_filter_mode(self):
        config = minimal_config()
        config["cameras"][0]["contour_filter"] = {"mode": "strict"}

        self.assertFalse(validate_config_full(config).valid)

    def test_telemetry_needs_type(self):
        config = minimal_config()
        config["cameras"][0]["telemetry"] = [{"path": "x.jsonl"}]

        self.assertFalse(validate_config_full(config).valid)

    def test_inverted_threshold_warns(self):
        config = minimal_config()
        config["cameras"][0]["threshold"] = {"hue": [95, 47]}

        result = validate_config_full(config)

        self.assertTrue(result.valid)
        self.assertTrue(any("threshold.hue" in w for w in result.warnings))

    def test_full_mode_fields_in_area_mode_warn(self):
        config = minimal_config()
        config["cameras"][0]["contour_filter"] = {"mode": "area", "max_width": 100}

        result = validate_config_full(config)

        self.assertTrue(result.valid)
        self.assertTrue(any("max_width ignored" in w for w in result.warnings))

    def test_unknown_sink_type_warns(self):
        config = minimal_config()
        config["cameras"][0]["telemetry"] = [{"type": "networktables"}]

        result = validate_config_full(config)

        self.assertTrue(result.valid)
        self.assertTrue(any("unknown sink type 'networktables'" in w for w in result.warnings))


class TestSchemaConversion(unittest.TestCase):
    """Test schema -> pipeline settings."""

    def test_threshold_defaults_match(self):
        self.assertEqual(ThresholdSchema().to_settings(), ThresholdConfig())

    def test_filter_defaults_match(self):
        self.assertEqual(ContourFilterSchema().to_settings(), ContourFilterConfig())

    def test_filter_conversion(self):
        settings = ContourFilterSchema(mode="full", min_area=10, solidity=[50, 90]).to_settings()

        self.assertIs(settings.mode, FilterMode.FULL)
        self.assertEqual(settings.min_area, 10.0)
        self.assertEqual(settings.solidity, (50.0, 90.0))


class TestConfigLoading(unittest.TestCase):
    """Test reading config files."""

    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()

    def tearDown(self):
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def write_yaml(self, name, data):
        path = os.path.join(self.temp_dir, name)
        with open(path, "w", encoding="utf-8") as f:
            yaml.safe_dump(data, f)
        return path

    def test_explicit_path_missing(self):
        with self.assertRaises(ConfigValidationError):
            find_config_file(os.path.join(self.temp_dir, "nope.yaml"))

    def test_load_valid(self):
        path = self.write_yaml("vision.yaml", minimal_config())

        config, result = load_config(path)

        self.assertEqual(config.cameras[0].name, "front")
        self.assertEqual(config.cameras[0].resolution, (320, 240))
        self.assertTrue(result.valid)

    def test_load_invalid_raises_with_errors(self):
        path = self.write_yaml("vision.yaml", {"cameras": [{"name": "front"}]})

        with self.assertRaises(ConfigValidationError) as ctx:
            load_config(path)

        self.assertTrue(any("source" in e for e in ctx.exception.errors))

    def test_invalid_yaml(self):
        path = os.path.join(self.temp_dir, "broken.yaml")
        with open(path, "w", encoding="utf-8") as f:
            f.write("cameras: [\n")

        with self.assertRaises(ConfigValidationError):
            load_raw_config(path)

    def test_pointer_file(self):
        self.write_yaml("robot.yaml", minimal_config())
        pointer = self.write_yaml("vision.yaml", {"use": "robot.yaml"})

        config = load_raw_config(pointer)

        self.assertEqual(config["cameras"][0]["name"], "front")

    def test_camera_url_override(self):
        with patch.dict(os.environ, {"CAMERA_URL": "rtsp://10.0.0.5/stream"}):
            config = load_config_with_env(minimal_config())
        self.assertEqual(config["cameras"][0]["source"], "rtsp://10.0.0.5/stream")

        with patch.dict(os.environ, {"CAMERA_URL": "2"}):
            config = load_config_with_env(minimal_config())
        self.assertEqual(config["cameras"][0]["source"], 2)

    def test_no_override_without_env(self):
        with patch.dict(os.environ, {}, clear=True):
            config = load_config_with_env(minimal_config())

        self.assertEqual(config["cameras"][0]["source"], 0)


if __name__ == "__main__":
    unittest.main()

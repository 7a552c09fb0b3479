"""
Tests for live-tunable settings
"""

import threading
import unittest

from src.target_vision.core.config_state import RECOGNIZED_KEYS, ConfigState
from src.target_vision.models import ContourFilterConfig, FilterMode, ThresholdConfig


class TestConfigState(unittest.TestCase):
    """Test single and batch updates."""

    def setUp(self):
        self.state = ConfigState()

    def test_defaults(self):
        snapshot = self.state.snapshot()

        self.assertEqual(snapshot.threshold, ThresholdConfig())
        self.assertEqual(snapshot.contour_filter, ContourFilterConfig())
        self.assertEqual(snapshot.threshold.hue, (47.0, 95.0))
        self.assertEqual(snapshot.contour_filter.min_area, 50.0)

    def test_threshold_keys(self):
        updates = {
            "hueMin": 10, "hueMax": 20,
            "satMin": 30, "satMax": 40,
            "lumMin": 50, "lumMax": 60,
        }
        for key, value in updates.items():
            self.assertTrue(self.state.update(key, value))

        threshold = self.state.snapshot().threshold
        self.assertEqual(threshold.hue, (10.0, 20.0))
        self.assertEqual(threshold.saturation, (30.0, 40.0))
        self.assertEqual(threshold.luminance, (50.0, 60.0))

    def test_filter_keys(self):
        self.state.update("minArea", 120)
        self.state.update("maxArea", 5000)
        self.state.update("solidityMin", 60)
        self.state.update("maxRatio", 3.5)

        contour_filter = self.state.snapshot().contour_filter
        self.assertEqual(contour_filter.min_area, 120.0)
        self.assertEqual(contour_filter.max_area, 5000.0)
        self.assertEqual(contour_filter.solidity, (60.0, 100.0))
        self.assertEqual(contour_filter.max_ratio, 3.5)

    def test_max_area_cleared(self):
        for unbounded in (None, 0, -1, float("inf"), "inf"):
            self.state.update("maxArea", 5000)

            self.assertTrue(self.state.update("maxArea", unbounded))
            self.assertIsNone(self.state.snapshot().contour_filter.max_area, unbounded)

    def test_other_keys_reject_none(self):
        with self.assertLogs(level="WARNING"):
            self.assertFalse(self.state.update("minArea", None))

    def test_filter_mode_key(self):
        self.state.update("filterMode", 1)
        self.assertIs(self.state.snapshot().contour_filter.mode, FilterMode.FULL)

        self.state.update("filterMode", 0)
        self.assertIs(self.state.snapshot().contour_filter.mode, FilterMode.AREA_ONLY)

    def test_unknown_key_ignored(self):
        before = self.state.snapshot()

        self.assertFalse(self.state.update("exposureMagic", 5))
        self.assertIs(self.state.snapshot(), before)

    def test_non_numeric_value_ignored(self):
        before = self.state.snapshot()

        with self.assertLogs(level="WARNING"):
            self.assertFalse(self.state.update("hueMin", "lots"))
        self.assertIs(self.state.snapshot(), before)

    def test_inverted_values_accepted(self):
        self.state.update("hueMin", 120)

        self.assertEqual(self.state.snapshot().threshold.inverted_channels(), ["hue"])

    def test_update_many(self):
        applied = self.state.update_many({"hueMin": 50, "minArea": 75, "unknown": 1})

        self.assertEqual(applied, 2)
        snapshot = self.state.snapshot()
        self.assertEqual(snapshot.threshold.hue[0], 50.0)
        self.assertEqual(snapshot.contour_filter.min_area, 75.0)

    def test_held_snapshot_unchanged(self):
        """A reader's snapshot is not affected by later updates."""
        held = self.state.snapshot()
        self.state.update_many({"hueMin": 1, "hueMax": 2})

        self.assertEqual(held.threshold.hue, (47.0, 95.0))
        self.assertEqual(self.state.snapshot().threshold.hue, (1.0, 2.0))

    def test_recognized_keys(self):
        for key in ("hueMin", "lumMax", "minArea", "maxVertices", "filterMode"):
            self.assertIn(key, RECOGNIZED_KEYS)
        self.assertNotIn("brightness", RECOGNIZED_KEYS)


class TestConcurrentUpdates(unittest.TestCase):
    """Readers never see a half-applied batch."""

    def test_batches_never_tear(self):
        state = ConfigState()
        valid = {(47.0, 95.0), (10.0, 20.0), (30.0, 40.0)}
        torn = []
        done = threading.Event()

        def writer():
            for i in range(2000):
                if i % 2:
                    state.update_many({"hueMin": 10, "hueMax": 20})
                else:
                    state.update_many({"hueMin": 30, "hueMax": 40})
            done.set()

        thread = threading.Thread(target=writer)
        thread.start()
        while not done.is_set():
            hue = state.snapshot().threshold.hue
            if hue not in valid:
                torn.append(hue)
        thread.join()

        self.assertEqual(torn, [])

    def test_concurrent_writers_not_lost(self):
        state = ConfigState()

        def set_key(key):
            for _ in range(200):
                state.update(key, 7)

        threads = [threading.Thread(target=set_key, args=(key,)) for key in ("hueMin", "satMin", "minArea")]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        snapshot = state.snapshot()
        self.assertEqual(snapshot.threshold.hue[0], 7.0)
        self.assertEqual(snapshot.threshold.saturation[0], 7.0)
        self.assertEqual(snapshot.contour_filter.min_area, 7.0)


if __name__ == "__main__":
    unittest.main()

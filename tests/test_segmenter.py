"""
Tests for HLS segmentation
"""

import unittest

import cv2
import numpy as np

from src.target_vision.core.segmenter import segment
from src.target_vision.models import ThresholdConfig

GREEN = (0, 255, 0)  # BGR; HLS (60, 128, 255) - inside the default ranges


def green_patch_frame():
    frame = np.zeros((120, 160, 3), dtype=np.uint8)
    cv2.rectangle(frame, (20, 30), (60, 90), GREEN, -1)
    return frame


class TestSegment(unittest.TestCase):
    """Test segment() mask output."""

    def test_green_patch_detected(self):
        """Pixels inside the range are 255, everything else 0."""
        frame = green_patch_frame()
        mask = segment(frame, ThresholdConfig())

        self.assertEqual(mask.shape, (120, 160))
        self.assertEqual(mask.dtype, np.uint8)
        self.assertEqual(mask[50, 40], 255)
        self.assertEqual(mask[5, 5], 0)

        expected = np.all(frame == GREEN, axis=2).sum()
        self.assertEqual(np.count_nonzero(mask), expected)

    def test_mask_is_binary(self):
        frame = np.random.default_rng(1).integers(0, 256, (60, 80, 3), dtype=np.uint8)
        mask = segment(frame, ThresholdConfig(hue=(0, 180), saturation=(0, 255), luminance=(0, 255)))

        self.assertTrue(set(np.unique(mask)).issubset({0, 255}))
        # Full ranges keep every pixel
        self.assertEqual(np.count_nonzero(mask), 60 * 80)

    def test_deterministic(self):
        """Same frame and settings give the same mask."""
        frame = np.random.default_rng(7).integers(0, 256, (60, 80, 3), dtype=np.uint8)
        settings = ThresholdConfig(hue=(30, 120), saturation=(50, 255), luminance=(40, 220))

        self.assertTrue(np.array_equal(segment(frame, settings), segment(frame, settings)))

    def test_inverted_range_gives_empty_mask(self):
        frame = green_patch_frame()
        mask = segment(frame, ThresholdConfig(hue=(95, 47)))

        self.assertEqual(np.count_nonzero(mask), 0)

    def test_out_of_range_hue_rejected(self):
        """A red patch is outside the default green hue range."""
        frame = np.zeros((40, 40, 3), dtype=np.uint8)
        frame[:, :] = (0, 0, 255)

        self.assertEqual(np.count_nonzero(segment(frame, ThresholdConfig())), 0)

    def test_writes_into_buffer(self):
        frame = green_patch_frame()
        out = np.zeros((120, 160), dtype=np.uint8)

        segment(frame, ThresholdConfig(), out=out)

        self.assertTrue(np.array_equal(out, segment(frame, ThresholdConfig())))


class TestThresholdConfig(unittest.TestCase):
    """Test channel ordering and inversion detection."""

    def test_bounds_in_hls_order(self):
        settings = ThresholdConfig(hue=(1, 2), saturation=(3, 4), luminance=(5, 6))

        self.assertEqual(settings.lower, (1, 5, 3))
        self.assertEqual(settings.upper, (2, 6, 4))

    def test_inverted_channels(self):
        settings = ThresholdConfig(saturation=(200, 100))

        self.assertEqual(settings.inverted_channels(), ["saturation"])
        self.assertEqual(ThresholdConfig().inverted_channels(), [])


if __name__ == "__main__":
    unittest.main()

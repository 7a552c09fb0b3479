"""
Color segmentation - BGR frame to binary mask by HLS range membership.
"""

import cv2
import numpy as np

from ..models import ThresholdConfig


def segment(
    frame: np.ndarray, threshold: ThresholdConfig, out: np.ndarray | None = None
) -> np.ndarray:
    """
    Threshold a BGR frame in HLS space.

    A pixel is set (255) iff hue, luminance and saturation each fall inside
    their inclusive range. An inverted range yields an all-zero mask.

    Args:
        frame: BGR frame (H, W, 3) uint8
        threshold: Channel ranges to keep
        out: Optional single-channel buffer to write the mask into

    Returns:
        Binary mask (H, W) uint8
    """
    hls = cv2.cvtColor(frame, cv2.COLOR_BGR2HLS)
    if out is None:
        return cv2.inRange(hls, threshold.lower, threshold.upper)
    return cv2.inRange(hls, threshold.lower, threshold.upper, dst=out)

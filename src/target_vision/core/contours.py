"""
Contour extraction and geometric filtering.

Extraction returns every outline in the mask (nested ones included by
default - reflective tape often shows an inner edge). Filtering keeps
contours in extraction order.
"""

import cv2
import numpy as np

from ..models import BoundingBox, Contour, ContourFilterConfig, FilterMode


def extract_contours(mask: np.ndarray, external_only: bool = False) -> list[Contour]:
    """
    Find closed outlines in a binary mask.

    Args:
        mask: Single-channel binary image
        external_only: Only return outermost contours

    Returns:
        Contours in extraction order, points merged along straight runs
    """
    mode = cv2.RETR_EXTERNAL if external_only else cv2.RETR_LIST
    # OpenCV 3 returns (image, contours, hierarchy), OpenCV 4 (contours, hierarchy)
    contours = cv2.findContours(mask, mode, cv2.CHAIN_APPROX_SIMPLE)[-2]
    return list(contours)


def filter_contours(
    contours: list[Contour], config: ContourFilterConfig
) -> list[Contour]:
    """
    Keep the contours that meet the configured criteria.

    Args:
        contours: Candidate contours
        config: Criteria and enforcement mode

    Returns:
        Order-preserving subset of contours
    """
    if config.mode is FilterMode.FULL:
        return [c for c in contours if passes_full(c, config)]
    return [c for c in contours if passes_area(c, config)]


def passes_area(contour: Contour, config: ContourFilterConfig) -> bool:
    """Area-only check."""
    return _area_in_bounds(cv2.contourArea(contour), config)


def passes_full(contour: Contour, config: ContourFilterConfig) -> bool:
    """
    Check every criterion, cheapest first.

    Contours with an undefined ratio (zero height) or undefined solidity
    (zero hull area) are rejected.
    """
    box = BoundingBox.of(contour)
    if not config.min_width <= box.width <= config.max_width:
        return False
    if not config.min_height <= box.height <= config.max_height:
        return False

    area = cv2.contourArea(contour)
    if not _area_in_bounds(area, config):
        return False

    if cv2.arcLength(contour, True) < config.min_perimeter:
        return False

    solidity = _solidity(contour, area)
    if solidity is None:
        return False
    solidity_min, solidity_max = config.solidity
    if not solidity_min <= solidity <= solidity_max:
        return False

    if not config.min_vertices <= len(contour) <= config.max_vertices:
        return False

    ratio = box.aspect_ratio
    if ratio is None:
        return False
    return config.min_ratio <= ratio <= config.max_ratio


def _area_in_bounds(area: float, config: ContourFilterConfig) -> bool:
    if area < config.min_area:
        return False
    return config.max_area is None or area <= config.max_area


def _solidity(contour: Contour, area: float) -> float | None:
    """Contour area as a percentage of its convex hull area."""
    hull_area = cv2.contourArea(cv2.convexHull(contour))
    if hull_area <= 0:
        return None
    return 100.0 * area / hull_area

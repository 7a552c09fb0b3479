"""
Tunable pipeline settings.

Both configs are frozen: a live update builds a new value and swaps it in,
so a reader holding a snapshot never sees a half-applied change.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Tuple

Range = Tuple[float, float]


class FilterMode(Enum):
    """Which contour criteria are enforced."""

    AREA_ONLY = "area"  # Fast path - only area bounds
    FULL = "full"  # Every geometric criterion


@dataclass(frozen=True)
class ThresholdConfig:
    """
    Inclusive HLS ranges used for segmentation.

    Values use OpenCV's 8-bit HLS scale (hue 0-180, others 0-255).
    min <= max is not enforced; an inverted range matches nothing.
    """

    hue: Range = (47.0, 95.0)
    saturation: Range = (197.0, 255.0)
    luminance: Range = (83.0, 195.0)

    @property
    def lower(self) -> Tuple[float, float, float]:
        """Lower bound in cv2 HLS channel order."""
        return (self.hue[0], self.luminance[0], self.saturation[0])

    @property
    def upper(self) -> Tuple[float, float, float]:
        """Upper bound in cv2 HLS channel order."""
        return (self.hue[1], self.luminance[1], self.saturation[1])

    def inverted_channels(self) -> list[str]:
        """Names of channels whose min exceeds max."""
        channels = {
            "hue": self.hue,
            "saturation": self.saturation,
            "luminance": self.luminance,
        }
        return [name for name, (lo, hi) in channels.items() if lo > hi]


@dataclass(frozen=True)
class ContourFilterConfig:
    """
    Geometric criteria a contour must meet to be kept.

    Only min_area (and max_area, when set) apply in AREA_ONLY mode.
    The remaining bounds default to permissive values.
    """

    min_area: float = 50.0
    mode: FilterMode = FilterMode.AREA_ONLY
    max_area: float | None = None
    min_perimeter: float = 0.0
    min_width: float = 0.0
    max_width: float = 1000.0
    min_height: float = 0.0
    max_height: float = 1000.0
    solidity: Range = (80.0, 100.0)  # percent
    min_vertices: float = 0.0
    max_vertices: float = 1_000_000.0
    min_ratio: float = 0.0
    max_ratio: float = 1000.0


@dataclass(frozen=True)
class TuningSnapshot:
    """Consistent pair of settings read once per frame."""

    threshold: ThresholdConfig = field(default_factory=ThresholdConfig)
    contour_filter: ContourFilterConfig = field(default_factory=ContourFilterConfig)

"""
Live-tunable pipeline settings.

Updates arrive from a listener thread while the runner thread reads once
per frame. Every update builds a new immutable TuningSnapshot and swaps
the reference, so snapshot() always returns either the old or the fully
updated values. Writers serialize on a lock so concurrent updates are
not lost; readers never lock.
"""

import logging
import math
import threading
from dataclasses import replace
from typing import Any, Mapping

from ..models import ContourFilterConfig, FilterMode, ThresholdConfig, TuningSnapshot

logger = logging.getLogger(__name__)

# Wire key -> (dataclass field, range index or None for scalars)
THRESHOLD_KEYS: dict[str, tuple[str, int]] = {
    "hueMin": ("hue", 0),
    "hueMax": ("hue", 1),
    "satMin": ("saturation", 0),
    "satMax": ("saturation", 1),
    "lumMin": ("luminance", 0),
    "lumMax": ("luminance", 1),
}

FILTER_KEYS: dict[str, tuple[str, int | None]] = {
    "minArea": ("min_area", None),
    "maxArea": ("max_area", None),
    "minPerimeter": ("min_perimeter", None),
    "minWidth": ("min_width", None),
    "maxWidth": ("max_width", None),
    "minHeight": ("min_height", None),
    "maxHeight": ("max_height", None),
    "solidityMin": ("solidity", 0),
    "solidityMax": ("solidity", 1),
    "minVertices": ("min_vertices", None),
    "maxVertices": ("max_vertices", None),
    "minRatio": ("min_ratio", None),
    "maxRatio": ("max_ratio", None),
}

FILTER_MODE_KEY = "filterMode"

# Optional bounds: None, a non-positive value or inf lifts the bound
OPTIONAL_KEYS = frozenset({"maxArea"})

RECOGNIZED_KEYS = frozenset(THRESHOLD_KEYS) | frozenset(FILTER_KEYS) | {FILTER_MODE_KEY}


class ConfigState:
    """Holds the current TuningSnapshot for one pipeline."""

    def __init__(
        self,
        threshold: ThresholdConfig | None = None,
        contour_filter: ContourFilterConfig | None = None,
    ):
        self._snapshot = TuningSnapshot(
            threshold=threshold or ThresholdConfig(),
            contour_filter=contour_filter or ContourFilterConfig(),
        )
        self._write_lock = threading.Lock()

    def snapshot(self) -> TuningSnapshot:
        """Current settings; safe to hold for the whole frame."""
        return self._snapshot

    def update(self, key: str, value: Any) -> bool:
        """
        Apply one configuration-channel update.

        Unknown keys are ignored (the channel is shared with other listeners).
        Values are not range-checked. maxArea accepts None, a non-positive
        value or inf to remove the upper area bound.

        Args:
            key: Wire key, e.g. "hueMin" or "minArea"
            value: Numeric value

        Returns:
            True if the key was recognized and applied
        """
        return self.update_many({key: value}) == 1

    def update_many(self, values: Mapping[str, Any]) -> int:
        """
        Apply several updates as a single atomic swap.

        Returns:
            Number of recognized keys applied
        """
        with self._write_lock:
            current = self._snapshot
            threshold = current.threshold
            contour_filter = current.contour_filter
            applied = 0

            for key, value in values.items():
                if key not in RECOGNIZED_KEYS:
                    continue

                if key in OPTIONAL_KEYS and value is None:
                    number = None
                else:
                    number = _coerce(key, value)
                    if number is None:
                        continue
                    if key in OPTIONAL_KEYS and (number <= 0 or math.isinf(number)):
                        number = None

                if key in THRESHOLD_KEYS:
                    threshold = _set_field(threshold, *THRESHOLD_KEYS[key], number)
                elif key == FILTER_MODE_KEY:
                    mode = FilterMode.FULL if number else FilterMode.AREA_ONLY
                    contour_filter = replace(contour_filter, mode=mode)
                else:
                    contour_filter = _set_field(contour_filter, *FILTER_KEYS[key], number)
                applied += 1

            if applied:
                self._snapshot = TuningSnapshot(
                    threshold=threshold, contour_filter=contour_filter
                )
                logger.debug(f"Applied {applied} setting(s): {dict(values)}")

        return applied


def _coerce(key: str, value: Any) -> float | None:
    """Convert a channel value to float, or None if it is not a number."""
    try:
        return float(value)
    except (TypeError, ValueError):
        logger.warning(f"Ignoring non-numeric value for '{key}': {value!r}")
        return None


def _set_field(settings, field_name: str, index: int | None, value: float | None):
    """Return a copy of settings with one scalar or one range end replaced."""
    if index is None:
        return replace(settings, **{field_name: value})

    bounds = list(getattr(settings, field_name))
    bounds[index] = value
    return replace(settings, **{field_name: tuple(bounds)})

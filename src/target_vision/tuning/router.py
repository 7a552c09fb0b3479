"""
Routes configuration-channel keys for one camera to their owners.

    camera property keys (brightness, exposure, ...) -> frame source
    everything else                                  -> ConfigState

ConfigState ignores keys it does not know, so unrelated keys broadcast on
a shared channel fall through harmlessly.
"""

import logging
from typing import Any, Mapping

from ..core.camera import CAMERA_PROPERTIES
from ..core.config_state import ConfigState

logger = logging.getLogger(__name__)


class TuningRouter:
    """Applies (key, value) updates for one camera."""

    def __init__(self, camera_name: str, config_state: ConfigState, frame_source=None):
        """
        Args:
            camera_name: Camera this router serves
            config_state: Pipeline settings to update
            frame_source: Source with set_property(name, value), or None
        """
        self.camera_name = camera_name
        self.config_state = config_state
        self.frame_source = frame_source

    def apply(self, key: str, value: Any) -> bool:
        """Apply one update. Returns True if something consumed it."""
        return self.apply_many({key: value}) > 0

    def apply_many(self, values: Mapping[str, Any]) -> int:
        """
        Apply a batch; pipeline settings change in one atomic swap.

        Returns:
            Number of keys consumed
        """
        pipeline_values = {}
        consumed = 0

        for key, value in values.items():
            if key in CAMERA_PROPERTIES:
                consumed += self._set_camera_property(key, value)
            else:
                pipeline_values[key] = value

        if pipeline_values:
            consumed += self.config_state.update_many(pipeline_values)

        return consumed

    def _set_camera_property(self, key: str, value: Any) -> bool:
        set_property = getattr(self.frame_source, "set_property", None)
        if set_property is None:
            logger.debug(f"{self.camera_name}: source has no camera properties, ignoring {key}")
            return False

        try:
            return set_property(key, float(value))
        except (TypeError, ValueError):
            logger.warning(f"{self.camera_name}: ignoring non-numeric {key}: {value!r}")
            return False

"""
Per-frame detection output and its telemetry rendering.

The telemetry field names and the -1 sentinel are consumed by robot
control code and must not change.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any

from ..utils.constants import NO_TARGET
from .geometry import BoundingBox, Point

NO_POINT: Point = (NO_TARGET, NO_TARGET)

TELEMETRY_KEYS = (
    "seeTarget",
    "targetWidth",
    "targetHeight",
    "boundsTotal",
    "center",
    "centerTotal",
    "centerTarget1",
    "centerTarget2",
    "boundsTarget1",
    "boundsTarget2",
    "deltaTime",
    "publishTime",
)


@dataclass(frozen=True)
class DetectionResult:
    """
    Geometry of a detected target pair for one frame.

    Attributes:
        see_target: True when two targets were paired
        center: Midpoint of the box enclosing both targets
        bounds_total: Box enclosing both targets (None when no target)
        target1_center: Midpoint of the left/top target
        target2_center: Midpoint of the right/bottom target
        target1_bounds: Box of the left/top target (None when no target)
        target2_bounds: Box of the right/bottom target (None when no target)
        processing_duration_ms: Time spent processing the frame
        timestamp: Capture time of the source frame (epoch seconds)
    """

    see_target: bool = False
    center: Point = NO_POINT
    bounds_total: BoundingBox | None = None
    target1_center: Point = NO_POINT
    target2_center: Point = NO_POINT
    target1_bounds: BoundingBox | None = None
    target2_bounds: BoundingBox | None = None
    processing_duration_ms: float = NO_TARGET
    timestamp: float = NO_TARGET

    @classmethod
    def no_target(
        cls, timestamp: float = NO_TARGET, processing_duration_ms: float = NO_TARGET
    ) -> "DetectionResult":
        """Result for a frame without a target pair."""
        return cls(timestamp=timestamp, processing_duration_ms=processing_duration_ms)

    def to_telemetry(self, publish_time: datetime | None = None) -> dict[str, Any]:
        """
        Flatten into the telemetry map published for the robot.

        Args:
            publish_time: Time stamped on the record (default: now)

        Returns:
            Dict with exactly the keys in TELEMETRY_KEYS
        """
        total_size = _size(self.bounds_total)
        publish_time = publish_time or datetime.now()

        return {
            "seeTarget": self.see_target,
            "targetWidth": total_size[0],
            "targetHeight": total_size[1],
            "boundsTotal": total_size,
            "center": list(self.center),
            "centerTotal": list(self.center),
            "centerTarget1": list(self.target1_center),
            "centerTarget2": list(self.target2_center),
            "boundsTarget1": _size(self.target1_bounds),
            "boundsTarget2": _size(self.target2_bounds),
            "deltaTime": self.processing_duration_ms,
            "publishTime": publish_time.isoformat(),
        }


def _size(box: BoundingBox | None) -> list:
    """[width, height] of a box, or the sentinel pair."""
    if box is None:
        return [NO_TARGET, NO_TARGET]
    return [box.width, box.height]

"""
Target Pairing

Turns the filtered contours into a two-strip target. The two largest
contours (by bounding-box area) become target1 (left/top) and target2
(right/bottom), and the geometry the robot steers on is derived from
their boxes.

Ordering: strips seen from an angle appear vertically offset, so a pure
x-sort can mis-order boxes that are nearly stacked. When the boxes are
further apart horizontally than the alignment tolerance they are ordered
left-to-right; otherwise top-to-bottom.
"""

import time
from dataclasses import replace

from ..models import BoundingBox, Contour, DetectionResult
from ..utils.constants import DEFAULT_ALIGNMENT_TOLERANCE_PX, NO_TARGET


class TargetPairer:
    """
    Pairs the two most significant contours into a DetectionResult.

    The alignment tolerance is an empirical per-camera value. A negative
    tolerance always orders by x.
    """

    def __init__(self, alignment_tolerance: float = DEFAULT_ALIGNMENT_TOLERANCE_PX):
        """
        Args:
            alignment_tolerance: Max |dx| in pixels at which the pair is
                treated as stacked and ordered by y
        """
        self.alignment_tolerance = alignment_tolerance

    def pair(
        self, contours: list[Contour], timestamp: float = NO_TARGET
    ) -> DetectionResult:
        """
        Build the detection result for one frame.

        Args:
            contours: Filtered contours
            timestamp: Capture time of the source frame

        Returns:
            DetectionResult; see_target is False with fewer than two contours
        """
        if len(contours) < 2:
            return DetectionResult.no_target(timestamp=timestamp)

        start = time.perf_counter()
        boxes = [BoundingBox.of(contour) for contour in contours]
        result = self.pair_boxes(boxes, timestamp)
        elapsed_ms = (time.perf_counter() - start) * 1000

        return replace(result, processing_duration_ms=elapsed_ms)

    def pair_boxes(
        self, boxes: list[BoundingBox], timestamp: float = NO_TARGET
    ) -> DetectionResult:
        """Pair already-computed bounding boxes (see pair())."""
        if len(boxes) < 2:
            return DetectionResult.no_target(timestamp=timestamp)

        # Stable sort keeps extraction order among equal areas
        ranked = sorted(boxes, key=lambda box: box.area, reverse=True)
        target1, target2 = self.order(ranked[0], ranked[1])
        total = target1.union(target2)

        return DetectionResult(
            see_target=True,
            center=total.center,
            bounds_total=total,
            target1_center=target1.center,
            target2_center=target2.center,
            target1_bounds=target1,
            target2_bounds=target2,
            timestamp=timestamp,
        )

    def order(
        self, largest: BoundingBox, second: BoundingBox
    ) -> tuple[BoundingBox, BoundingBox]:
        """
        Order two boxes as (left/top, right/bottom).

        Exact ties leave the second-largest box first.
        """
        if abs(largest.x - second.x) > self.alignment_tolerance:
            largest_first = largest.x < second.x
        else:
            largest_first = largest.y < second.y

        if largest_first:
            return largest, second
        return second, largest

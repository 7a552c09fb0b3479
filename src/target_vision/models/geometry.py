"""
Geometry primitives shared by the pairing stage, the annotator and telemetry.
"""

from dataclasses import dataclass
from typing import Tuple

import cv2
import numpy as np

Point = Tuple[float, float]

# A contour is an OpenCV point array of shape (N, 1, 2), dtype int32
Contour = np.ndarray


@dataclass(frozen=True)
class BoundingBox:
    """
    Axis-aligned box in frame pixel coordinates.

    Attributes:
        x: Left edge
        y: Top edge
        width: Horizontal extent (non-negative)
        height: Vertical extent (non-negative)
    """

    x: int
    y: int
    width: int
    height: int

    @classmethod
    def of(cls, contour: Contour) -> "BoundingBox":
        """Smallest upright box enclosing a contour."""
        x, y, w, h = cv2.boundingRect(contour)
        return cls(x=int(x), y=int(y), width=int(w), height=int(h))

    @property
    def right(self) -> int:
        return self.x + self.width

    @property
    def bottom(self) -> int:
        return self.y + self.height

    @property
    def area(self) -> int:
        return self.width * self.height

    @property
    def size(self) -> Tuple[int, int]:
        return (self.width, self.height)

    @property
    def center(self) -> Point:
        return (self.x + self.width / 2.0, self.y + self.height / 2.0)

    @property
    def aspect_ratio(self) -> float | None:
        """Width divided by height, or None when height is zero."""
        if self.height == 0:
            return None
        return self.width / self.height

    def contains(self, point: Point) -> bool:
        """Inclusive point-in-box test."""
        px, py = point
        return self.x <= px <= self.right and self.y <= py <= self.bottom

    def union(self, other: "BoundingBox") -> "BoundingBox":
        """Smallest box enclosing both boxes."""
        x = min(self.x, other.x)
        y = min(self.y, other.y)
        return BoundingBox(
            x=x,
            y=y,
            width=max(self.right, other.right) - x,
            height=max(self.bottom, other.bottom) - y,
        )

"""
Frame annotation for human debugging.

Draws each target box, the box enclosing both, a crosshair on the target
center and a midline crosshair on the frame. Nothing in the pipeline
reads the drawn pixels back.
"""

import cv2
import numpy as np

from ..models import BoundingBox, DetectionResult

RED = (0, 0, 255)
BLUE = (255, 0, 0)
WHITE = (255, 255, 255)

CROSSHAIR_HALF = 5
MIDLINE_MARGIN = 50


class Annotator:
    """Draws DetectionResult geometry onto a BGR frame in place."""

    def __init__(self, thickness: int = 3, draw_midline: bool = True):
        self.thickness = thickness
        self.draw_midline = draw_midline

    def draw(self, frame: np.ndarray, result: DetectionResult) -> np.ndarray:
        """
        Annotate a frame.

        Args:
            frame: Frame to annotate (modified in place)
            result: Detection for this frame

        Returns:
            The annotated frame
        """
        if result.see_target:
            for box in (result.target1_bounds, result.target2_bounds):
                self._rectangle(frame, box, BLUE)
            self._rectangle(frame, result.bounds_total, RED)
            self._crosshair(frame, result.center, CROSSHAIR_HALF, RED, self.thickness)

        if self.draw_midline:
            height, width = frame.shape[:2]
            cx, cy = width // 2, height // 2
            cv2.line(frame, (cx, MIDLINE_MARGIN), (cx, height - MIDLINE_MARGIN), WHITE, 1)
            cv2.line(frame, (MIDLINE_MARGIN, cy), (width - MIDLINE_MARGIN, cy), WHITE, 1)

        return frame

    def _rectangle(self, frame: np.ndarray, box: BoundingBox | None, color) -> None:
        if box is None:
            return
        cv2.rectangle(frame, (box.x, box.y), (box.right, box.bottom), color, self.thickness)

    @staticmethod
    def _crosshair(frame: np.ndarray, center, half: int, color, thickness: int) -> None:
        x, y = int(round(center[0])), int(round(center[1]))
        cv2.line(frame, (x, y - half), (x, y + half), color, thickness)
        cv2.line(frame, (x - half, y), (x + half, y), color, thickness)

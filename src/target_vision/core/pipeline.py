"""
Targeting Pipeline

Fixed composition of the four detection stages:
    segment -> extract contours -> filter contours -> pair targets

One instance belongs to one PipelineRunner; the mask buffer is reused
across frames of the same size.
"""

import logging
import time
from dataclasses import replace

import numpy as np

from ..models import Contour, DetectionResult, TuningSnapshot
from ..utils.constants import NO_TARGET
from .contours import extract_contours, filter_contours
from .pairing import TargetPairer
from .segmenter import segment

logger = logging.getLogger(__name__)


class TargetingPipeline:
    """Runs one frame through every stage and reports end-to-end timing."""

    def __init__(self, pairer: TargetPairer | None = None, external_only: bool = False):
        """
        Args:
            pairer: Target pairing stage (default tolerance if None)
            external_only: Only extract outermost contours
        """
        self.pairer = pairer or TargetPairer()
        self.external_only = external_only
        self._mask: np.ndarray | None = None
        self.filtered: list[Contour] = []

    def process(
        self, frame: np.ndarray, settings: TuningSnapshot, timestamp: float = NO_TARGET
    ) -> DetectionResult:
        """
        Process one frame with one settings snapshot.

        Args:
            frame: BGR frame
            settings: Snapshot taken once for this frame
            timestamp: Capture time of the frame

        Returns:
            DetectionResult with processing_duration_ms covering all stages
        """
        start = time.perf_counter()

        mask = segment(frame, settings.threshold, out=self._scratch_mask(frame))
        contours = extract_contours(mask, self.external_only)
        self.filtered = filter_contours(contours, settings.contour_filter)
        result = self.pairer.pair(self.filtered, timestamp)

        elapsed_ms = (time.perf_counter() - start) * 1000
        return replace(result, processing_duration_ms=elapsed_ms)

    @property
    def mask(self) -> np.ndarray | None:
        """Mask of the most recent frame (overwritten by the next one)."""
        return self._mask

    def _scratch_mask(self, frame: np.ndarray) -> np.ndarray:
        height, width = frame.shape[:2]
        if self._mask is None or self._mask.shape != (height, width):
            logger.debug(f"Allocating {width}x{height} mask buffer")
            self._mask = np.zeros((height, width), dtype=np.uint8)
        return self._mask

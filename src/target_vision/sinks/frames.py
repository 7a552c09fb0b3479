"""
Frame sinks - where processed frames go.

SnapshotFrameSink keeps `<dir>/<camera>.jpg` current so the snapshot
server can show what each camera sees. Writes are throttled and atomic
(write then rename) so a reader never gets a partial JPEG.
"""

import logging
import os
import time

import cv2
import numpy as np

from ..utils.constants import DEFAULT_SNAPSHOT_DIR, DEFAULT_SNAPSHOT_INTERVAL

logger = logging.getLogger(__name__)


class NullFrameSink:
    """Discards frames."""

    def publish(self, frame: np.ndarray) -> None:
        pass

    def close(self) -> None:
        pass


class SnapshotFrameSink:
    """Writes the latest frame of one camera to a JPEG file."""

    def __init__(
        self,
        camera_name: str,
        snapshot_dir: str = DEFAULT_SNAPSHOT_DIR,
        interval_seconds: float = DEFAULT_SNAPSHOT_INTERVAL,
        jpeg_quality: int = 80,
    ):
        """
        Args:
            camera_name: Used as the file name
            snapshot_dir: Directory served by the snapshot server
            interval_seconds: Minimum time between writes
            jpeg_quality: JPEG quality 0-100
        """
        os.makedirs(snapshot_dir, exist_ok=True)
        self.path = os.path.join(snapshot_dir, f"{camera_name}.jpg")
        self._tmp_path = os.path.join(snapshot_dir, f".{camera_name}.tmp.jpg")
        self._interval = interval_seconds
        self._params = [cv2.IMWRITE_JPEG_QUALITY, jpeg_quality]
        self._last_write = 0.0
        self.writes = 0

    def publish(self, frame: np.ndarray) -> None:
        now = time.monotonic()
        if self.writes and now - self._last_write < self._interval:
            return

        # Encode synchronously - the runner reuses the frame buffer next grab
        if not cv2.imwrite(self._tmp_path, frame, self._params):
            logger.debug(f"Failed to write snapshot: {self._tmp_path}")
            return

        os.replace(self._tmp_path, self.path)
        self._last_write = now
        self.writes += 1

    def close(self) -> None:
        if os.path.exists(self._tmp_path):
            os.remove(self._tmp_path)

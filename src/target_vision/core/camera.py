"""
Camera initialization and frame acquisition.
"""

import logging
import time

import cv2
import numpy as np

from ..models import GrabResult
from ..utils.constants import (
    CAMERA_RECONNECT_DELAY,
    DEFAULT_FPS,
    DEFAULT_RESOLUTION,
    MAX_CAMERA_RECONNECT_ATTEMPTS,
)

logger = logging.getLogger(__name__)

# Tunable camera properties by config/channel name
CAMERA_PROPERTIES = {
    "brightness": cv2.CAP_PROP_BRIGHTNESS,
    "contrast": cv2.CAP_PROP_CONTRAST,
    "saturation": cv2.CAP_PROP_SATURATION,
    "exposure": cv2.CAP_PROP_EXPOSURE,
    "auto_exposure": cv2.CAP_PROP_AUTO_EXPOSURE,
    "gain": cv2.CAP_PROP_GAIN,
    "white_balance": cv2.CAP_PROP_WB_TEMPERATURE,
    "auto_white_balance": cv2.CAP_PROP_AUTO_WB,
}


def initialize_camera(
    source: int | str,
    attempts: int = MAX_CAMERA_RECONNECT_ATTEMPTS,
    delay: float = CAMERA_RECONNECT_DELAY,
) -> cv2.VideoCapture:
    """
    Initialize camera with retry logic.

    Args:
        source: Device index, device path or stream URL
        attempts: Retries after the first attempt
        delay: Seconds between attempts

    Returns:
        OpenCV VideoCapture object

    Raises:
        RuntimeError: If camera cannot be opened after retries
    """
    for attempt in range(attempts + 1):
        logger.info(f"Connecting to camera: {source} (attempt {attempt + 1})")
        cap = cv2.VideoCapture(source)

        if cap.isOpened():
            logger.info("Camera connected successfully")
            return cap

        cap.release()
        if attempt < attempts:
            logger.warning(f"Failed to connect, retrying in {delay}s...")
            time.sleep(delay)

    logger.error(f"Failed to connect to camera after {attempts + 1} attempts")
    raise RuntimeError(f"Cannot connect to camera: {source}")


class OpenCVFrameSource:
    """
    FrameSource backed by cv2.VideoCapture (USB device, file or stream URL).

    The capture's own read timeout bounds every grab.
    """

    def __init__(
        self,
        name: str,
        source: int | str,
        resolution: tuple[int, int] = DEFAULT_RESOLUTION,
        fps: int = DEFAULT_FPS,
        properties: dict[str, float] | None = None,
        capture: cv2.VideoCapture | None = None,
    ):
        """
        Args:
            name: Camera name for logs
            source: Device index, device path or stream URL
            resolution: Requested (width, height)
            fps: Requested frame rate
            properties: Camera properties to apply, by CAMERA_PROPERTIES name
            capture: Already-open capture (skips connecting)
        """
        self.name = name
        self.source = source
        self._cap = capture if capture is not None else initialize_camera(source)

        width, height = resolution
        self._cap.set(cv2.CAP_PROP_FRAME_WIDTH, width)
        self._cap.set(cv2.CAP_PROP_FRAME_HEIGHT, height)
        self._cap.set(cv2.CAP_PROP_FPS, fps)

        for prop_name, value in (properties or {}).items():
            self.set_property(prop_name, value)

    def try_grab(self, frame: np.ndarray | None) -> GrabResult:
        """Read the next frame into the given buffer; never raises."""
        try:
            ok, grabbed = self._cap.read(frame) if frame is not None else self._cap.read()
        except cv2.error as e:
            return GrabResult.failure(f"{self.name}: capture error: {e}")

        if not ok or grabbed is None:
            return GrabResult.failure(f"{self.name}: no frame from {self.source}")
        return GrabResult(frame=grabbed)

    def set_property(self, name: str, value: float) -> bool:
        """
        Set a named camera property.

        Returns:
            True if the driver accepted the value
        """
        prop_id = CAMERA_PROPERTIES.get(name)
        if prop_id is None:
            logger.warning(f"{self.name}: unknown camera property '{name}'")
            return False

        accepted = bool(self._cap.set(prop_id, float(value)))
        if accepted:
            logger.info(f"{self.name}: {name} = {value}")
        else:
            logger.warning(f"{self.name}: camera rejected {name} = {value}")
        return accepted

    def release(self) -> None:
        self._cap.release()
        logger.info(f"{self.name}: camera released")

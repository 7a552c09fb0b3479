"""
Collaborator Protocols - the I/O seams around the detection pipeline.

A PipelineRunner only talks to these interfaces, so cameras, video files,
test fakes, and any telemetry transport can be swapped without touching
the loop.

Usage:
    source: FrameSource = OpenCVFrameSource("cam", 0)
    telemetry: TelemetrySink = JsonlTelemetrySink("cam", {"path": "data/cam.jsonl"})
"""

from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable

import numpy as np


@dataclass
class GrabResult:
    """Outcome of one frame grab: a frame on success, an error message otherwise."""

    frame: np.ndarray | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.frame is not None

    @classmethod
    def failure(cls, error: str) -> "GrabResult":
        return cls(frame=None, error=error)


@runtime_checkable
class FrameSource(Protocol):
    """Source of BGR frames for one camera."""

    def try_grab(self, frame: np.ndarray | None) -> GrabResult:
        """
        Grab the next frame, reusing the given buffer when possible.

        Args:
            frame: Buffer from the previous grab, or None on the first call

        Returns:
            GrabResult - must not raise on a failed grab
        """
        ...

    def release(self) -> None:
        """Free the underlying device or stream."""
        ...


@runtime_checkable
class FrameSink(Protocol):
    """Destination for (optionally annotated) frames. Fire-and-forget."""

    def publish(self, frame: np.ndarray) -> None:
        ...

    def close(self) -> None:
        ...


@runtime_checkable
class TelemetrySink(Protocol):
    """Destination for the flat telemetry map of each DetectionResult."""

    def publish(self, values: dict[str, Any]) -> None:
        """
        Send one telemetry record.

        Args:
            values: Map built by DetectionResult.to_telemetry()
        """
        ...

    def close(self) -> None:
        ...

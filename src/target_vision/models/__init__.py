"""
Data models for the target vision pipeline.

This package contains the settings, geometry, result types and the
collaborator protocols shared by core/, sinks/ and tuning/.
"""

from .geometry import BoundingBox, Contour, Point
from .protocols import FrameSink, FrameSource, GrabResult, TelemetrySink
from .result import NO_POINT, TELEMETRY_KEYS, DetectionResult
from .settings import ContourFilterConfig, FilterMode, ThresholdConfig, TuningSnapshot

__all__ = [
    # Geometry
    "BoundingBox",
    "Contour",
    "Point",
    # Settings
    "ContourFilterConfig",
    "FilterMode",
    "ThresholdConfig",
    "TuningSnapshot",
    # Results
    "DetectionResult",
    "NO_POINT",
    "TELEMETRY_KEYS",
    # Protocols
    "FrameSink",
    "FrameSource",
    "GrabResult",
    "TelemetrySink",
]

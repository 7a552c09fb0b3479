"""
Output side of each camera pipeline: telemetry records, frames and overlays.
"""

from .annotator import Annotator
from .frames import NullFrameSink, SnapshotFrameSink
from .telemetry import (
    SINK_REGISTRY,
    CallbackTelemetrySink,
    JsonlTelemetrySink,
    LogTelemetrySink,
    TelemetryFanout,
    WebhookTelemetrySink,
    build_telemetry_sink,
)

__all__ = [
    "Annotator",
    "CallbackTelemetrySink",
    "JsonlTelemetrySink",
    "LogTelemetrySink",
    "NullFrameSink",
    "SINK_REGISTRY",
    "SnapshotFrameSink",
    "TelemetryFanout",
    "WebhookTelemetrySink",
    "build_telemetry_sink",
]

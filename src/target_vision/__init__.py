"""
Target Vision

Finds a pair of retroreflective vision targets in camera frames and
publishes where they are, once per frame, for a robot controller.

Per camera:
    grab -> HLS threshold -> contours -> filter -> pair -> telemetry

Package structure:
  core/    - Pipeline stages, per-camera runner and supervisor
  models/  - Settings, geometry and result types
  sinks/   - Telemetry, snapshot frames and annotation
  tuning/  - Live configuration channel (listener queue, tuning file)
  config/  - Configuration loading and validation
  utils/   - Constants, snapshot server, command runner
"""

__version__ = "1.0.0"

from .core import (
    ConfigState,
    PipelineRunner,
    RunnerState,
    TargetingPipeline,
    TargetPairer,
)
from .models import (
    BoundingBox,
    ContourFilterConfig,
    DetectionResult,
    FilterMode,
    ThresholdConfig,
)

__all__ = [
    "BoundingBox",
    "ConfigState",
    "ContourFilterConfig",
    "DetectionResult",
    "FilterMode",
    "PipelineRunner",
    "RunnerState",
    "TargetPairer",
    "TargetingPipeline",
    "ThresholdConfig",
]

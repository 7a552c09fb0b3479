"""
Detection core: the per-frame pipeline and the loop that drives it.

  segmenter     - HLS threshold to binary mask
  contours      - outline extraction and geometric filtering
  pairing       - two-target ordering and combined geometry
  pipeline      - the composition of the above
  config_state  - live-tunable settings snapshot
  runner        - per-camera loop
  camera        - OpenCV frame source

The supervisor lives in core.supervisor and is imported from there; it
depends on config, sinks and tuning, which in turn depend on this package.
"""

from .camera import CAMERA_PROPERTIES, OpenCVFrameSource, initialize_camera
from .config_state import RECOGNIZED_KEYS, ConfigState
from .contours import extract_contours, filter_contours
from .pairing import TargetPairer
from .pipeline import TargetingPipeline
from .runner import PipelineRunner, RunnerState
from .segmenter import segment

__all__ = [
    "CAMERA_PROPERTIES",
    "ConfigState",
    "OpenCVFrameSource",
    "PipelineRunner",
    "RECOGNIZED_KEYS",
    "RunnerState",
    "TargetPairer",
    "TargetingPipeline",
    "extract_contours",
    "filter_contours",
    "initialize_camera",
    "segment",
]

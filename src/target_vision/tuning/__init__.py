"""
Configuration channel - live tuning of running pipelines.

  listener      - queue-fed listener thread (TuningEvent in, settings out)
  file_watcher  - polls a YAML tuning file
  router        - per-camera routing to ConfigState or the camera
"""

from .file_watcher import TuningFileWatcher
from .listener import SHUTDOWN_KEY, ConfigListener, TuningEvent
from .router import TuningRouter

__all__ = [
    "ConfigListener",
    "SHUTDOWN_KEY",
    "TuningEvent",
    "TuningFileWatcher",
    "TuningRouter",
]

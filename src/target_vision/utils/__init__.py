"""
Utilities: constants, snapshot HTTP server, and shell command runner.
"""

from .constants import (
    DEFAULT_ALIGNMENT_TOLERANCE_PX,
    DEFAULT_FPS,
    DEFAULT_RESOLUTION,
    NO_TARGET,
    STATUS_REPORT_INTERVAL,
)

__all__ = [
    "DEFAULT_ALIGNMENT_TOLERANCE_PX",
    "DEFAULT_FPS",
    "DEFAULT_RESOLUTION",
    "NO_TARGET",
    "STATUS_REPORT_INTERVAL",
]

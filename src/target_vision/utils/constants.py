"""
Constants used throughout the target vision system
"""

# Performance and monitoring
STATUS_REPORT_INTERVAL = 100  # Report status every N processed frames
FPS_WINDOW_SIZE = 100  # Number of frames to average for FPS calculation

# Sentinel published for every value when no target is seen
NO_TARGET = -1

# Camera defaults
DEFAULT_RESOLUTION = (320, 240)
DEFAULT_FPS = 15

# Camera reconnection
MAX_CAMERA_RECONNECT_ATTEMPTS = 2
CAMERA_RECONNECT_DELAY = 2.0  # Seconds between reconnection attempts

# Target pairing
DEFAULT_ALIGNMENT_TOLERANCE_PX = 5.0  # Below this x-offset, pair top-to-bottom

# Snapshots
DEFAULT_SNAPSHOT_DIR = "/tmp/target-vision"
DEFAULT_SNAPSHOT_PORT = 8085
DEFAULT_SNAPSHOT_INTERVAL = 0.2  # Seconds between snapshot writes per camera

# Tuning channel
DEFAULT_TUNING_POLL_INTERVAL = 1.0  # Seconds between tuning file checks

# Shutdown
DEFAULT_RUNNER_SHUTDOWN_TIMEOUT = 5.0  # Seconds to wait for each runner thread
DEFAULT_COMMAND_TIMEOUT = 30  # Seconds before a shutdown command is abandoned

# Telemetry
DEFAULT_WEBHOOK_TIMEOUT = 0.5  # Seconds; keeps a slow endpoint from stalling a camera

# Environment variables
ENV_CAMERA_URL = "CAMERA_URL"

"""
Tuning File Watcher

Polls a YAML tuning file and applies what changed. Editing the file while
the system runs is the simplest configuration channel: no dashboard
needed, and a whole camera section lands as one atomic settings swap.

File format:
    shutdown: false
    front:
      hueMin: 50
      hueMax: 90
      minArea: 120
      brightness: 30
    rear:
      filterMode: 1

Top-level mappings are camera sections; top-level scalars are root keys.
Uses threading.Event for sleeping so stop() wakes the thread immediately.
"""

import logging
import os
import threading
from typing import Any, Callable

import yaml

from ..utils.constants import DEFAULT_TUNING_POLL_INTERVAL
from .listener import SHUTDOWN_KEY
from .router import TuningRouter

logger = logging.getLogger(__name__)


class TuningFileWatcher:
    """Applies changes in a tuning file to camera routers."""

    def __init__(
        self,
        path: str,
        routers: dict[str, TuningRouter],
        poll_interval: float = DEFAULT_TUNING_POLL_INTERVAL,
        on_shutdown: Callable[[], None] | None = None,
    ):
        """
        Args:
            path: YAML tuning file
            routers: Camera name -> router
            poll_interval: Seconds between modification checks
            on_shutdown: Called when root "shutdown" becomes truthy
        """
        self.path = path
        self.routers = routers
        self.poll_interval = poll_interval
        self.on_shutdown = on_shutdown

        self._last_mtime: float | None = None
        self._applied: dict[str, dict[str, Any]] = {}
        self._shutdown_sent = False

        # Shutdown signal (like a CancellationToken)
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    def start(self) -> None:
        """Apply the current file, then start polling."""
        logger.info(f"Watching tuning file: {self.path} (every {self.poll_interval}s)")
        self.check()

        self._thread = threading.Thread(
            target=self._run,
            name="TuningFileWatcher",
            daemon=True,
        )
        self._thread.start()

    def stop(self) -> None:
        """Stop polling and wait briefly for the thread to exit."""
        if not self._thread:
            return

        self._stop.set()  # Wakes thread immediately from wait()
        self._thread.join(timeout=2.0)

        if self._thread.is_alive():
            logger.warning("Tuning file watcher did not stop cleanly")

    def check(self) -> int:
        """
        Reload the file if it changed and apply the differences.

        Returns:
            Number of values applied
        """
        try:
            mtime = os.path.getmtime(self.path)
        except OSError:
            if self._last_mtime is not None:
                logger.warning(f"Tuning file disappeared: {self.path}")
                self._last_mtime = None
            return 0

        if mtime == self._last_mtime:
            return 0
        self._last_mtime = mtime

        try:
            with open(self.path, encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            logger.error(f"Invalid tuning file {self.path}: {e}")
            return 0

        if not isinstance(data, dict):
            logger.error(f"Tuning file must be a mapping: {self.path}")
            return 0

        return self.apply(data)

    def apply(self, data: dict[str, Any]) -> int:
        """Apply a parsed tuning document; only changed values are sent."""
        applied = 0

        for section, values in data.items():
            if isinstance(values, dict):
                applied += self._apply_camera(section, values)
            elif section == SHUTDOWN_KEY:
                self._apply_shutdown(bool(values))

        return applied

    def _apply_camera(self, camera: str, values: dict[str, Any]) -> int:
        router = self.routers.get(camera)
        if router is None:
            logger.debug(f"Tuning file section for unknown camera '{camera}'")
            return 0

        previous = self._applied.setdefault(camera, {})
        changed = {k: v for k, v in values.items() if previous.get(k) != v}
        if not changed:
            return 0

        previous.update(changed)
        count = router.apply_many(changed)
        if count:
            logger.info(f"{camera}: applied {count} tuning value(s) from file")
        return count

    def _apply_shutdown(self, requested: bool) -> None:
        if not requested or self._shutdown_sent:
            return
        self._shutdown_sent = True
        logger.info("Shutdown requested in tuning file")
        if self.on_shutdown is not None:
            self.on_shutdown()

    def _run(self) -> None:
        while not self._stop.wait(timeout=self.poll_interval):
            try:
                self.check()
            except Exception as e:
                logger.error(f"Failed to apply tuning file {self.path}: {e}", exc_info=True)

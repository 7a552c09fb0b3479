"""
Configuration Listener - applies queued tuning events on its own thread.

Producers (a dashboard bridge, a test, the file watcher) put TuningEvents
on a queue; the listener thread routes each one to the camera it names.
Putting None on the queue stops the listener.

Usage:
    events = queue.Queue()
    listener = ConfigListener(events, routers, on_shutdown=supervisor.request_shutdown)
    listener.start()
    events.put(TuningEvent("front", "hueMin", 50.0))
"""

import logging
import queue
import threading
from typing import Any, Callable, NamedTuple

from .router import TuningRouter

logger = logging.getLogger(__name__)

# Root-scope key that asks the whole process to shut down (and power off)
SHUTDOWN_KEY = "shutdown"


class TuningEvent(NamedTuple):
    """One channel update. camera=None addresses the root scope."""

    camera: str | None
    key: str
    value: Any


class ConfigListener:
    """Consumes TuningEvents from a queue and routes them by camera."""

    def __init__(
        self,
        events: queue.Queue,
        routers: dict[str, TuningRouter],
        on_shutdown: Callable[[], None] | None = None,
    ):
        """
        Args:
            events: Queue of TuningEvent (None stops the listener)
            routers: Camera name -> router
            on_shutdown: Called when a truthy root "shutdown" key arrives
        """
        self.events = events
        self.routers = routers
        self.on_shutdown = on_shutdown
        self.applied = 0
        self._thread: threading.Thread | None = None

    def start(self) -> None:
        """Start the listener thread."""
        self._thread = threading.Thread(
            target=self._run,
            name="ConfigListener",
            daemon=True,  # Dies with parent process
        )
        self._thread.start()
        logger.debug("Config listener started")

    def stop(self, timeout: float = 2.0) -> None:
        """Signal the listener to exit and wait briefly."""
        if not self._thread:
            return

        self.events.put(None)
        self._thread.join(timeout=timeout)

        if self._thread.is_alive():
            logger.warning("Config listener did not stop cleanly")
        else:
            logger.debug("Config listener stopped")

    def handle(self, event: TuningEvent) -> bool:
        """
        Route one event. Unknown cameras and keys are ignored.

        Returns:
            True if the event changed something
        """
        if event.camera is None:
            return self._handle_root(event.key, event.value)

        router = self.routers.get(event.camera)
        if router is None:
            logger.debug(f"Ignoring update for unknown camera '{event.camera}'")
            return False

        if router.apply(event.key, event.value):
            self.applied += 1
            return True
        return False

    def _handle_root(self, key: str, value: Any) -> bool:
        if key != SHUTDOWN_KEY or not value:
            return False

        logger.info("Shutdown requested on the configuration channel")
        if self.on_shutdown is not None:
            self.on_shutdown()
        return True

    def _run(self) -> None:
        while True:
            event = self.events.get()
            if event is None:
                break
            # A malformed event is dropped; the channel stays up
            try:
                self.handle(TuningEvent(*event))
            except Exception as e:
                logger.error(f"Failed to apply tuning event {event!r}: {e}", exc_info=True)

"""
Pipeline Runner - continuous per-camera detection loop.

Each iteration:
    grab frame -> snapshot settings -> run pipeline -> publish telemetry/frame

A failed grab is logged and the next iteration starts immediately. Sinks
are fire-and-forget: a failed publish is logged and the frame is dropped.
Cancellation is only observed between iterations, so a frame is never
half-published. On exit the runner releases the camera and sinks it owns.
"""

import logging
import threading
import time
from enum import Enum

import numpy as np

from ..models import DetectionResult, FrameSink, FrameSource, TelemetrySink
from ..utils.constants import FPS_WINDOW_SIZE, STATUS_REPORT_INTERVAL
from .config_state import ConfigState
from .pipeline import TargetingPipeline

logger = logging.getLogger(__name__)


class RunnerState(Enum):
    """Lifecycle of a PipelineRunner. There is no pause."""

    RUNNING = "running"
    STOPPING = "stopping"
    STOPPED = "stopped"


class PipelineRunner:
    """
    Drives one camera's pipeline until cancelled.

    The runner exclusively owns its frame buffer, frame source and sinks.
    Only its ConfigState is shared, written by a listener thread.
    """

    def __init__(
        self,
        name: str,
        source: FrameSource,
        config_state: ConfigState,
        telemetry: TelemetrySink,
        pipeline: TargetingPipeline | None = None,
        frame_sink: FrameSink | None = None,
        annotator=None,
        cancel_event: threading.Event | None = None,
        status_interval: int = STATUS_REPORT_INTERVAL,
    ):
        """
        Args:
            name: Camera name for logs and thread naming
            source: Frame source (camera)
            config_state: Live settings for this pipeline
            telemetry: Sink for per-frame telemetry maps
            pipeline: Detection pipeline (default settings if None)
            frame_sink: Optional sink for the processed frame
            annotator: Optional Annotator drawing results on the frame
            cancel_event: Event that requests a stop (created if None)
            status_interval: Frames between status log lines
        """
        self.name = name
        self.source = source
        self.config_state = config_state
        self.telemetry = telemetry
        self.pipeline = pipeline or TargetingPipeline()
        self.frame_sink = frame_sink
        self.annotator = annotator
        self.cancel_event = cancel_event or threading.Event()
        self.status_interval = status_interval

        self._state = RunnerState.RUNNING
        self._frame: np.ndarray | None = None

        # Counters
        self.frame_count = 0
        self.grab_failures = 0
        self.detection_count = 0
        self._failure_streak = 0
        self.publish_failures = 0
        self._publish_streaks = {"telemetry": 0, "frame sink": 0}
        self._frame_times: list[float] = []

    @property
    def state(self) -> RunnerState:
        return self._state

    def stop(self) -> None:
        """Request a stop; honored at the next iteration boundary."""
        self.cancel_event.set()

    def run(self) -> None:
        """
        Main loop. Returns once stopped.

        Raises:
            Exception: Any fatal pipeline error, after resources are released
        """
        if self._state is RunnerState.STOPPED:
            logger.warning(f"{self.name}: runner already released, not starting")
            return

        start_time = time.time()
        logger.info(f"{self.name}: pipeline started")

        try:
            while not self.cancel_event.is_set():
                self.run_once()
        except Exception as e:
            logger.error(f"{self.name}: fatal error in pipeline: {e}", exc_info=True)
            raise
        finally:
            self.release()
            self._log_final_stats(start_time)

    def run_once(self) -> DetectionResult | None:
        """
        One iteration of the loop.

        Returns:
            The published result, or None if the grab failed
        """
        grab = self.source.try_grab(self._frame)
        if not grab.ok:
            self._record_grab_failure(grab.error)
            return None

        captured_at = time.time()
        self._frame = grab.frame
        if self._failure_streak:
            logger.info(
                f"{self.name}: frames resumed after {self._failure_streak} failed grab(s)"
            )
            self._failure_streak = 0

        settings = self.config_state.snapshot()
        result = self.pipeline.process(self._frame, settings, captured_at)

        if self.annotator is not None:
            self.annotator.draw(self._frame, result)

        self._publish("telemetry", self.telemetry.publish, result.to_telemetry())
        if self.frame_sink is not None:
            self._publish("frame sink", self.frame_sink.publish, self._frame)

        self.frame_count += 1
        if result.see_target:
            self.detection_count += 1
        self._frame_times.append(result.processing_duration_ms)
        if self.frame_count % self.status_interval == 0:
            self._log_status()

        return result

    def _record_grab_failure(self, error: str | None) -> None:
        self.grab_failures += 1
        self._failure_streak += 1
        if self._failure_streak == 1:
            logger.warning(f"{self.name}: frame grab failed: {error}")
        else:
            logger.debug(f"{self.name}: frame grab failed ({self._failure_streak}): {error}")

    def _publish(self, label: str, publish, payload) -> None:
        try:
            publish(payload)
        except Exception as e:
            self.publish_failures += 1
            self._publish_streaks[label] += 1
            streak = self._publish_streaks[label]
            if streak == 1:
                logger.warning(f"{self.name}: {label} publish failed: {e}")
            else:
                logger.debug(f"{self.name}: {label} publish failed ({streak}): {e}")
        else:
            self._publish_streaks[label] = 0

    def release(self) -> None:
        """
        Enter STOPPING, release the source and sinks, enter STOPPED.

        Idempotent. Also used for runners whose loop never started.
        """
        if self._state is RunnerState.STOPPED:
            return
        self._state = RunnerState.STOPPING
        self._release()
        self._state = RunnerState.STOPPED

    def _release(self) -> None:
        """Release owned resources; failures are logged, never raised."""
        closers = [("frame source", self.source.release), ("telemetry", self.telemetry.close)]
        if self.frame_sink is not None:
            closers.append(("frame sink", self.frame_sink.close))

        for label, close in closers:
            try:
                close()
            except Exception as e:
                logger.error(f"{self.name}: failed to release {label}: {e}")

    def _log_status(self) -> None:
        """Log periodic status."""
        window = self._frame_times[-FPS_WINDOW_SIZE:]
        self._frame_times = window
        avg_ms = sum(window) / len(window) if window else 0
        logger.info(
            f"{self.name}: Frame {self.frame_count} | {avg_ms:.1f} ms/frame | "
            f"Targets: {self.detection_count} | Grab failures: {self.grab_failures}"
        )

    def _log_final_stats(self, start_time: float) -> None:
        """Log final statistics."""
        elapsed = time.time() - start_time
        fps = self.frame_count / elapsed if elapsed > 0 else 0

        logger.info(f"{self.name}: pipeline stopped")
        logger.info(f"{self.name}: Runtime: {elapsed / 60:.1f} minutes")
        logger.info(f"{self.name}: Frames: {self.frame_count} ({fps:.1f} FPS)")
        logger.info(f"{self.name}: Targets seen: {self.detection_count}")
        logger.info(f"{self.name}: Grab failures: {self.grab_failures}")

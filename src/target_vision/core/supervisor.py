"""
Vision Supervisor - runs every camera pipeline and owns shutdown.

One thread per camera runner, named VisionThread-<camera>. The supervisor
also owns the configuration channel (listener queue and optional tuning
file watcher) and the optional power-off command.

Usage:
    supervisor = VisionSupervisor.from_config(config)
    supervisor.start()
    supervisor.wait()          # until request_shutdown()
    supervisor.stop()
"""

import logging
import queue
import threading
from typing import Callable

from ..config.schemas import CameraSchema, VisionConfig
from ..sinks import Annotator, NullFrameSink, SnapshotFrameSink, build_telemetry_sink
from ..tuning import ConfigListener, TuningFileWatcher, TuningRouter
from ..utils.constants import DEFAULT_RUNNER_SHUTDOWN_TIMEOUT, DEFAULT_TUNING_POLL_INTERVAL
from ..utils.system import run_command
from .camera import OpenCVFrameSource
from .config_state import ConfigState
from .pairing import TargetPairer
from .pipeline import TargetingPipeline
from .runner import PipelineRunner

logger = logging.getLogger(__name__)


def build_runner(
    camera: CameraSchema,
    snapshot_dir: str,
    status_interval: int,
    source_factory: Callable = OpenCVFrameSource,
) -> PipelineRunner:
    """Assemble the runner for one configured camera."""
    source = source_factory(
        name=camera.name,
        source=camera.source,
        resolution=camera.resolution,
        fps=camera.fps,
        properties=camera.properties,
    )
    try:
        return _assemble_runner(camera, source, snapshot_dir, status_interval)
    except Exception:
        source.release()
        raise


def _assemble_runner(
    camera: CameraSchema, source, snapshot_dir: str, status_interval: int
) -> PipelineRunner:
    config_state = ConfigState(
        threshold=camera.threshold.to_settings(),
        contour_filter=camera.contour_filter.to_settings(),
    )
    pipeline = TargetingPipeline(
        pairer=TargetPairer(camera.pairing.alignment_tolerance_px)
    )

    if camera.snapshot.enabled:
        frame_sink = SnapshotFrameSink(
            camera.name, snapshot_dir, camera.snapshot.interval_seconds
        )
    else:
        frame_sink = NullFrameSink()

    return PipelineRunner(
        name=camera.name,
        source=source,
        config_state=config_state,
        telemetry=build_telemetry_sink(camera.name, camera.telemetry),
        pipeline=pipeline,
        frame_sink=frame_sink,
        annotator=Annotator() if camera.annotate else None,
        status_interval=status_interval,
    )


class VisionSupervisor:
    """Starts, watches and stops a set of PipelineRunners."""

    def __init__(
        self,
        runners: list[PipelineRunner],
        tuning_file: str | None = None,
        tuning_poll_interval: float = DEFAULT_TUNING_POLL_INTERVAL,
        shutdown_command: str | None = None,
        shutdown_timeout: float = DEFAULT_RUNNER_SHUTDOWN_TIMEOUT,
    ):
        """
        Args:
            runners: One runner per camera (names must be unique)
            tuning_file: Optional YAML file watched for live tuning
            tuning_poll_interval: Seconds between tuning file checks
            shutdown_command: Run on stop() after a power-off request
            shutdown_timeout: Seconds to wait for each runner thread
        """
        self.runners = runners
        self.shutdown_command = shutdown_command
        self.shutdown_timeout = shutdown_timeout

        self.routers = {
            runner.name: TuningRouter(runner.name, runner.config_state, runner.source)
            for runner in runners
        }

        # Integrations put TuningEvent tuples here
        self.events: queue.Queue = queue.Queue()
        self.listener = ConfigListener(
            self.events, self.routers, on_shutdown=self._remote_shutdown
        )
        self.file_watcher = (
            TuningFileWatcher(
                tuning_file,
                self.routers,
                tuning_poll_interval,
                on_shutdown=self._remote_shutdown,
            )
            if tuning_file
            else None
        )

        self.power_off = False
        self._shutdown = threading.Event()
        self._threads: list[threading.Thread] = []

    @classmethod
    def from_config(
        cls, config: VisionConfig, source_factory: Callable = OpenCVFrameSource
    ) -> "VisionSupervisor":
        """
        Build a supervisor with one runner per configured camera.

        If any camera fails to build, the runners already built are
        released before the error propagates.
        """
        runners = []
        try:
            for camera in config.cameras:
                runners.append(
                    build_runner(
                        camera,
                        config.snapshots.dir,
                        config.runtime.status_interval_frames,
                        source_factory,
                    )
                )
        except Exception:
            for runner in runners:
                runner.release()
            raise

        return cls(
            runners,
            tuning_file=config.tuning.file,
            tuning_poll_interval=config.tuning.poll_interval_seconds,
            shutdown_command=config.runtime.shutdown_command,
            shutdown_timeout=config.runtime.shutdown_timeout_seconds,
        )

    @property
    def shutdown_requested(self) -> bool:
        return self._shutdown.is_set()

    def start(self) -> None:
        """Start the configuration channel, then one thread per runner."""
        self.listener.start()
        if self.file_watcher is not None:
            self.file_watcher.start()

        for runner in self.runners:
            thread = threading.Thread(
                target=self._run_runner,
                args=(runner,),
                name=f"VisionThread-{runner.name}",
                daemon=True,
            )
            thread.start()
            self._threads.append(thread)
            logger.info(f"Started {thread.name}")

    def request_shutdown(self, power_off: bool = False) -> None:
        """Ask the process to stop; stop() does the actual teardown."""
        if power_off:
            self.power_off = True
        self._shutdown.set()

    def wait(self, timeout: float | None = None) -> bool:
        """Block until shutdown is requested. Returns True if it was."""
        return self._shutdown.wait(timeout)

    def any_alive(self) -> bool:
        return any(thread.is_alive() for thread in self._threads)

    def stop(self, timeout: float | None = None) -> None:
        """
        Cancel every runner, wait for them, stop the configuration channel.

        Runners release their own resources on the way out; runners that
        were never started are released here. A runner that does not stop
        within the timeout is reported and abandoned (threads are daemons). The power-off command, if requested, runs last and a
        failure is only logged.
        """
        timeout = self.shutdown_timeout if timeout is None else timeout
        self._shutdown.set()

        for runner in self.runners:
            runner.stop()

        for thread in self._threads:
            thread.join(timeout=timeout)
            if thread.is_alive():
                logger.warning(f"{thread.name} did not stop within {timeout}s")

        # Runners without a thread never entered their loop
        started = {thread.name for thread in self._threads}
        for runner in self.runners:
            if f"VisionThread-{runner.name}" not in started:
                runner.release()

        if self.file_watcher is not None:
            self.file_watcher.stop()
        self.listener.stop()

        if self.power_off and self.shutdown_command:
            success, error = run_command(self.shutdown_command)
            if not success:
                logger.error(f"Shutdown command failed: {error}")

    def _remote_shutdown(self) -> None:
        self.request_shutdown(power_off=True)

    @staticmethod
    def _run_runner(runner: PipelineRunner) -> None:
        """Thread target with error handling."""
        try:
            runner.run()
        except Exception as e:
            logger.error(f"{runner.name} runner exited with error: {e}")

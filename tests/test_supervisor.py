"""
Tests for the multi-camera supervisor
"""

import shutil
import tempfile
import time
import unittest
from unittest.mock import patch

import cv2
import numpy as np

from src.target_vision.config import VisionConfig
from src.target_vision.core.runner import RunnerState
from src.target_vision.core.supervisor import VisionSupervisor
from src.target_vision.models import GrabResult
from src.target_vision.tuning import TuningEvent

GREEN = (0, 255, 0)


class LoopingSource:
    """Serves the same target frame forever, a little slower than a camera."""

    instances = []

    def __init__(self, name, source, resolution, fps, properties):
        self.name = name
        self.properties = dict(properties)
        self.released = False
        self.frame = np.zeros((resolution[1], resolution[0], 3), dtype=np.uint8)
        cv2.rectangle(self.frame, (60, 80), (99, 159), GREEN, -1)
        cv2.rectangle(self.frame, (200, 80), (229, 139), GREEN, -1)
        LoopingSource.instances.append(self)

    def try_grab(self, frame):
        time.sleep(0.005)
        return GrabResult(frame=self.frame.copy())

    def set_property(self, name, value):
        self.properties[name] = value
        return True

    def release(self):
        self.released = True


class TestVisionSupervisor(unittest.TestCase):
    """Test runner threads, remote shutdown and teardown."""

    def setUp(self):
        LoopingSource.instances = []
        self.temp_dir = tempfile.mkdtemp()
        self.config = VisionConfig(
            cameras=[
                {"name": "front", "source": 0, "telemetry": [], "snapshot": {"enabled": False}},
                {"name": "rear", "source": 1, "telemetry": [], "annotate": False,
                 "properties": {"brightness": 10}},
            ],
            snapshots={"dir": self.temp_dir, "server_enabled": False},
            runtime={"shutdown_command": "sudo shutdown -h now", "shutdown_timeout_seconds": 2},
        )

    def tearDown(self):
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def build(self):
        with self.assertLogs(level="WARNING"):
            # Empty telemetry lists warn at build time
            return VisionSupervisor.from_config(self.config, source_factory=LoopingSource)

    def wait_for_frames(self, supervisor, count=3):
        deadline = time.monotonic() + 5
        while time.monotonic() < deadline:
            if all(runner.frame_count >= count for runner in supervisor.runners):
                return
            time.sleep(0.01)
        self.fail("runners did not process frames")

    def test_builds_one_runner_per_camera(self):
        supervisor = self.build()

        self.assertEqual([r.name for r in supervisor.runners], ["front", "rear"])
        self.assertEqual(set(supervisor.routers), {"front", "rear"})
        self.assertIsNone(supervisor.file_watcher)
        self.assertIsNotNone(supervisor.runners[0].annotator)
        self.assertIsNone(supervisor.runners[1].annotator)
        self.assertEqual(LoopingSource.instances[1].properties, {"brightness": 10})

    def test_start_and_stop(self):
        supervisor = self.build()
        supervisor.start()
        self.wait_for_frames(supervisor)

        self.assertTrue(supervisor.any_alive())
        thread_names = sorted(t.name for t in supervisor._threads)
        self.assertEqual(thread_names, ["VisionThread-front", "VisionThread-rear"])

        with patch("src.target_vision.core.supervisor.run_command") as run_command:
            supervisor.stop(timeout=2)

        self.assertFalse(supervisor.any_alive())
        for runner in supervisor.runners:
            self.assertIs(runner.state, RunnerState.STOPPED)
        self.assertTrue(all(source.released for source in LoopingSource.instances))
        # Power-off was not requested
        run_command.assert_not_called()

    def test_live_update_reaches_runner(self):
        supervisor = self.build()
        supervisor.start()
        self.wait_for_frames(supervisor)

        supervisor.events.put(TuningEvent("front", "hueMin", 100))
        supervisor.events.put(TuningEvent("rear", "brightness", 40))

        deadline = time.monotonic() + 5
        while time.monotonic() < deadline:
            if supervisor.runners[0].config_state.snapshot().threshold.hue[0] == 100.0:
                break
            time.sleep(0.01)
        supervisor.stop(timeout=2)

        self.assertEqual(supervisor.runners[0].config_state.snapshot().threshold.hue[0], 100.0)
        self.assertEqual(LoopingSource.instances[1].properties["brightness"], 40.0)

    def test_remote_shutdown_runs_command(self):
        supervisor = self.build()
        supervisor.start()

        supervisor.events.put(TuningEvent(None, "shutdown", True))

        self.assertTrue(supervisor.wait(timeout=5))
        self.assertTrue(supervisor.power_off)

        with patch(
            "src.target_vision.core.supervisor.run_command", return_value=(True, None)
        ) as run_command:
            supervisor.stop(timeout=2)

        run_command.assert_called_once_with("sudo shutdown -h now")

    def test_failed_shutdown_command_logged(self):
        supervisor = self.build()
        supervisor.start()
        supervisor.request_shutdown(power_off=True)

        with patch(
            "src.target_vision.core.supervisor.run_command", return_value=(False, "denied")
        ):
            with self.assertLogs(level="ERROR") as logs:
                supervisor.stop(timeout=2)

        self.assertTrue(any("denied" in line for line in logs.output))
        self.assertFalse(supervisor.any_alive())

    def test_failed_camera_releases_earlier_cameras(self):
        def factory(name, **kwargs):
            if name == "rear":
                raise RuntimeError("Cannot connect to camera: 1")
            return LoopingSource(name, **kwargs)

        with self.assertLogs(level="WARNING"):
            with self.assertRaises(RuntimeError):
                VisionSupervisor.from_config(self.config, source_factory=factory)

        self.assertEqual(len(LoopingSource.instances), 1)
        self.assertTrue(LoopingSource.instances[0].released)

    def test_stop_without_start_releases_sources(self):
        supervisor = self.build()

        supervisor.stop(timeout=1)

        self.assertTrue(all(source.released for source in LoopingSource.instances))
        for runner in supervisor.runners:
            self.assertIs(runner.state, RunnerState.STOPPED)

    def test_request_shutdown_without_power_off(self):
        supervisor = self.build()

        supervisor.request_shutdown()

        self.assertTrue(supervisor.shutdown_requested)
        self.assertFalse(supervisor.power_off)


if __name__ == "__main__":
    unittest.main()

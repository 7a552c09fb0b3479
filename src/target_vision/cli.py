"""
Target Vision CLI
Main entry point for running the vision system.

  --validate  Check configuration validity and exit
"""

import argparse
import logging
import signal
import sys
import time
from threading import Event as ThreadEvent

from . import __version__
from .config import (
    ConfigValidationError,
    VisionConfig,
    load_config,
    load_raw_config,
    print_validation_result,
    validate_config_full,
)
from .core.supervisor import VisionSupervisor
from .utils.snapshot_server import start_snapshot_server, stop_snapshot_server

logger = logging.getLogger(__name__)

# Module-level shutdown signal for SIGTERM/SIGINT handling
_shutdown_signal = ThreadEvent()


def _handle_shutdown_signal(signum, _frame):
    """
    Handle SIGTERM/SIGINT for graceful shutdown.

    This allows the app to shutdown cleanly when running under
    systemd, Docker, or other process managers that send SIGTERM.
    """
    signal_name = "SIGTERM" if signum == signal.SIGTERM else "SIGINT"
    # Note: print is safer than logger in signal handlers
    print(f"\nReceived {signal_name}, initiating graceful shutdown...")
    _shutdown_signal.set()


def _setup_signal_handlers():
    """Register signal handlers for graceful shutdown."""
    signal.signal(signal.SIGTERM, _handle_shutdown_signal)
    signal.signal(signal.SIGINT, _handle_shutdown_signal)


def setup_logging(quiet: bool = False) -> None:
    """
    Setup logging configuration.

    Args:
        quiet: If True, only show warnings and errors
    """
    level = logging.WARNING if quiet else logging.INFO

    # Custom formatter with shorter module names
    class ShortNameFormatter(logging.Formatter):
        def format(self, record):
            record.name = record.name.replace("target_vision.", "tv.")
            return super().format(record)

    handler = logging.StreamHandler()
    handler.setFormatter(
        ShortNameFormatter(
            fmt="%(asctime)s %(name)s %(levelname)s %(message)s", datefmt="%H:%M:%S"
        )
    )
    logging.root.addHandler(handler)
    logging.root.setLevel(level)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Target Vision - retroreflective target detection for robot cameras",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m target_vision                  # Run until stopped
  python -m target_vision 2.5              # Run for 2.5 minutes
  python -m target_vision -c robot.yaml -q # Custom config, warnings only
  python -m target_vision --validate       # Check config validity

Environment Variables:
  CAMERA_URL - Override the first camera's source
        """,
    )

    parser.add_argument(
        "duration",
        type=float,
        nargs="?",
        help="Duration in minutes (default: run until stopped)",
    )

    parser.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        help="Quiet mode - only show warnings and errors",
    )

    parser.add_argument(
        "-c",
        "--config",
        default=None,
        help="Path to config file (default: ./vision.yaml, then ~/.config/target-vision/)",
    )

    parser.add_argument(
        "--validate",
        action="store_true",
        help="Validate configuration and show derived settings",
    )

    return parser.parse_args(argv)


def print_banner(config: VisionConfig, duration_minutes: float | None) -> None:
    """Print system startup banner."""
    print("\n" + "=" * 70)
    print(f"TARGET VISION v{__version__}")
    print("=" * 70)

    print(f"\nCameras: {len(config.cameras)}")
    for camera in config.cameras:
        width, height = camera.resolution
        sinks = ", ".join(sink["type"] for sink in camera.telemetry) or "none"
        print(
            f"  {camera.name}: {camera.source} @ {width}x{height} {camera.fps}fps "
            f"[{camera.contour_filter.mode}] -> {sinks}"
        )

    print("\nRuntime:")
    if duration_minutes is None:
        print("  Duration: until stopped")
    else:
        print(f"  Duration: {duration_minutes} minute(s)")
    if config.tuning.file:
        print(f"  Tuning file: {config.tuning.file}")
    print("  Press Ctrl+C to stop")
    print("=" * 70)
    print()


def monitor(
    supervisor: VisionSupervisor, duration_seconds: float | None, start_time: float
) -> str:
    """
    Wait until something ends the run.

    Returns:
        Reason for stopping ('signal', 'duration', 'remote', 'runners_died', 'interrupted')
    """
    try:
        while True:
            if _shutdown_signal.is_set():
                return "signal"

            if supervisor.shutdown_requested:
                return "remote"

            if duration_seconds is not None and time.time() - start_time >= duration_seconds:
                return "duration"

            if not supervisor.any_alive():
                return "runners_died"

            # Wakes immediately on a remote shutdown request
            supervisor.wait(timeout=1)

    except KeyboardInterrupt:
        return "interrupted"


def print_final_status(supervisor: VisionSupervisor, reason: str, elapsed: float) -> None:
    """Print final status and per-camera counts."""
    print(f"\n{'=' * 70}")

    if reason == "duration":
        print(f"Duration reached - stopped after {elapsed / 60:.1f} minutes")
    elif reason == "remote":
        print("Shutdown requested on the configuration channel")
    elif reason == "runners_died":
        print("All camera pipelines ended")
    elif reason == "interrupted":
        print("Interrupted by user (Ctrl+C)")
    elif reason == "signal":
        print("Shutdown signal received (SIGTERM/SIGINT)")

    print("=" * 70)
    print("SYSTEM SHUTDOWN COMPLETE")
    print("=" * 70)

    for runner in supervisor.runners:
        print(
            f"  {runner.name}: {runner.state.value}, {runner.frame_count} frames, "
            f"{runner.detection_count} with targets, {runner.grab_failures} grab failures"
        )
    print(f"{'=' * 70}\n")


def run_validate(config_path: str | None) -> int:
    """Run validation mode. Returns the exit status."""
    try:
        config = load_raw_config(config_path)
    except ConfigValidationError as e:
        print(f"Error: {e}")
        return 1

    result = validate_config_full(config)
    print_validation_result(result)
    return 0 if result.valid else 1


def main(argv: list[str] | None = None) -> None:
    """Main orchestrator function."""
    args = parse_args(argv)
    setup_logging(quiet=args.quiet or args.validate)

    if args.validate:
        sys.exit(run_validate(args.config))

    if args.duration is not None and args.duration <= 0:
        logger.error(f"Invalid duration '{args.duration}' - must be positive")
        sys.exit(1)

    try:
        config, _ = load_config(args.config)
    except ConfigValidationError as e:
        print("Configuration has errors:")
        for error in e.errors:
            print(f"  ✗ {error}")
        sys.exit(1)

    print_banner(config, args.duration)

    snapshot_server = None
    if config.snapshots.server_enabled:
        snapshot_url, snapshot_server = start_snapshot_server(
            config.snapshots.dir, config.snapshots.port
        )
        print(f"Snapshot server: {snapshot_url}")
        print()

    _setup_signal_handlers()

    try:
        supervisor = VisionSupervisor.from_config(config)
    except RuntimeError as e:
        logger.error(f"Failed to start: {e}")
        stop_snapshot_server(snapshot_server)
        sys.exit(1)

    supervisor.start()

    print("\n" + "=" * 70)
    print("SYSTEM RUNNING")
    print("=" * 70 + "\n")

    start_time = time.time()
    duration_seconds = args.duration * 60 if args.duration is not None else None
    reason = monitor(supervisor, duration_seconds, start_time)
    elapsed = time.time() - start_time

    logger.info("Shutting down...")
    supervisor.stop()
    stop_snapshot_server(snapshot_server)

    print_final_status(supervisor, reason, elapsed)


if __name__ == "__main__":
    main()

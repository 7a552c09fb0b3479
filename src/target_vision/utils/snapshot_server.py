"""
Snapshot server - serves the latest annotated frame of each camera via HTTP.

Runners write <camera>.jpg into the snapshot directory at a throttled rate;
this server exposes that directory as static files from a child process,
so a slow browser never touches a pipeline thread.
"""

import logging
import os
import socket
import subprocess
import sys

from .constants import DEFAULT_SNAPSHOT_DIR, DEFAULT_SNAPSHOT_PORT

logger = logging.getLogger(__name__)


def _get_local_ip() -> str:
    """Get local IP address for remote access."""
    try:
        # Connect to external address to determine local IP
        with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as s:
            s.connect(("8.8.8.8", 80))
            return s.getsockname()[0]
    except OSError:
        return "localhost"


def _port_in_use(port: int) -> bool:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        return sock.connect_ex(("localhost", port)) == 0


def start_snapshot_server(
    snapshot_dir: str = DEFAULT_SNAPSHOT_DIR, port: int = DEFAULT_SNAPSHOT_PORT
) -> tuple[str, subprocess.Popen | None]:
    """
    Start static file server for snapshots.

    Args:
        snapshot_dir: Directory holding <camera>.jpg files
        port: Port to listen on

    Returns:
        Tuple of (base URL, server process or None if not started)
    """
    os.makedirs(snapshot_dir, exist_ok=True)
    url = f"http://{_get_local_ip()}:{port}/"

    if _port_in_use(port):
        # Assume a server from an earlier run is still serving the directory
        logger.info(f"Port {port} already in use, not starting snapshot server")
        return url, None

    try:
        server = subprocess.Popen(
            [sys.executable, "-m", "http.server", str(port), "--bind", "0.0.0.0"],
            cwd=snapshot_dir,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
        )
    except OSError as e:
        logger.warning(f"Could not start snapshot server: {e}")
        return url, None

    logger.info(f"Snapshot server started on port {port} serving {snapshot_dir}")
    return url, server


def stop_snapshot_server(server: subprocess.Popen | None) -> None:
    """Terminate the server process, killing it if it does not exit."""
    if server is None:
        return

    server.terminate()
    try:
        server.wait(timeout=2)
    except subprocess.TimeoutExpired:
        server.kill()
        server.wait()

"""
Command Runner - Execute the configured power-off command.

Runs with a timeout so a hung command cannot block process exit.
"""

import logging
import subprocess

from .constants import DEFAULT_COMMAND_TIMEOUT

logger = logging.getLogger(__name__)


def run_command(command: str, timeout: float = DEFAULT_COMMAND_TIMEOUT) -> tuple[bool, str | None]:
    """
    Execute a shell command.

    Args:
        command: Shell command line (e.g. "sudo shutdown -h now")
        timeout: Seconds before the command is abandoned

    Returns:
        (success, error_message) tuple
    """
    if not command:
        return False, "No command specified"

    logger.info(f"Running command: {command}")

    try:
        result = subprocess.run(
            command,
            shell=True,
            timeout=timeout,
            capture_output=True,
            text=True,
        )

        if result.returncode == 0:
            logger.info("Command completed successfully")
            if result.stdout:
                logger.debug(f"Command stdout: {result.stdout.strip()}")
            return True, None

        error_msg = f"Command failed with code {result.returncode}"
        if result.stderr:
            error_msg += f": {result.stderr.strip()}"
        logger.error(error_msg)
        return False, error_msg

    except subprocess.TimeoutExpired:
        error_msg = f"Command timed out after {timeout}s"
        logger.error(error_msg)
        return False, error_msg

    except OSError as e:
        error_msg = f"Command execution error: {e}"
        logger.error(error_msg, exc_info=True)
        return False, error_msg

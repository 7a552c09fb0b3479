"""
Configuration loading.

Finds the config file, follows pointer files, applies environment
overrides and validates. Problems raise ConfigValidationError carrying
the collected messages; the CLI decides how to report them.
"""

import logging
import os
from pathlib import Path

import yaml

from ..utils.constants import ENV_CAMERA_URL
from .schemas import VisionConfig
from .validator import ValidationResult, validate_config_full

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_NAME = "vision.yaml"


class ConfigValidationError(Exception):
    """Raised when config loading or validation fails."""

    def __init__(self, message: str, errors: list[str] | None = None):
        super().__init__(message)
        self.errors = errors or [message]


def find_config_file(config_path: str | None = None) -> Path:
    """
    Find config file in standard locations.

    Search order:
    1. Specified path (if provided)
    2. Current directory (vision.yaml)
    3. ~/.config/target-vision/vision.yaml

    Raises:
        ConfigValidationError: If no config file is found
    """
    if config_path:
        specified = Path(config_path)
        if specified.exists():
            return specified
        raise ConfigValidationError(f"Specified config file not found: {config_path}")

    search_paths = [
        Path.cwd() / DEFAULT_CONFIG_NAME,
        Path.home() / ".config" / "target-vision" / DEFAULT_CONFIG_NAME,
    ]

    for path in search_paths:
        if path.exists():
            logger.info(f"Using config: {path}")
            return path

    searched = ", ".join(str(path) for path in search_paths)
    raise ConfigValidationError(f"No config file found (searched: {searched})")


def load_config_with_env(config: dict) -> dict:
    """
    Apply environment variable overrides to config.

    CAMERA_URL replaces the first camera's source. A purely numeric value
    is treated as a device index.
    """
    camera_url = os.environ.get(ENV_CAMERA_URL)
    if camera_url:
        cameras = config.get("cameras")
        if isinstance(cameras, list) and cameras and isinstance(cameras[0], dict):
            logger.info(f"Using camera source from environment: {ENV_CAMERA_URL}")
            cameras[0]["source"] = int(camera_url) if camera_url.isdigit() else camera_url
        else:
            logger.warning(f"{ENV_CAMERA_URL} is set but no camera is configured")

    return config


def load_raw_config(config_path: str | None = None) -> dict:
    """
    Read the YAML config without validating it.

    Supports pointer files: if config only contains `use: path/to/vision.yaml`,
    that file is loaded instead.
    """
    config_file = find_config_file(config_path)

    try:
        with open(config_file, encoding="utf-8") as f:
            config = yaml.safe_load(f)

        if isinstance(config, dict) and list(config.keys()) == ["use"]:
            pointer_target = config["use"]
            # Resolve relative to the pointer file's directory
            pointer_path = config_file.parent / pointer_target
            logger.info(f"Config pointer: {config_file} -> {pointer_target}")
            with open(pointer_path, encoding="utf-8") as f:
                config = yaml.safe_load(f)
            config_file = pointer_path

    except yaml.YAMLError as e:
        raise ConfigValidationError(f"Invalid YAML in {config_file}: {e}") from e
    except OSError as e:
        raise ConfigValidationError(f"Cannot read config {config_file}: {e}") from e

    if not isinstance(config, dict):
        raise ConfigValidationError(f"Config must be a mapping: {config_file}")

    logger.info(f"Configuration loaded from {config_file}")
    return load_config_with_env(config)


def load_config(config_path: str | None = None) -> tuple[VisionConfig, ValidationResult]:
    """
    Load, validate and parse the configuration.

    Returns:
        (parsed config, validation result with warnings)

    Raises:
        ConfigValidationError: If the file is missing, unreadable or invalid
    """
    config = load_raw_config(config_path)

    result = validate_config_full(config)
    if not result.valid:
        raise ConfigValidationError("Configuration has errors", result.errors)

    for warning in result.warnings:
        logger.warning(f"Config: {warning}")

    logger.info("Configuration validated")
    return VisionConfig(**config), result

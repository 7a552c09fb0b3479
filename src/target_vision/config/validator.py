"""
Configuration Validator - Validates config syntax and semantic correctness.

Schema errors come from pydantic; semantic checks that are legal but
probably unintended (inverted ranges, ignored filter fields) are warnings.
"""

import logging
import sys
from dataclasses import dataclass, field
from typing import Any

from pydantic import ValidationError

from ..sinks.telemetry import SINK_REGISTRY
from .schemas import CameraSchema, VisionConfig, validate_config_pydantic

logger = logging.getLogger(__name__)


@dataclass
class ValidationResult:
    """Result of config validation."""

    valid: bool
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    derived: dict[str, Any] = field(default_factory=dict)


def validate_config_full(config: dict) -> ValidationResult:
    """
    Comprehensive config validation with detailed error messages.

    Args:
        config: Configuration dictionary to validate

    Returns:
        ValidationResult with errors, warnings, and derived configuration.
    """
    result = ValidationResult(valid=True)

    if not isinstance(config, dict):
        result.errors.append("Configuration must be a mapping")
        result.valid = False
        return result

    if "cameras" not in config:
        result.errors.append("Missing required section: 'cameras'")
        result.valid = False
        return result

    try:
        parsed = validate_config_pydantic(config)
    except ValidationError as e:
        result.errors.extend(_format_pydantic_errors(e))
        result.valid = False
        return result

    for camera in parsed.cameras:
        _check_camera(camera, result)

    if parsed.tuning.file is None:
        result.warnings.append(
            "tuning.file not set - settings can only change through the listener queue"
        )

    result.derived["cameras"] = [camera.name for camera in parsed.cameras]
    result.derived["telemetry"] = _derive_sink_types(parsed)

    return result


def _check_camera(camera: CameraSchema, result: ValidationResult) -> None:
    ref = f"cameras[{camera.name}]"

    inverted = camera.threshold.to_settings().inverted_channels()
    for channel in inverted:
        result.warnings.append(f"{ref}.threshold.{channel}: min > max, mask will be empty")

    contour_filter = camera.contour_filter
    if contour_filter.max_area is not None and contour_filter.max_area < contour_filter.min_area:
        result.warnings.append(f"{ref}.contour_filter: max_area < min_area, nothing will pass")

    if contour_filter.mode == "area":
        customized = contour_filter.model_fields_set - {"mode", "min_area", "max_area"}
        if customized:
            fields = ", ".join(sorted(customized))
            result.warnings.append(
                f"{ref}.contour_filter: {fields} ignored in 'area' mode (set mode: full)"
            )

    low, high = contour_filter.solidity
    if low > high:
        result.warnings.append(f"{ref}.contour_filter.solidity: min > max, nothing will pass")

    for sink in camera.telemetry:
        if sink["type"] not in SINK_REGISTRY:
            known = ", ".join(sorted(SINK_REGISTRY))
            result.warnings.append(
                f"{ref}.telemetry: unknown sink type '{sink['type']}' will be skipped (known: {known})"
            )

    if not camera.telemetry:
        result.warnings.append(f"{ref}: no telemetry sinks - results are discarded")


def _derive_sink_types(parsed: VisionConfig) -> dict[str, list[str]]:
    return {
        camera.name: [sink["type"] for sink in camera.telemetry]
        for camera in parsed.cameras
    }


def _format_pydantic_errors(error: ValidationError) -> list[str]:
    messages = []
    for item in error.errors():
        location = ".".join(str(part) for part in item["loc"])
        messages.append(f"{location}: {item['msg']}" if location else item["msg"])
    return messages


# ANSI color codes for terminal output
class Colors:
    GREEN = "\033[92m"
    RED = "\033[91m"
    YELLOW = "\033[93m"
    CYAN = "\033[96m"
    BOLD = "\033[1m"
    RESET = "\033[0m"

    @classmethod
    def disable(cls):
        """Disable colors for non-TTY output."""
        cls.GREEN = cls.RED = cls.YELLOW = ""
        cls.CYAN = cls.BOLD = cls.RESET = ""


# Disable colors if not a TTY
if not sys.stdout.isatty():
    Colors.disable()


def print_validation_result(result: ValidationResult) -> None:
    """Print validation result in a plan-style summary."""
    print()
    print(f"{Colors.BOLD}Configuration Validation{Colors.RESET}")
    print("=" * 60)

    if result.valid:
        print(f"\n{Colors.GREEN}✓ Configuration is valid{Colors.RESET}")
    else:
        print(f"\n{Colors.RED}✗ Configuration has errors{Colors.RESET}")

    if result.errors:
        print(f"\n{Colors.RED}Errors:{Colors.RESET}")
        for error in result.errors:
            print(f"  {Colors.RED}✗{Colors.RESET} {error}")

    if result.warnings:
        print(f"\n{Colors.YELLOW}Warnings:{Colors.RESET}")
        for warning in result.warnings:
            print(f"  {Colors.YELLOW}!{Colors.RESET} {warning}")

    if result.valid and result.derived:
        print(f"\n{Colors.CYAN}Derived Configuration:{Colors.RESET}")

        cameras = result.derived.get("cameras", [])
        if cameras:
            print(f"  Cameras: {', '.join(cameras)}")

        for camera, sinks in result.derived.get("telemetry", {}).items():
            print(f"  Telemetry ({camera}): {', '.join(sinks) or 'none'}")

    print()

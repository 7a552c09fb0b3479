"""
Configuration loading and validation.

- load_config: Find, read, override from environment and validate
- validate_config_full: Comprehensive validation with errors/warnings

Pydantic schemas available for type-safe validation:
- VisionConfig: Complete configuration schema
- validate_config_pydantic: Validate and parse config to Pydantic model
"""

from .loader import (
    ConfigValidationError,
    find_config_file,
    load_config,
    load_config_with_env,
    load_raw_config,
)
from .schemas import (
    CameraSchema,
    ContourFilterSchema,
    ThresholdSchema,
    VisionConfig,
    validate_config_pydantic,
)
from .validator import (
    ValidationResult,
    print_validation_result,
    validate_config_full,
)

__all__ = [
    # Pydantic validation
    "CameraSchema",
    "ContourFilterSchema",
    "ThresholdSchema",
    "VisionConfig",
    "validate_config_pydantic",
    # Loading
    "ConfigValidationError",
    "find_config_file",
    "load_config",
    "load_config_with_env",
    "load_raw_config",
    # Validation
    "ValidationResult",
    "print_validation_result",
    "validate_config_full",
]

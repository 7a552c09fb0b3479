"""
Pydantic schemas for configuration validation.

Provides type-safe, declarative validation with clear error messages.
Threshold ranges are deliberately not order-checked: an inverted range is
a legal (if useless) setting that yields an empty mask.
"""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..models import ContourFilterConfig, FilterMode, ThresholdConfig
from ..utils.constants import (
    DEFAULT_ALIGNMENT_TOLERANCE_PX,
    DEFAULT_FPS,
    DEFAULT_RESOLUTION,
    DEFAULT_RUNNER_SHUTDOWN_TIMEOUT,
    DEFAULT_SNAPSHOT_DIR,
    DEFAULT_SNAPSHOT_INTERVAL,
    DEFAULT_SNAPSHOT_PORT,
    DEFAULT_TUNING_POLL_INTERVAL,
    STATUS_REPORT_INTERVAL,
)

RangeField = tuple[float, float]


class StrictModel(BaseModel):
    """Base model that rejects unknown fields."""

    model_config = ConfigDict(extra="forbid")


class ThresholdSchema(StrictModel):
    """HLS segmentation ranges (OpenCV 8-bit scale)."""

    hue: RangeField = (47.0, 95.0)
    saturation: RangeField = (197.0, 255.0)
    luminance: RangeField = (83.0, 195.0)

    def to_settings(self) -> ThresholdConfig:
        return ThresholdConfig(
            hue=self.hue, saturation=self.saturation, luminance=self.luminance
        )


class ContourFilterSchema(StrictModel):
    """Contour filter criteria."""

    mode: Literal["area", "full"] = "area"
    min_area: float = Field(default=50.0, ge=0)
    max_area: float | None = Field(default=None, ge=0)
    min_perimeter: float = Field(default=0.0, ge=0)
    min_width: float = Field(default=0.0, ge=0)
    max_width: float = Field(default=1000.0, ge=0)
    min_height: float = Field(default=0.0, ge=0)
    max_height: float = Field(default=1000.0, ge=0)
    solidity: RangeField = (80.0, 100.0)
    min_vertices: float = Field(default=0.0, ge=0)
    max_vertices: float = Field(default=1_000_000.0, ge=0)
    min_ratio: float = Field(default=0.0, ge=0)
    max_ratio: float = Field(default=1000.0, ge=0)

    def to_settings(self) -> ContourFilterConfig:
        values = self.model_dump(exclude={"mode"})
        return ContourFilterConfig(mode=FilterMode(self.mode), **values)


class PairingSchema(StrictModel):
    """Target pairing settings."""

    alignment_tolerance_px: float = Field(
        default=DEFAULT_ALIGNMENT_TOLERANCE_PX,
        description="Max x-offset at which targets are ordered top-to-bottom; negative = always by x",
    )


class SnapshotSchema(StrictModel):
    """Per-camera snapshot output."""

    enabled: bool = True
    interval_seconds: float = Field(default=DEFAULT_SNAPSHOT_INTERVAL, ge=0)


class CameraSchema(StrictModel):
    """One camera and its pipeline."""

    name: str = Field(..., min_length=1, pattern=r"^[A-Za-z0-9_\-]+$")
    source: int | str = Field(..., description="Device index, device path or stream URL")
    resolution: tuple[int, int] = DEFAULT_RESOLUTION
    fps: int = Field(default=DEFAULT_FPS, gt=0)
    properties: dict[str, float] = Field(default_factory=dict)
    threshold: ThresholdSchema = Field(default_factory=ThresholdSchema)
    contour_filter: ContourFilterSchema = Field(default_factory=ContourFilterSchema)
    pairing: PairingSchema = Field(default_factory=PairingSchema)
    telemetry: list[dict[str, Any]] = Field(default_factory=lambda: [{"type": "log"}])
    snapshot: SnapshotSchema = Field(default_factory=SnapshotSchema)
    annotate: bool = True

    @field_validator("resolution")
    @classmethod
    def validate_resolution(cls, v: tuple[int, int]) -> tuple[int, int]:
        if v[0] <= 0 or v[1] <= 0:
            raise ValueError("resolution must be positive (width, height)")
        return v

    @field_validator("telemetry")
    @classmethod
    def validate_telemetry(cls, v: list[dict[str, Any]]) -> list[dict[str, Any]]:
        for sink in v:
            if "type" not in sink:
                raise ValueError("every telemetry sink needs a 'type'")
        return v


class TuningSchema(StrictModel):
    """Live tuning file."""

    file: str | None = None
    poll_interval_seconds: float = Field(default=DEFAULT_TUNING_POLL_INTERVAL, gt=0)


class SnapshotsSchema(StrictModel):
    """Snapshot directory and HTTP server."""

    dir: str = DEFAULT_SNAPSHOT_DIR
    port: int = Field(default=DEFAULT_SNAPSHOT_PORT, ge=1, le=65535)
    server_enabled: bool = True


class RuntimeSchema(StrictModel):
    """Runtime configuration."""

    shutdown_timeout_seconds: float = Field(default=DEFAULT_RUNNER_SHUTDOWN_TIMEOUT, ge=0)
    shutdown_command: str | None = Field(
        default=None, description="Run on exit when shutdown was requested remotely"
    )
    status_interval_frames: int = Field(default=STATUS_REPORT_INTERVAL, gt=0)


class VisionConfig(StrictModel):
    """Complete configuration schema."""

    cameras: list[CameraSchema] = Field(..., min_length=1)
    tuning: TuningSchema = Field(default_factory=TuningSchema)
    snapshots: SnapshotsSchema = Field(default_factory=SnapshotsSchema)
    runtime: RuntimeSchema = Field(default_factory=RuntimeSchema)

    @field_validator("cameras")
    @classmethod
    def validate_unique_names(cls, v: list[CameraSchema]) -> list[CameraSchema]:
        names = [camera.name for camera in v]
        duplicates = sorted({name for name in names if names.count(name) > 1})
        if duplicates:
            raise ValueError(f"duplicate camera names: {', '.join(duplicates)}")
        return v


def validate_config_pydantic(config: dict) -> VisionConfig:
    """
    Validate configuration using Pydantic.

    Args:
        config: Raw configuration dictionary

    Returns:
        Validated VisionConfig object

    Raises:
        pydantic.ValidationError: If validation fails
    """
    return VisionConfig(**config)

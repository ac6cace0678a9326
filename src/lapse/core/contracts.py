"""Common Pydantic models shared across pipeline steps."""

from __future__ import annotations

import math
import os
from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from lapse.steps.s01_extract_archive.config import ExtractArchiveConfig
from lapse.steps.s02_sort_frames.config import SortFramesConfig
from lapse.steps.s03_reconcile_geometry.config import ReconcileGeometryConfig
from lapse.steps.s04_enhance_frames.config import EnhanceFramesConfig
from lapse.steps.s05_assemble_video.config import AssembleVideoConfig

from .errors import ValidationError

MIN_FRAME_RATE = 1
MAX_FRAME_RATE = 120
MIN_CAPTURE_INTERVAL = 0.1
MAX_CAPTURE_INTERVAL = 86400.0

# Caller-facing messages per request field
_FIELD_MESSAGES = {
    "source_archive_path": "No file uploaded",
    "frame_rate": f"FPS must be between {MIN_FRAME_RATE} and {MAX_FRAME_RATE}",
    "capture_interval_seconds": "Interval must be between 0.1 seconds and 24 hours",
    "transition": "Transition must be 'none' or 'fade'",
}


class QualityTier(str, Enum):
    """Quality tiers shared by the frame encoder and the video encoder."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @classmethod
    def resolve(cls, value: str | QualityTier) -> QualityTier:
        """Map a tier name to a tier; unknown names fall back to MEDIUM."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return cls.MEDIUM


class Transition(str, Enum):
    NONE = "none"
    FADE = "fade"


class JobState(str, Enum):
    """Orchestrator states. SUCCEEDED and FAILED are terminal."""

    CREATED = "created"
    EXTRACTING = "extracting"
    SORTING = "sorting"
    RECONCILING_GEOMETRY = "reconciling_geometry"
    ENHANCING = "enhancing"
    ASSEMBLING = "assembling"
    SUCCEEDED = "succeeded"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (JobState.SUCCEEDED, JobState.FAILED)


class ConversionRequest(BaseModel):
    """One accepted conversion job. Invalid parameters raise ValidationError."""

    model_config = ConfigDict(frozen=True)

    source_archive_path: Path
    output_path: Path
    frame_rate: int = Field(25, ge=MIN_FRAME_RATE, le=MAX_FRAME_RATE)
    capture_interval_seconds: float = Field(1.0, ge=MIN_CAPTURE_INTERVAL, le=MAX_CAPTURE_INTERVAL)
    quality_tier: str = Field("medium", description="low|medium|high; unknown tiers use medium settings")
    stabilize: bool = False
    transition: Transition = Transition.NONE

    def __init__(self, **data: Any) -> None:
        try:
            super().__init__(**data)
        except PydanticValidationError as exc:
            raise ValidationError(_describe(exc)) from exc

    @field_validator("source_archive_path")
    @classmethod
    def _archive_must_exist(cls, v: Path) -> Path:
        if not v.is_file():
            raise ValueError(f"archive not found: {v}")
        return v

    @field_validator("quality_tier")
    @classmethod
    def _normalize_tier(cls, v: str) -> str:
        return v.strip().lower()

    @property
    def tier(self) -> QualityTier:
        return QualityTier.resolve(self.quality_tier)

    @classmethod
    def from_options(
        cls,
        source_archive_path: Path | str | None,
        output_path: Path | str,
        fps: Any = 25,
        interval_seconds: Any = 1,
        quality: Any = "medium",
        stabilize: Any = False,
        transition: Any = "none",
    ) -> ConversionRequest:
        """Build a request from loosely typed form-style values.

        Numbers may arrive as strings, ``stabilize`` accepts ``"true"``.
        """
        if source_archive_path is None:
            raise ValidationError(_FIELD_MESSAGES["source_archive_path"])
        return cls(
            source_archive_path=Path(source_archive_path),
            output_path=Path(output_path),
            frame_rate=_parse_number(fps, int, "frame_rate"),
            capture_interval_seconds=_parse_number(interval_seconds, float, "capture_interval_seconds"),
            quality_tier=str(quality),
            stabilize=stabilize is True or str(stabilize).strip().lower() == "true",
            transition=str(transition).strip().lower(),
        )


def _parse_number(value: Any, kind: type, field: str) -> int | float:
    try:
        number = float(value)
    except (TypeError, ValueError) as exc:
        raise ValidationError(_FIELD_MESSAGES[field]) from exc
    if not math.isfinite(number):
        raise ValidationError(_FIELD_MESSAGES[field])
    return int(number) if kind is int else number


def _describe(exc: PydanticValidationError) -> str:
    messages = []
    for err in exc.errors():
        field = str(err["loc"][0]) if err["loc"] else ""
        messages.append(_FIELD_MESSAGES.get(field, f"{field}: {err['msg']}"))
    return "; ".join(dict.fromkeys(messages))


class TargetGeometry(BaseModel):
    """Common output frame size. Both sides are even (yuv420p chroma subsampling)."""

    model_config = ConfigDict(frozen=True)

    width: int = Field(..., gt=0)
    height: int = Field(..., gt=0)

    @field_validator("width", "height")
    @classmethod
    def _must_be_even(cls, v: int) -> int:
        if v % 2 != 0:
            raise ValueError(f"dimension must be even, got {v}")
        return v

    def as_tuple(self) -> tuple[int, int]:
        return self.width, self.height

    def __str__(self) -> str:
        return f"{self.width}x{self.height}"


class ImageFrame(BaseModel):
    """A source image with its position in the shooting sequence."""

    model_config = ConfigDict(frozen=True)

    source_path: Path
    sequence_index: int = Field(..., ge=1, description="1-based position in the sequence")
    decoded_width: int = Field(..., gt=0)
    decoded_height: int = Field(..., gt=0)

    def frame_name(self, pad_digits: int = 6, prefix: str = "frame_", extension: str = "jpg") -> str:
        return f"{prefix}{self.sequence_index:0{pad_digits}d}.{extension}"


class TimelapseMetrics(BaseModel):
    """Derived timing of a finished job; the job's result payload."""

    model_config = ConfigDict(frozen=True)

    frame_count: int = Field(..., ge=1)
    video_duration_seconds: float
    real_duration_seconds: int
    speedup_factor: int
    frame_rate: int
    geometry: TargetGeometry

    def to_payload(self) -> dict[str, Any]:
        """Result metadata under the caller-facing field names."""
        return {
            "frameCount": self.frame_count,
            "duration": self.video_duration_seconds,
            "realDuration": self.real_duration_seconds,
            "speedupFactor": self.speedup_factor,
            "fps": self.frame_rate,
            "dimensions": {"width": self.geometry.width, "height": self.geometry.height},
        }


class StepConfigs(BaseModel):
    """Per-step configuration blocks, keyed by step name in pipeline.yaml."""

    extract_archive: ExtractArchiveConfig = Field(default_factory=ExtractArchiveConfig)
    sort_frames: SortFramesConfig = Field(default_factory=SortFramesConfig)
    reconcile_geometry: ReconcileGeometryConfig = Field(default_factory=ReconcileGeometryConfig)
    enhance_frames: EnhanceFramesConfig = Field(default_factory=EnhanceFramesConfig)
    assemble_video: AssembleVideoConfig = Field(default_factory=AssembleVideoConfig)


def _default_workers() -> int:
    return max(1, min(8, os.cpu_count() or 1))


class PipelineConfig(BaseModel):
    """Top-level pipeline configuration loaded from pipeline.yaml."""

    project_name: str = "lapse"
    data_root: Path = Path("./data")
    max_workers: int = Field(default_factory=_default_workers, ge=1, le=32)
    encode_timeout_seconds: int = Field(3600, gt=0, description="Kill the encoder after this many seconds")
    log_level: str = "INFO"
    steps: StepConfigs = Field(default_factory=StepConfigs)

    @property
    def upload_dir(self) -> Path:
        return self.data_root / "uploads"

    @property
    def output_dir(self) -> Path:
        return self.data_root / "outputs"

    @property
    def temp_dir(self) -> Path:
        return self.data_root / "temp"

    def ensure_directories(self) -> None:
        for d in (self.upload_dir, self.output_dir, self.temp_dir):
            d.mkdir(parents=True, exist_ok=True)


class EncoderSettings(BaseModel):
    """Encoder parameters for one job, resolved from the quality tier."""

    model_config = ConfigDict(frozen=True)

    codec: str = "libx264"
    crf: int = Field(..., ge=0, le=51)
    preset: str
    pixel_format: str = "yuv420p"
    tune: str | None = "film"
    faststart: bool = True

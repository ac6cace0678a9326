"""lapse core: contracts, errors, base step, workspace, timing."""

from .contracts import (
    ConversionRequest,
    ImageFrame,
    JobState,
    PipelineConfig,
    QualityTier,
    TargetGeometry,
    TimelapseMetrics,
    Transition,
)
from .errors import (
    CleanupError,
    EncodingError,
    EnhancementError,
    ExtractionError,
    InsufficientInputError,
    LapseError,
    ValidationError,
    VideoNotFoundError,
)
from .logging import setup_logging
from .step_base import BaseStep
from .timing import compute_timing

__all__ = [
    "BaseStep",
    "CleanupError",
    "ConversionRequest",
    "EncodingError",
    "EnhancementError",
    "ExtractionError",
    "ImageFrame",
    "InsufficientInputError",
    "JobState",
    "LapseError",
    "PipelineConfig",
    "QualityTier",
    "TargetGeometry",
    "TimelapseMetrics",
    "Transition",
    "ValidationError",
    "VideoNotFoundError",
    "compute_timing",
    "setup_logging",
]

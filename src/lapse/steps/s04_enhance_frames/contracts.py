"""I/O contracts for Step 04: Frame enhancement."""

from pathlib import Path

from pydantic import BaseModel, Field

from lapse.core.contracts import ImageFrame, TargetGeometry


class EnhanceFramesInput(BaseModel):
    frames: list[ImageFrame] = Field(default_factory=list, description="Sources in sequence order")
    geometry: TargetGeometry = Field(..., description="Size every output frame is normalized to")
    quality_tier: str = Field("medium", description="low|medium|high (unknown = medium)")


class EnhanceFramesOutput(BaseModel):
    frames_dir: Path = Field(..., description="Directory holding the uniform frames")
    frame_pattern: Path = Field(..., description="printf-style pattern matching the frame files")
    frame_count: int = Field(..., description="Number of frames written")
    frame_files: list[str] = Field(default_factory=list, description="Frame filenames in sequence order")

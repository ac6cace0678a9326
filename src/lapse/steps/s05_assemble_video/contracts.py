"""I/O contracts for Step 05: Video assembly."""

from pathlib import Path

from pydantic import BaseModel, Field

from lapse.core.contracts import EncoderSettings, Transition


class AssembleVideoInput(BaseModel):
    frame_pattern: Path = Field(..., description="printf-style pattern of the enhanced frames")
    frame_count: int = Field(..., ge=1, description="Number of frames behind the pattern")
    output_path: Path = Field(..., description="Where the finished video is written")
    frame_rate: int = Field(25, ge=1, le=120, description="Input and output frames per second")
    quality_tier: str = Field("medium", description="low|medium|high (unknown = medium)")
    stabilize: bool = Field(False, description="Apply the deshake filter")
    transition: Transition = Field(Transition.NONE, description="none|fade")


class AssembleVideoOutput(BaseModel):
    output_path: Path = Field(..., description="Finished video file")
    file_size_bytes: int = Field(..., description="Size of the finished video")
    settings: EncoderSettings = Field(..., description="Encoder settings that were applied")
    filters: list[str] = Field(default_factory=list, description="Video filter chain that was applied")

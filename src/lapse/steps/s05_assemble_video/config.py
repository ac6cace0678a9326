"""Configuration for Step 05: Video assembly."""

from pydantic import BaseModel, Field


class AssembleVideoConfig(BaseModel):
    codec: str = Field("libx264", description="ffmpeg video codec")
    pixel_format: str = Field("yuv420p", description="Output pixel format (broad playback compatibility)")
    tune: str = Field("film", description="x264 content tuning for photographic sources")
    deshake_filter: str = Field(
        "deshake=x=-1:y=-1:w=-1:h=-1:rx=16:ry=16", description="Stabilization filter applied when requested"
    )
    fade_max_frames: int = Field(30, ge=0, description="Upper bound on fade-in/fade-out length")
    fade_ratio: float = Field(0.05, ge=0.0, le=0.5, description="Fade length as a share of the frame count")

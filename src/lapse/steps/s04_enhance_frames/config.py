"""Configuration for Step 04: Frame enhancement."""

from pydantic import BaseModel, Field


class EnhanceFramesConfig(BaseModel):
    pad_digits: int = Field(6, ge=1, le=9, description="Zero-padding width of output frame indices")
    frame_prefix: str = Field("frame_", description="Output frame filename prefix")
    max_workers: int | None = Field(None, ge=1, description="Enhancement threads (None = pipeline max_workers)")

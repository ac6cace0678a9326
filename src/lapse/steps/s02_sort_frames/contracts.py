"""I/O contracts for Step 02: Natural sequence sorting."""

from pathlib import Path

from pydantic import BaseModel, Field


class SortFramesInput(BaseModel):
    image_paths: list[Path] = Field(default_factory=list, description="Image files in arbitrary order")


class SortFramesOutput(BaseModel):
    ordered_paths: list[Path] = Field(default_factory=list, description="Image files in shooting order")
    numbered_count: int = Field(0, description="How many file names carried a frame number")

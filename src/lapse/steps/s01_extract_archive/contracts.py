"""I/O contracts for Step 01: Archive extraction."""

from pathlib import Path

from pydantic import BaseModel, Field


class ExtractArchiveInput(BaseModel):
    archive_path: Path = Field(..., description="Path to the uploaded archive (.zip)")


class ExtractArchiveOutput(BaseModel):
    extract_dir: Path = Field(..., description="Workspace directory the archive was unpacked into")
    image_paths: list[Path] = Field(default_factory=list, description="Extracted image files, unordered")
    skipped_count: int = Field(0, description="Members ignored as non-images or hidden files")

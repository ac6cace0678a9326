"""Configuration for Step 01: Archive extraction."""

from pydantic import BaseModel, Field


class ExtractArchiveConfig(BaseModel):
    image_extensions: set[str] = Field(
        default={".jpg", ".jpeg", ".png", ".bmp", ".tiff", ".tif", ".webp"},
        description="Member file extensions treated as source images (case-insensitive)",
    )
    skip_hidden: bool = Field(True, description="Ignore dotfiles and __MACOSX resource forks")

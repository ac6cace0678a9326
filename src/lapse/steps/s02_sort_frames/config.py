"""Configuration for Step 02: Natural sequence sorting."""

from pydantic import BaseModel, Field


class SortFramesConfig(BaseModel):
    numeric_keys: bool = Field(True, description="Order by the first digit run when both names have one")

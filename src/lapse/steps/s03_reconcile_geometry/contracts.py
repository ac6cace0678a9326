"""I/O contracts for Step 03: Geometry reconciliation."""

from pathlib import Path

from pydantic import BaseModel, Field

from lapse.core.contracts import ImageFrame, TargetGeometry


class ReconcileGeometryInput(BaseModel):
    image_paths: list[Path] = Field(default_factory=list, description="Image files in shooting order")


class ReconcileGeometryOutput(BaseModel):
    geometry: TargetGeometry = Field(..., description="Common even-sided output size")
    frames: list[ImageFrame] = Field(default_factory=list, description="Sources with 1-based sequence indices")

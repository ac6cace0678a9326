"""Configuration for Step 03: Geometry reconciliation."""

from pydantic import BaseModel, Field


class ReconcileGeometryConfig(BaseModel):
    min_images: int = Field(2, ge=2, description="Minimum number of usable source images")
    max_workers: int | None = Field(None, ge=1, description="Metadata reader threads (None = pipeline max_workers)")

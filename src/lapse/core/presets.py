"""Named capture presets for common timelapse subjects."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from .contracts import QualityTier


class Preset(BaseModel):
    model_config = ConfigDict(frozen=True)

    key: str
    name: str
    capture_interval_seconds: float = Field(..., gt=0)
    frame_rate: int = Field(..., ge=1, le=120)
    quality_tier: QualityTier = QualityTier.MEDIUM
    stabilize: bool = False


PRESETS: dict[str, Preset] = {
    p.key: p
    for p in (
        Preset(key="construction", name="Construction Site", capture_interval_seconds=300,
               frame_rate=24, quality_tier=QualityTier.HIGH, stabilize=True),
        Preset(key="sunset", name="Sunset/Sunrise", capture_interval_seconds=30,
               frame_rate=30, quality_tier=QualityTier.HIGH),
        Preset(key="clouds", name="Cloud Movement", capture_interval_seconds=10,
               frame_rate=30),
        Preset(key="flowers", name="Plant Growth", capture_interval_seconds=1800,
               frame_rate=25),
        Preset(key="traffic", name="City Traffic", capture_interval_seconds=5,
               frame_rate=60, stabilize=True),
    )
}


def get_preset(key: str) -> Preset:
    """Look up a preset by key (case-insensitive). Raises KeyError."""
    try:
        return PRESETS[key.strip().lower()]
    except KeyError:
        raise KeyError(f"Unknown preset '{key}'. Available: {', '.join(sorted(PRESETS))}") from None

"""Declarative encoder settings table and filter chain construction."""

from __future__ import annotations

import math

from lapse.core.contracts import EncoderSettings, QualityTier, Transition
from .config import AssembleVideoConfig

# tier -> (constant rate factor, x264 preset)
QUALITY_SETTINGS: dict[QualityTier, tuple[int, str]] = {
    QualityTier.HIGH: (18, "slow"),
    QualityTier.MEDIUM: (23, "medium"),
    QualityTier.LOW: (28, "fast"),
}


def encoder_settings(quality_tier: QualityTier | str, config: AssembleVideoConfig | None = None) -> EncoderSettings:
    """Resolve a tier to encoder settings; unknown tiers get medium."""
    config = config or AssembleVideoConfig()
    crf, preset = QUALITY_SETTINGS[QualityTier.resolve(quality_tier)]
    return EncoderSettings(
        codec=config.codec,
        crf=crf,
        preset=preset,
        pixel_format=config.pixel_format,
        tune=config.tune,
        faststart=True,
    )


def fade_length(frame_count: int, max_frames: int = 30, ratio: float = 0.05) -> int:
    """min(max_frames, floor(ratio * frame_count))."""
    return max(0, min(max_frames, math.floor(frame_count * ratio + 1e-9)))


def build_filters(
    frame_count: int,
    stabilize: bool,
    transition: Transition | str,
    config: AssembleVideoConfig | None = None,
) -> list[str]:
    """Filter chain entries, in order: stabilization, then fade in/out."""
    config = config or AssembleVideoConfig()
    filters: list[str] = []
    if stabilize:
        filters.append(config.deshake_filter)
    if Transition(transition) is Transition.FADE:
        length = fade_length(frame_count, config.fade_max_frames, config.fade_ratio)
        if length > 0:
            filters.append(f"fade=in:0:{length},fade=out:{frame_count - length}:{length}")
    return filters

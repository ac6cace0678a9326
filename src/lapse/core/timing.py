"""Timing calculator: real duration, video duration and speedup of a job."""

from __future__ import annotations

import math
from decimal import ROUND_HALF_UP, Decimal

from .contracts import TargetGeometry, TimelapseMetrics


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves rounded up (JavaScript Math.round)."""
    return math.floor(value + 0.5)


def round_half_up_cents(value: float) -> float:
    """Round to two decimals with halves rounded up (JavaScript toFixed(2))."""
    return float(Decimal(repr(value)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def compute_timing(
    frame_count: int,
    frame_rate: int,
    capture_interval_seconds: float,
    geometry: TargetGeometry,
) -> TimelapseMetrics:
    """Derive the job's timing metadata.

    real duration = frames x interval, video duration = frames / fps,
    speedup = real / video. The speedup is computed from unrounded values.
    """
    if frame_count < 1:
        raise ValueError(f"frame_count must be >= 1, got {frame_count}")
    if frame_rate <= 0:
        raise ValueError(f"frame_rate must be positive, got {frame_rate}")

    real_duration = frame_count * capture_interval_seconds
    video_duration = frame_count / frame_rate
    return TimelapseMetrics(
        frame_count=frame_count,
        video_duration_seconds=round_half_up_cents(video_duration),
        real_duration_seconds=round_half_up(real_duration),
        speedup_factor=round_half_up(real_duration / video_duration),
        frame_rate=frame_rate,
        geometry=geometry,
    )


def is_timelapse(capture_interval_seconds: float) -> bool:
    """Display classification only: intervals above one second read as a timelapse."""
    return capture_interval_seconds > 1


def format_duration(seconds: float) -> str:
    """Render seconds as ``1h 2m 3s`` / ``2m 3s`` / ``3s``."""
    total = int(seconds)
    hours, rest = divmod(total, 3600)
    minutes, secs = divmod(rest, 60)
    if hours > 0:
        return f"{hours}h {minutes}m {secs}s"
    if minutes > 0:
        return f"{minutes}m {secs}s"
    return f"{secs}s"

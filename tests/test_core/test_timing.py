"""Tests for the timing calculator."""

import pytest

from lapse.core.contracts import TargetGeometry
from lapse.core.timing import (
    compute_timing,
    format_duration,
    is_timelapse,
    round_half_up,
    round_half_up_cents,
)

GEOMETRY = TargetGeometry(width=640, height=480)


class TestComputeTiming:
    def test_long_interval_timelapse(self):
        metrics = compute_timing(100, 25, 300, GEOMETRY)
        assert metrics.video_duration_seconds == 4.0
        assert metrics.real_duration_seconds == 30000
        assert metrics.speedup_factor == 7500
        assert metrics.geometry == GEOMETRY

    def test_one_second_interval(self):
        metrics = compute_timing(50, 25, 1, GEOMETRY)
        assert metrics.video_duration_seconds == 2.0
        assert metrics.real_duration_seconds == 50
        assert metrics.speedup_factor == 25

    def test_duration_rounded_to_two_decimals(self):
        metrics = compute_timing(10, 3, 1, GEOMETRY)
        assert metrics.video_duration_seconds == 3.33

    @pytest.mark.parametrize("frames,fps,expected", [(1, 8, 0.13), (3, 24, 0.13), (5, 8, 0.63), (1, 40, 0.03)])
    def test_duration_ties_round_up(self, frames: int, fps: int, expected: float):
        assert compute_timing(frames, fps, 1, GEOMETRY).video_duration_seconds == expected

    def test_speedup_uses_unrounded_duration(self):
        # 10 frames at 3 fps: 3.333s video, 10s real -> speedup 3 (not 10 / 3.33)
        metrics = compute_timing(10, 3, 1, GEOMETRY)
        assert metrics.speedup_factor == 3

    def test_sub_second_interval(self):
        metrics = compute_timing(30, 30, 0.5, GEOMETRY)
        assert metrics.real_duration_seconds == 15
        assert metrics.speedup_factor == 15

    def test_invalid_inputs(self):
        with pytest.raises(ValueError):
            compute_timing(0, 25, 1, GEOMETRY)
        with pytest.raises(ValueError):
            compute_timing(10, 0, 1, GEOMETRY)


class TestHelpers:
    @pytest.mark.parametrize("value,expected", [(2.5, 3), (3.5, 4), (2.49, 2), (0.5, 1), (7.0, 7)])
    def test_round_half_up(self, value: float, expected: int):
        assert round_half_up(value) == expected

    @pytest.mark.parametrize("value,expected", [(0.125, 0.13), (0.625, 0.63), (2.675, 2.68), (3.3333, 3.33), (4.0, 4.0)])
    def test_round_half_up_cents(self, value: float, expected: float):
        assert round_half_up_cents(value) == expected

    @pytest.mark.parametrize(
        "seconds,expected",
        [(0, "0s"), (45, "45s"), (300, "5m 0s"), (3725, "1h 2m 5s"), (30000, "8h 20m 0s")],
    )
    def test_format_duration(self, seconds: int, expected: str):
        assert format_duration(seconds) == expected

    def test_is_timelapse(self):
        assert is_timelapse(300)
        assert not is_timelapse(1)
        assert not is_timelapse(0.5)

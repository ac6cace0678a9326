"""Tests for timelapse presets."""

import pytest

from lapse.core.contracts import QualityTier
from lapse.core.presets import PRESETS, get_preset


class TestPresets:
    def test_known_presets(self):
        assert set(PRESETS) == {"construction", "sunset", "clouds", "flowers", "traffic"}

    @pytest.mark.parametrize(
        "key,interval,fps,tier,stabilize",
        [
            ("construction", 300, 24, QualityTier.HIGH, True),
            ("sunset", 30, 30, QualityTier.HIGH, False),
            ("clouds", 10, 30, QualityTier.MEDIUM, False),
            ("flowers", 1800, 25, QualityTier.MEDIUM, False),
            ("traffic", 5, 60, QualityTier.MEDIUM, True),
        ],
    )
    def test_preset_values(self, key, interval, fps, tier, stabilize):
        preset = get_preset(key)
        assert preset.capture_interval_seconds == interval
        assert preset.frame_rate == fps
        assert preset.quality_tier is tier
        assert preset.stabilize is stabilize

    def test_lookup_is_case_insensitive(self):
        assert get_preset(" Sunset ").key == "sunset"

    def test_unknown_preset(self):
        with pytest.raises(KeyError, match="Available"):
            get_preset("aurora")

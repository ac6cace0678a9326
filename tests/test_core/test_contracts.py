"""Tests for core contracts, errors and configuration loading."""

from pathlib import Path

import pytest
import yaml

from lapse.core.contracts import (
    ConversionRequest,
    EncoderSettings,
    ImageFrame,
    JobState,
    PipelineConfig,
    QualityTier,
    TargetGeometry,
    TimelapseMetrics,
    Transition,
)
from lapse.core.errors import LapseError, ValidationError
from lapse.core.pipeline_runner import load_pipeline_config


@pytest.fixture
def archive(tmp_path: Path) -> Path:
    path = tmp_path / "upload.zip"
    path.write_bytes(b"PK\x05\x06" + b"\x00" * 18)
    return path


class TestConversionRequest:
    def test_defaults(self, archive: Path, tmp_path: Path):
        req = ConversionRequest(source_archive_path=archive, output_path=tmp_path / "out.mp4")
        assert req.frame_rate == 25
        assert req.capture_interval_seconds == 1.0
        assert req.tier is QualityTier.MEDIUM
        assert req.stabilize is False
        assert req.transition is Transition.NONE

    @pytest.mark.parametrize("fps", [0, 121, -5])
    def test_frame_rate_out_of_range(self, archive: Path, tmp_path: Path, fps: int):
        with pytest.raises(ValidationError, match="FPS must be between 1 and 120"):
            ConversionRequest(source_archive_path=archive, output_path=tmp_path / "o.mp4", frame_rate=fps)

    @pytest.mark.parametrize("interval", [0.05, 86400.5])
    def test_interval_out_of_range(self, archive: Path, tmp_path: Path, interval: float):
        with pytest.raises(ValidationError, match="Interval must be between 0.1 seconds and 24 hours"):
            ConversionRequest(
                source_archive_path=archive, output_path=tmp_path / "o.mp4", capture_interval_seconds=interval
            )

    def test_interval_bounds_inclusive(self, archive: Path, tmp_path: Path):
        for interval in (0.1, 86400):
            req = ConversionRequest(
                source_archive_path=archive, output_path=tmp_path / "o.mp4", capture_interval_seconds=interval
            )
            assert req.capture_interval_seconds == interval

    def test_missing_archive(self, tmp_path: Path):
        with pytest.raises(ValidationError, match="No file uploaded"):
            ConversionRequest(source_archive_path=tmp_path / "nope.zip", output_path=tmp_path / "o.mp4")

    def test_unknown_tier_is_lenient(self, archive: Path, tmp_path: Path):
        req = ConversionRequest(source_archive_path=archive, output_path=tmp_path / "o.mp4", quality_tier="ULTRA")
        assert req.quality_tier == "ultra"
        assert req.tier is QualityTier.MEDIUM

    def test_bad_transition(self, archive: Path, tmp_path: Path):
        with pytest.raises(ValidationError, match="Transition"):
            ConversionRequest(source_archive_path=archive, output_path=tmp_path / "o.mp4", transition="wipe")

    def test_validation_error_is_lapse_error(self, tmp_path: Path):
        with pytest.raises(LapseError):
            ConversionRequest(source_archive_path=tmp_path / "nope.zip", output_path=tmp_path / "o.mp4")


class TestFromOptions:
    def test_string_values(self, archive: Path, tmp_path: Path):
        req = ConversionRequest.from_options(
            archive, tmp_path / "o.mp4", fps="30", interval_seconds="300",
            quality="high", stabilize="true", transition="fade",
        )
        assert req.frame_rate == 30
        assert req.capture_interval_seconds == 300.0
        assert req.tier is QualityTier.HIGH
        assert req.stabilize is True
        assert req.transition is Transition.FADE

    def test_stabilize_only_true_string(self, archive: Path, tmp_path: Path):
        for value in ("yes", "1", "false", None):
            req = ConversionRequest.from_options(archive, tmp_path / "o.mp4", stabilize=value)
            assert req.stabilize is False

    def test_no_archive(self, tmp_path: Path):
        with pytest.raises(ValidationError, match="No file uploaded"):
            ConversionRequest.from_options(None, tmp_path / "o.mp4")

    def test_non_numeric_fps(self, archive: Path, tmp_path: Path):
        with pytest.raises(ValidationError, match="FPS must be between"):
            ConversionRequest.from_options(archive, tmp_path / "o.mp4", fps="fast")

    @pytest.mark.parametrize("fps", ["inf", "-inf", "nan", float("inf")])
    def test_non_finite_fps(self, archive: Path, tmp_path: Path, fps):
        with pytest.raises(ValidationError, match="FPS must be between 1 and 120"):
            ConversionRequest.from_options(archive, tmp_path / "o.mp4", fps=fps)

    @pytest.mark.parametrize("interval", ["inf", "nan"])
    def test_non_finite_interval(self, archive: Path, tmp_path: Path, interval: str):
        with pytest.raises(ValidationError, match="Interval must be between"):
            ConversionRequest.from_options(archive, tmp_path / "o.mp4", interval_seconds=interval)


class TestModels:
    def test_geometry_must_be_even(self):
        assert str(TargetGeometry(width=640, height=480)) == "640x480"
        with pytest.raises(ValueError):
            TargetGeometry(width=641, height=480)

    def test_frame_name(self):
        frame = ImageFrame(source_path=Path("a.jpg"), sequence_index=7, decoded_width=10, decoded_height=10)
        assert frame.frame_name() == "frame_000007.jpg"
        assert frame.frame_name(pad_digits=3, prefix="f") == "f007.jpg"

    def test_frame_index_is_one_based(self):
        with pytest.raises(ValueError):
            ImageFrame(source_path=Path("a.jpg"), sequence_index=0, decoded_width=10, decoded_height=10)

    def test_metrics_payload(self):
        metrics = TimelapseMetrics(
            frame_count=100, video_duration_seconds=4.0, real_duration_seconds=30000,
            speedup_factor=7500, frame_rate=25, geometry=TargetGeometry(width=640, height=480),
        )
        assert metrics.to_payload() == {
            "frameCount": 100,
            "duration": 4.0,
            "realDuration": 30000,
            "speedupFactor": 7500,
            "fps": 25,
            "dimensions": {"width": 640, "height": 480},
        }

    def test_terminal_states(self):
        assert JobState.SUCCEEDED.is_terminal
        assert JobState.FAILED.is_terminal
        assert not JobState.ASSEMBLING.is_terminal

    def test_encoder_settings_defaults(self):
        settings = EncoderSettings(crf=23, preset="medium")
        assert settings.codec == "libx264"
        assert settings.pixel_format == "yuv420p"
        assert settings.faststart is True


class TestPipelineConfig:
    def test_derived_directories(self, tmp_path: Path):
        cfg = PipelineConfig(data_root=tmp_path)
        assert cfg.output_dir == tmp_path / "outputs"
        cfg.ensure_directories()
        assert cfg.upload_dir.is_dir() and cfg.output_dir.is_dir() and cfg.temp_dir.is_dir()

    def test_load_missing_file_gives_defaults(self, tmp_path: Path):
        cfg = load_pipeline_config(tmp_path / "missing.yaml")
        assert cfg.project_name == "lapse"
        assert cfg.steps.enhance_frames.pad_digits == 6

    def test_load_yaml(self, tmp_path: Path):
        config = {
            "project_name": "rooftop",
            "data_root": str(tmp_path / "data"),
            "max_workers": 3,
            "steps": {"assemble_video": {"fade_max_frames": 10}, "sort_frames": {"numeric_keys": False}},
        }
        config_file = tmp_path / "pipeline.yaml"
        with open(config_file, "w") as f:
            yaml.dump(config, f)

        cfg = load_pipeline_config(config_file)
        assert cfg.project_name == "rooftop"
        assert cfg.max_workers == 3
        assert cfg.steps.assemble_video.fade_max_frames == 10
        assert cfg.steps.sort_frames.numeric_keys is False
        assert cfg.steps.extract_archive.skip_hidden is True

    def test_repo_config_loads(self):
        repo_config = Path(__file__).resolve().parents[2] / "configs" / "pipeline.yaml"
        cfg = load_pipeline_config(repo_config)
        assert cfg.steps.assemble_video.tune == "film"

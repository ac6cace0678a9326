"""Shared pytest fixtures for lapse pipeline tests."""

import zipfile
from pathlib import Path
from typing import Callable

import cv2
import numpy as np
import pytest

from lapse.core.capabilities import Capabilities
from lapse.core.contracts import PipelineConfig
from lapse.core.workspace import acquire_workspace
from lapse.utils.archive import ZipArchiveExtractor
from lapse.utils.imaging import OpenCVImageBackend


def write_image(path: Path, width: int, height: int, seed: int = 0) -> Path:
    """Write a noisy gradient image; the extension picks the format."""
    rng = np.random.default_rng(seed)
    gradient = np.linspace(40, 200, width, dtype=np.float32)[None, :, None]
    noise = rng.integers(-20, 20, (height, width, 3))
    img = np.clip(gradient + noise, 0, 255).astype(np.uint8)
    path.parent.mkdir(parents=True, exist_ok=True)
    assert cv2.imwrite(str(path), img)
    return path


@pytest.fixture
def make_image(tmp_path: Path) -> Callable[..., Path]:
    """Factory: make_image("a.jpg", 64, 48) -> path under tmp_path/src."""

    def _make(name: str, width: int = 64, height: int = 48, seed: int = 0) -> Path:
        return write_image(tmp_path / "src" / name, width, height, seed)

    return _make


@pytest.fixture
def make_archive(tmp_path: Path) -> Callable[..., Path]:
    """Factory: zip a mapping of member name -> (width, height) image or raw bytes."""

    def _make(members: dict, name: str = "photos.zip") -> Path:
        staging = tmp_path / "staging"
        archive = tmp_path / name
        with zipfile.ZipFile(archive, "w") as zf:
            for i, (member, content) in enumerate(members.items()):
                if isinstance(content, bytes):
                    zf.writestr(member, content)
                else:
                    width, height = content
                    src = write_image(staging / f"{i}{Path(member).suffix}", width, height, seed=i)
                    zf.write(src, member)
        return archive

    return _make


@pytest.fixture
def pipeline_config(tmp_path: Path) -> PipelineConfig:
    cfg = PipelineConfig(data_root=tmp_path / "data", max_workers=2)
    cfg.ensure_directories()
    return cfg


@pytest.fixture
def workspace(tmp_path: Path):
    return acquire_workspace(tmp_path / "temp")


class FakeEncoder:
    """Records the encode call and writes a placeholder video."""

    def __init__(self, fail: Exception | None = None):
        self.fail = fail
        self.calls: list[dict] = []

    def encode(self, input_pattern, frame_rate, settings, filters, output_path, progress=None):
        self.calls.append({
            "input_pattern": Path(input_pattern),
            "frame_rate": frame_rate,
            "settings": settings,
            "filters": list(filters),
            "output_path": Path(output_path),
            "frames": sorted(p.name for p in Path(input_pattern).parent.iterdir()),
        })
        if self.fail is not None:
            raise self.fail
        if progress is not None:
            progress(50.0)
            progress(100.0)
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_bytes(b"\x00\x00\x00\x18ftypmp42")
        return output_path


@pytest.fixture
def fake_encoder() -> FakeEncoder:
    return FakeEncoder()


@pytest.fixture
def capabilities(fake_encoder: FakeEncoder) -> Capabilities:
    """Real extraction and imaging, fake encoder."""
    return Capabilities(extractor=ZipArchiveExtractor(), images=OpenCVImageBackend(), encoder=fake_encoder)

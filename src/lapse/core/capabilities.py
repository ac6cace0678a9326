"""Narrow interfaces over the external archive, image and video libraries.

Each capability is one or two methods wide so the orchestration can run
against fakes in tests, independent of the library behind the default.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Protocol, Sequence

from .contracts import EncoderSettings, QualityTier, TargetGeometry

ProgressCallback = Callable[[float], None]


class ArchiveExtractor(Protocol):
    def extract(self, archive_path: Path, destination: Path) -> list[Path]:
        """Unpack archive_path into destination and return the member file paths."""
        ...


class ImageBackend(Protocol):
    def read_metadata(self, path: Path) -> tuple[int, int]:
        """Return (width, height) without decoding pixels."""
        ...

    def transform(self, path: Path, geometry: TargetGeometry, quality_tier: QualityTier | str) -> bytes:
        """Return the re-encoded, enhanced image at exactly ``geometry``."""
        ...


class VideoEncoder(Protocol):
    def encode(
        self,
        input_pattern: Path,
        frame_rate: int,
        settings: EncoderSettings,
        filters: Sequence[str],
        output_path: Path,
        progress: ProgressCallback | None = None,
    ) -> Path:
        """Encode the numbered frames matching input_pattern into output_path."""
        ...


@dataclass
class Capabilities:
    """The three capabilities a conversion job needs."""

    extractor: ArchiveExtractor
    images: ImageBackend
    encoder: VideoEncoder

    @classmethod
    def default(cls, encode_timeout_seconds: int | None = None) -> Capabilities:
        """zipfile extraction, Pillow/OpenCV imaging, ffmpeg encoding."""
        from lapse.utils.archive import ZipArchiveExtractor
        from lapse.utils.ffmpeg import FFmpegEncoder
        from lapse.utils.imaging import OpenCVImageBackend

        return cls(
            extractor=ZipArchiveExtractor(),
            images=OpenCVImageBackend(),
            encoder=FFmpegEncoder(timeout=encode_timeout_seconds),
        )

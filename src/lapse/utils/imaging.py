"""Image backend: Pillow for header-only metadata, OpenCV for pixel work.

transform() applies, in order: crop-to-fill resize, luma levels
normalization, unsharp-mask sharpening, JPEG re-encode.
"""

from __future__ import annotations

import logging
from pathlib import Path

import cv2
import numpy as np
from PIL import Image

from lapse.core.contracts import QualityTier, TargetGeometry
from lapse.core.errors import EnhancementError

logger = logging.getLogger(__name__)

JPEG_QUALITY = {
    QualityTier.HIGH: 95,
    QualityTier.MEDIUM: 85,
    QualityTier.LOW: 75,
}

# Levels are stretched between these luma percentiles
NORMALIZE_LOW_PERCENTILE = 1.0
NORMALIZE_HIGH_PERCENTILE = 99.0

SHARPEN_SIGMA = 1.0
SHARPEN_AMOUNT = 1.0


def jpeg_quality(quality_tier: QualityTier | str) -> int:
    """JPEG quality for a tier; unknown tiers get the medium value."""
    return JPEG_QUALITY[QualityTier.resolve(quality_tier)]


def read_image(path: Path) -> np.ndarray:
    """Decode to 8-bit BGR. Goes through np.fromfile so non-ASCII paths work."""
    data = np.fromfile(str(path), dtype=np.uint8)
    if data.size == 0:
        raise EnhancementError(f"Image {Path(path).name} is empty")
    image = cv2.imdecode(data, cv2.IMREAD_COLOR | cv2.IMREAD_IGNORE_ORIENTATION)
    if image is None:
        raise EnhancementError(f"Cannot decode image {Path(path).name}")
    return image


def _cover_size_and_crop(src_w: int, src_h: int, tgt_w: int, tgt_h: int) -> tuple[int, int, int, int]:
    """Compute scale-to-fill size and centered crop to reach tgt size."""
    scale = max(tgt_w / src_w, tgt_h / src_h)
    new_w = max(tgt_w, int(round(src_w * scale)))
    new_h = max(tgt_h, int(round(src_h * scale)))
    x0 = (new_w - tgt_w) // 2
    y0 = (new_h - tgt_h) // 2
    return new_w, new_h, x0, y0


def fit_cover(image: np.ndarray, width: int, height: int) -> np.ndarray:
    """Scale so both axes cover (width, height), then crop the center."""
    src_h, src_w = image.shape[:2]
    new_w, new_h, x0, y0 = _cover_size_and_crop(src_w, src_h, width, height)
    if (new_w, new_h) != (src_w, src_h):
        shrinking = new_w * new_h < src_w * src_h
        interpolation = cv2.INTER_AREA if shrinking else cv2.INTER_CUBIC
        image = cv2.resize(image, (new_w, new_h), interpolation=interpolation)
    return np.ascontiguousarray(image[y0:y0 + height, x0:x0 + width])


def normalize_levels(
    image: np.ndarray,
    low_percentile: float = NORMALIZE_LOW_PERCENTILE,
    high_percentile: float = NORMALIZE_HIGH_PERCENTILE,
) -> np.ndarray:
    """Stretch luma to the full 0..255 range; chroma is left alone."""
    ycrcb = cv2.cvtColor(image, cv2.COLOR_BGR2YCrCb)
    luma = ycrcb[:, :, 0].astype(np.float32)
    lo, hi = np.percentile(luma, (low_percentile, high_percentile))
    if hi - lo < 1.0:
        # Flat image: nothing to stretch
        return image
    stretched = (luma - lo) * (255.0 / (hi - lo))
    ycrcb[:, :, 0] = np.clip(stretched, 0, 255).astype(np.uint8)
    return cv2.cvtColor(ycrcb, cv2.COLOR_YCrCb2BGR)


def sharpen(image: np.ndarray, sigma: float = SHARPEN_SIGMA, amount: float = SHARPEN_AMOUNT) -> np.ndarray:
    """Unsharp mask: image + amount * (image - gaussian_blur(image))."""
    blurred = cv2.GaussianBlur(image, (0, 0), sigma)
    return cv2.addWeighted(image, 1.0 + amount, blurred, -amount, 0)


def encode_jpeg(image: np.ndarray, quality: int) -> bytes:
    ok, buf = cv2.imencode(".jpg", image, [cv2.IMWRITE_JPEG_QUALITY, int(quality), cv2.IMWRITE_JPEG_OPTIMIZE, 1])
    if not ok:
        raise EnhancementError("JPEG encoding failed")
    return buf.tobytes()


class OpenCVImageBackend:
    """Default image capability."""

    def read_metadata(self, path: Path) -> tuple[int, int]:
        try:
            with Image.open(path) as im:
                width, height = im.size
        except OSError as exc:
            raise EnhancementError(f"Cannot read image metadata of {Path(path).name}: {exc}") from exc
        if width <= 0 or height <= 0:
            raise EnhancementError(f"Image {Path(path).name} reports empty size {width}x{height}")
        return width, height

    def transform(self, path: Path, geometry: TargetGeometry, quality_tier: QualityTier | str) -> bytes:
        image = read_image(path)
        image = fit_cover(image, geometry.width, geometry.height)
        image = normalize_levels(image)
        image = sharpen(image)
        return encode_jpeg(image, jpeg_quality(quality_tier))


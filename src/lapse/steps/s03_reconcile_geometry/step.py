"""Step 03: Find the common output size of all source images.

Width and height minima are tracked independently (two images can each
contribute one side), then rounded down to even numbers. Only image
headers are read.
"""

from __future__ import annotations

import concurrent.futures as futures
import logging
from pathlib import Path
from typing import ClassVar

from lapse.core.contracts import ImageFrame, TargetGeometry
from lapse.core.errors import EnhancementError, InsufficientInputError, LapseError
from lapse.core.step_base import BaseStep
from .config import ReconcileGeometryConfig
from .contracts import ReconcileGeometryInput, ReconcileGeometryOutput

logger = logging.getLogger(__name__)


def even_floor(value: int) -> int:
    return value - (value % 2)


class ReconcileGeometryStep(BaseStep[ReconcileGeometryInput, ReconcileGeometryOutput, ReconcileGeometryConfig]):
    name: ClassVar[str] = "reconcile_geometry"
    input_type: ClassVar = ReconcileGeometryInput
    output_type: ClassVar = ReconcileGeometryOutput
    config_type: ClassVar = ReconcileGeometryConfig
    input_error: ClassVar = InsufficientInputError

    def validate_inputs(self, inputs: ReconcileGeometryInput) -> bool:
        found = len(inputs.image_paths)
        if found < self.config.min_images:
            raise InsufficientInputError(f"At least {self.config.min_images} images required, found {found}")
        return True

    def _read_size(self, path: Path) -> tuple[int, int]:
        try:
            return self.capabilities.images.read_metadata(path)
        except LapseError:
            raise
        except Exception as exc:
            raise EnhancementError(f"Cannot read image metadata of {path.name}: {exc}") from exc

    def run(self, inputs: ReconcileGeometryInput) -> ReconcileGeometryOutput:
        paths = inputs.image_paths
        workers = min(self.config.max_workers or self.max_workers, len(paths))
        with futures.ThreadPoolExecutor(max_workers=workers) as pool:
            sizes = list(pool.map(self._read_size, paths))

        width = min(w for w, _ in sizes)
        height = min(h for _, h in sizes)
        target_w, target_h = even_floor(width), even_floor(height)
        if target_w < 2 or target_h < 2:
            raise InsufficientInputError(f"Source images too small for video output ({width}x{height})")

        geometry = TargetGeometry(width=target_w, height=target_h)
        frames = [
            ImageFrame(source_path=p, sequence_index=i, decoded_width=w, decoded_height=h)
            for i, (p, (w, h)) in enumerate(zip(paths, sizes), start=1)
        ]
        logger.info(f"Target dimensions: {geometry} (minimum {width}x{height} over {len(frames)} images)")
        return ReconcileGeometryOutput(geometry=geometry, frames=frames)

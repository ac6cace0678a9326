"""Step 04: Normalize every source to the target geometry and enhance it.

Frames are independent, so they are processed on a bounded thread pool.
Output names carry the zero-padded sequence index; completion order does
not matter.
"""

from __future__ import annotations

import concurrent.futures as futures
import logging
from pathlib import Path
from typing import ClassVar

from lapse.core.contracts import ImageFrame, TargetGeometry
from lapse.core.errors import EnhancementError, LapseError
from lapse.core.step_base import BaseStep
from .config import EnhanceFramesConfig
from .contracts import EnhanceFramesInput, EnhanceFramesOutput

logger = logging.getLogger(__name__)

FRAME_EXTENSION = "jpg"


class EnhanceFramesStep(BaseStep[EnhanceFramesInput, EnhanceFramesOutput, EnhanceFramesConfig]):
    name: ClassVar[str] = "enhance_frames"
    input_type: ClassVar = EnhanceFramesInput
    output_type: ClassVar = EnhanceFramesOutput
    config_type: ClassVar = EnhanceFramesConfig
    input_error: ClassVar = EnhancementError

    def validate_inputs(self, inputs: EnhanceFramesInput) -> bool:
        if not inputs.frames:
            logger.error("No frames to enhance")
            return False
        indices = [f.sequence_index for f in inputs.frames]
        if indices != list(range(1, len(indices) + 1)):
            logger.error("Frame sequence indices must run 1..N in order")
            return False
        return True

    def _output_path(self, frame: ImageFrame) -> Path:
        name = frame.frame_name(self.config.pad_digits, self.config.frame_prefix, FRAME_EXTENSION)
        return self.workspace.frames_dir / name

    def _enhance_one(self, frame: ImageFrame, geometry: TargetGeometry, quality_tier: str) -> Path:
        dst = self._output_path(frame)
        try:
            data = self.capabilities.images.transform(frame.source_path, geometry, quality_tier)
            dst.write_bytes(data)
        except LapseError:
            raise
        except Exception as exc:
            raise EnhancementError(f"Enhancing {frame.source_path.name} failed: {exc}") from exc
        return dst

    def run(self, inputs: EnhanceFramesInput) -> EnhanceFramesOutput:
        frames_dir = self.workspace.frames_dir
        frames_dir.mkdir(parents=True, exist_ok=True)
        total = len(inputs.frames)
        workers = min(self.config.max_workers or self.max_workers, total)

        done = 0
        with futures.ThreadPoolExecutor(max_workers=workers) as pool:
            pending = [
                pool.submit(self._enhance_one, frame, inputs.geometry, inputs.quality_tier)
                for frame in inputs.frames
            ]
            try:
                for fut in futures.as_completed(pending):
                    fut.result()
                    done += 1
                    if done % max(1, total // 10) == 0 or done == total:
                        logger.debug(f"Enhanced {done}/{total} frames")
            except BaseException:
                for fut in pending:
                    fut.cancel()
                raise

        frame_files = [self._output_path(f).name for f in inputs.frames]
        written = [name for name in frame_files if (frames_dir / name).is_file()]
        if len(written) != total:
            raise EnhancementError(f"Expected {total} frames, found {len(written)}")

        pattern = frames_dir / f"{self.config.frame_prefix}%0{self.config.pad_digits}d.{FRAME_EXTENSION}"
        logger.info(f"Processed {total} frames at {inputs.geometry} into {frames_dir.name}")
        return EnhanceFramesOutput(
            frames_dir=frames_dir,
            frame_pattern=pattern,
            frame_count=total,
            frame_files=frame_files,
        )

"""Step 02: Order extracted images into their shooting sequence."""

from __future__ import annotations

import logging
from typing import ClassVar

from lapse.core.errors import ExtractionError
from lapse.core.step_base import BaseStep
from ._ordering import natural_sort, numeric_key
from .config import SortFramesConfig
from .contracts import SortFramesInput, SortFramesOutput

logger = logging.getLogger(__name__)


class SortFramesStep(BaseStep[SortFramesInput, SortFramesOutput, SortFramesConfig]):
    name: ClassVar[str] = "sort_frames"
    input_type: ClassVar = SortFramesInput
    output_type: ClassVar = SortFramesOutput
    config_type: ClassVar = SortFramesConfig
    input_error: ClassVar = ExtractionError

    def validate_inputs(self, inputs: SortFramesInput) -> bool:
        missing = [p for p in inputs.image_paths if not p.is_file()]
        if missing:
            logger.error(f"{len(missing)} extracted images are missing, e.g. {missing[0]}")
            return False
        return True

    def run(self, inputs: SortFramesInput) -> SortFramesOutput:
        ordered = natural_sort(inputs.image_paths, numeric=self.config.numeric_keys)
        numbered = sum(1 for p in ordered if numeric_key(p.name) is not None)
        if ordered:
            logger.info(f"Sequence: {ordered[0].name} .. {ordered[-1].name} ({numbered}/{len(ordered)} numbered)")
        return SortFramesOutput(ordered_paths=ordered, numbered_count=numbered)

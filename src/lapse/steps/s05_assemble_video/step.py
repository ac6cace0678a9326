"""Step 05: Encode the enhanced frames into the finished video."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import ClassVar

from lapse.core.capabilities import Capabilities, ProgressCallback
from lapse.core.errors import EncodingError, LapseError
from lapse.core.step_base import BaseStep
from lapse.core.workspace import Workspace
from ._settings import build_filters, encoder_settings
from .config import AssembleVideoConfig
from .contracts import AssembleVideoInput, AssembleVideoOutput

logger = logging.getLogger(__name__)


class AssembleVideoStep(BaseStep[AssembleVideoInput, AssembleVideoOutput, AssembleVideoConfig]):
    name: ClassVar[str] = "assemble_video"
    input_type: ClassVar = AssembleVideoInput
    output_type: ClassVar = AssembleVideoOutput
    config_type: ClassVar = AssembleVideoConfig
    input_error: ClassVar = EncodingError

    def __init__(
        self,
        config: AssembleVideoConfig,
        workspace: Workspace,
        capabilities: Capabilities | None = None,
        max_workers: int = 1,
        progress: ProgressCallback | None = None,
    ):
        super().__init__(config, workspace, capabilities, max_workers)
        self.progress = progress

    def validate_inputs(self, inputs: AssembleVideoInput) -> bool:
        if not inputs.frame_pattern.parent.is_dir():
            logger.error(f"Frames directory not found: {inputs.frame_pattern.parent}")
            return False
        return True

    def run(self, inputs: AssembleVideoInput) -> AssembleVideoOutput:
        settings = encoder_settings(inputs.quality_tier, self.config)
        filters = build_filters(inputs.frame_count, inputs.stabilize, inputs.transition, self.config)
        logger.info(
            f"Encoding {inputs.frame_count} frames at {inputs.frame_rate} fps "
            f"(crf={settings.crf}, preset={settings.preset}, filters={filters or 'none'})"
        )

        try:
            produced = self.capabilities.encoder.encode(
                inputs.frame_pattern,
                inputs.frame_rate,
                settings,
                filters,
                inputs.output_path,
                progress=self.progress,
            )
        except LapseError:
            raise
        except Exception as exc:
            raise EncodingError(f"Video creation failed: {exc}") from exc

        produced = Path(produced)
        if not produced.is_file():
            raise EncodingError(f"Video creation failed: {produced} was not written")
        return AssembleVideoOutput(
            output_path=produced,
            file_size_bytes=produced.stat().st_size,
            settings=settings,
            filters=filters,
        )

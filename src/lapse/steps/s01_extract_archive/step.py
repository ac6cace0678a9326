"""Step 01: Unpack the archive into the workspace and keep the image members."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import ClassVar

from lapse.core.errors import ExtractionError
from lapse.core.step_base import BaseStep
from .config import ExtractArchiveConfig
from .contracts import ExtractArchiveInput, ExtractArchiveOutput

logger = logging.getLogger(__name__)

_RESOURCE_FORK_DIR = "__MACOSX"


def is_hidden(relative: Path) -> bool:
    """Dotfiles, dot-directories and macOS resource forks."""
    return any(part.startswith(".") or part == _RESOURCE_FORK_DIR for part in relative.parts)


class ExtractArchiveStep(BaseStep[ExtractArchiveInput, ExtractArchiveOutput, ExtractArchiveConfig]):
    name: ClassVar[str] = "extract_archive"
    input_type: ClassVar = ExtractArchiveInput
    output_type: ClassVar = ExtractArchiveOutput
    config_type: ClassVar = ExtractArchiveConfig
    input_error: ClassVar = ExtractionError

    def validate_inputs(self, inputs: ExtractArchiveInput) -> bool:
        if not inputs.archive_path.is_file():
            logger.error(f"Archive not found: {inputs.archive_path}")
            return False
        return True

    def run(self, inputs: ExtractArchiveInput) -> ExtractArchiveOutput:
        extract_dir = self.workspace.extract_dir
        members = self.capabilities.extractor.extract(inputs.archive_path, extract_dir)

        extensions = {e.lower() for e in self.config.image_extensions}
        root = extract_dir.resolve()
        images: list[Path] = []
        for member in members:
            member = Path(member)
            try:
                relative = member.resolve().relative_to(root)
            except ValueError:
                relative = Path(member.name)
            if self.config.skip_hidden and is_hidden(relative):
                continue
            if member.suffix.lower() in extensions:
                images.append(member)

        skipped = len(members) - len(images)
        logger.info(f"Found {len(images)} images in archive ({skipped} other members skipped)")
        return ExtractArchiveOutput(extract_dir=extract_dir, image_paths=images, skipped_count=skipped)

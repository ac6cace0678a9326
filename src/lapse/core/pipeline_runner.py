"""Pipeline orchestrator: runs one conversion job through its states.

Created -> Extracting -> Sorting -> ReconcilingGeometry -> Enhancing
-> Assembling -> Succeeded, with Failed reachable from every non-terminal
state. The workspace is acquired on entry to Created and released exactly
once when the job reaches a terminal state.
"""

from __future__ import annotations

import logging
from pathlib import Path

import yaml
from pydantic import BaseModel

from lapse.steps.s01_extract_archive.contracts import ExtractArchiveInput
from lapse.steps.s01_extract_archive.step import ExtractArchiveStep
from lapse.steps.s02_sort_frames.contracts import SortFramesInput
from lapse.steps.s02_sort_frames.step import SortFramesStep
from lapse.steps.s03_reconcile_geometry.contracts import ReconcileGeometryInput
from lapse.steps.s03_reconcile_geometry.step import ReconcileGeometryStep
from lapse.steps.s04_enhance_frames.contracts import EnhanceFramesInput
from lapse.steps.s04_enhance_frames.step import EnhanceFramesStep
from lapse.steps.s05_assemble_video.contracts import AssembleVideoInput
from lapse.steps.s05_assemble_video.step import AssembleVideoStep

from .capabilities import Capabilities, ProgressCallback
from .contracts import ConversionRequest, JobState, PipelineConfig, TimelapseMetrics
from .errors import (
    CleanupError,
    EncodingError,
    EnhancementError,
    ExtractionError,
    LapseError,
    ValidationError,
)
from .step_base import BaseStep
from .timing import compute_timing, is_timelapse
from .workspace import Workspace, acquire_workspace, release_workspace

logger = logging.getLogger(__name__)

ALLOWED_TRANSITIONS: dict[JobState, frozenset[JobState]] = {
    JobState.CREATED: frozenset({JobState.EXTRACTING, JobState.FAILED}),
    JobState.EXTRACTING: frozenset({JobState.SORTING, JobState.FAILED}),
    JobState.SORTING: frozenset({JobState.RECONCILING_GEOMETRY, JobState.FAILED}),
    JobState.RECONCILING_GEOMETRY: frozenset({JobState.ENHANCING, JobState.FAILED}),
    JobState.ENHANCING: frozenset({JobState.ASSEMBLING, JobState.FAILED}),
    JobState.ASSEMBLING: frozenset({JobState.SUCCEEDED, JobState.FAILED}),
    JobState.SUCCEEDED: frozenset(),
    JobState.FAILED: frozenset(),
}

# Unexpected exceptions inside a stage are reported as that stage's error
STAGE_ERRORS: dict[JobState, type[LapseError]] = {
    JobState.EXTRACTING: ExtractionError,
    JobState.SORTING: ExtractionError,
    JobState.RECONCILING_GEOMETRY: EnhancementError,
    JobState.ENHANCING: EnhancementError,
    JobState.ASSEMBLING: EncodingError,
}

# Ordered stage table, used by the CLI `info` command
STAGES: list[tuple[JobState, type[BaseStep]]] = [
    (JobState.EXTRACTING, ExtractArchiveStep),
    (JobState.SORTING, SortFramesStep),
    (JobState.RECONCILING_GEOMETRY, ReconcileGeometryStep),
    (JobState.ENHANCING, EnhanceFramesStep),
    (JobState.ASSEMBLING, AssembleVideoStep),
]


def load_pipeline_config(config_path: Path | None) -> PipelineConfig:
    """Load and validate pipeline.yaml. A missing file yields the defaults."""
    if config_path is None or not Path(config_path).exists():
        logger.debug(f"No pipeline config at {config_path}, using defaults")
        return PipelineConfig()
    with open(config_path, encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}
    return PipelineConfig(**raw)


class ConversionPipeline:
    """Runs conversion jobs. Not thread-safe: use one instance per concurrent job."""

    def __init__(self, config: PipelineConfig | None = None, capabilities: Capabilities | None = None):
        self.config = config or PipelineConfig()
        self.capabilities = capabilities or Capabilities.default(self.config.encode_timeout_seconds)
        self.state: JobState | None = None
        self.history: list[JobState] = []
        self.workspace: Workspace | None = None
        self.results: dict[str, BaseModel] = {}

    def _transition(self, new_state: JobState) -> None:
        if self.state is not None and new_state not in ALLOWED_TRANSITIONS[self.state]:
            raise RuntimeError(f"Illegal job transition {self.state.value} -> {new_state.value}")
        job_id = self.workspace.job_id if self.workspace else "-"
        logger.info(f"Job {job_id}: {self.state.value if self.state else 'new'} -> {new_state.value}")
        self.state = new_state
        self.history.append(new_state)

    def _stage(self, state: JobState, step: BaseStep, inputs: BaseModel) -> BaseModel:
        self._transition(state)
        try:
            output = step.execute(inputs)
        except LapseError:
            raise
        except Exception as exc:
            raise STAGE_ERRORS[state](f"{state.value} failed: {exc}") from exc
        self.results[step.name] = output
        return output

    def _release(self, workspace: Workspace) -> None:
        try:
            release_workspace(workspace)
        except CleanupError as exc:
            logger.error(f"Cleanup error: {exc}")

    def run(self, request: ConversionRequest, progress: ProgressCallback | None = None) -> TimelapseMetrics:
        """Convert one archive into a video. Cleanup runs on every exit path."""
        if not request.source_archive_path.is_file():
            raise ValidationError("No file uploaded")

        self.state = None
        self.history = []
        self.results = {}
        self.workspace = acquire_workspace(self.config.temp_dir)
        self._transition(JobState.CREATED)
        try:
            metrics = self._run_stages(request, self.workspace, progress)
            self._transition(JobState.SUCCEEDED)
            return metrics
        except BaseException:
            if not self.state.is_terminal:
                self._transition(JobState.FAILED)
            raise
        finally:
            self._release(self.workspace)

    def _run_stages(
        self,
        request: ConversionRequest,
        workspace: Workspace,
        progress: ProgressCallback | None,
    ) -> TimelapseMetrics:
        steps = self.config.steps
        caps = self.capabilities
        workers = self.config.max_workers

        extracted = self._stage(
            JobState.EXTRACTING,
            ExtractArchiveStep(steps.extract_archive, workspace, caps, workers),
            ExtractArchiveInput(archive_path=request.source_archive_path),
        )
        ordered = self._stage(
            JobState.SORTING,
            SortFramesStep(steps.sort_frames, workspace, caps, workers),
            SortFramesInput(image_paths=extracted.image_paths),
        )
        kind = "timelapse" if is_timelapse(request.capture_interval_seconds) else "video"
        logger.info(f"Processing {len(ordered.ordered_paths)} images for {kind}")

        reconciled = self._stage(
            JobState.RECONCILING_GEOMETRY,
            ReconcileGeometryStep(steps.reconcile_geometry, workspace, caps, workers),
            ReconcileGeometryInput(image_paths=ordered.ordered_paths),
        )
        enhanced = self._stage(
            JobState.ENHANCING,
            EnhanceFramesStep(steps.enhance_frames, workspace, caps, workers),
            EnhanceFramesInput(
                frames=reconciled.frames,
                geometry=reconciled.geometry,
                quality_tier=request.quality_tier,
            ),
        )

        metrics = compute_timing(
            enhanced.frame_count,
            request.frame_rate,
            request.capture_interval_seconds,
            reconciled.geometry,
        )
        logger.info(f"Timelapse: {metrics.frame_count} frames, {metrics.speedup_factor}x speedup")

        self._stage(
            JobState.ASSEMBLING,
            AssembleVideoStep(steps.assemble_video, workspace, caps, workers, progress=progress),
            AssembleVideoInput(
                frame_pattern=enhanced.frame_pattern,
                frame_count=enhanced.frame_count,
                output_path=request.output_path,
                frame_rate=request.frame_rate,
                quality_tier=request.quality_tier,
                stabilize=request.stabilize,
                transition=request.transition,
            ),
        )
        return metrics


def run_conversion(
    request: ConversionRequest,
    config: PipelineConfig | None = None,
    capabilities: Capabilities | None = None,
    progress: ProgressCallback | None = None,
) -> TimelapseMetrics:
    """Run a single job on a fresh pipeline."""
    return ConversionPipeline(config, capabilities).run(request, progress=progress)

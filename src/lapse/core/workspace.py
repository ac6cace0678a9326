"""Per-job temporary workspace: an explicit acquire/release pair."""

from __future__ import annotations

import logging
import shutil
import uuid
from pathlib import Path

from pydantic import BaseModel, ConfigDict

from .errors import CleanupError

logger = logging.getLogger(__name__)


class Workspace(BaseModel):
    """Extraction and processed-frame directories owned by one job."""

    model_config = ConfigDict(frozen=True)

    job_id: str
    root: Path
    extract_dir: Path
    frames_dir: Path

    @property
    def directories(self) -> tuple[Path, Path]:
        return self.extract_dir, self.frames_dir

    def exists(self) -> bool:
        return any(d.exists() for d in self.directories)


def acquire_workspace(temp_root: Path) -> Workspace:
    """Create a fresh, uniquely named workspace under temp_root."""
    job_id = uuid.uuid4().hex
    root = Path(temp_root)
    workspace = Workspace(
        job_id=job_id,
        root=root,
        extract_dir=root / f"extract_{job_id}",
        frames_dir=root / f"process_{job_id}",
    )
    root.mkdir(parents=True, exist_ok=True)
    created: list[Path] = []
    try:
        for d in workspace.directories:
            d.mkdir(exist_ok=False)
            created.append(d)
    except OSError:
        for d in created:
            shutil.rmtree(d, ignore_errors=True)
        raise
    logger.debug(f"Workspace {job_id} acquired under {root}")
    return workspace


def release_workspace(workspace: Workspace) -> None:
    """Delete both workspace directories and everything in them.

    Every directory is attempted even if an earlier one fails; failures are
    collected into a single CleanupError.
    """
    failures: list[str] = []
    for d in workspace.directories:
        if not d.exists():
            continue
        try:
            shutil.rmtree(d)
        except OSError as exc:
            failures.append(f"{d}: {exc}")
    if failures:
        raise CleanupError(f"Workspace {workspace.job_id} cleanup failed: " + "; ".join(failures))
    logger.debug(f"Workspace {workspace.job_id} released")

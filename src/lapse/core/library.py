"""Finished-video library: naming, listing, lookup and deletion.

Finished files are immutable once renamed into place, so listing and
deletion need no locking. In-progress encodes are hidden ``.partial`` files
and never show up here.
"""

from __future__ import annotations

import logging
import time
import uuid
from datetime import datetime
from pathlib import Path

from pydantic import BaseModel

from .errors import VideoNotFoundError

logger = logging.getLogger(__name__)

VIDEO_SUFFIX = ".mp4"


class VideoEntry(BaseModel):
    filename: str
    size_bytes: int
    created: datetime


def new_video_path(output_dir: Path) -> Path:
    """Unique output path: video_<uuid>_<epoch ms>.mp4."""
    return Path(output_dir) / f"video_{uuid.uuid4()}_{int(time.time() * 1000)}{VIDEO_SUFFIX}"


def _created_at(path: Path) -> datetime:
    stat = path.stat()
    # st_birthtime exists on macOS/BSD (and Windows on 3.12+); fall back to mtime
    return datetime.fromtimestamp(getattr(stat, "st_birthtime", stat.st_mtime))


def list_videos(output_dir: Path) -> list[VideoEntry]:
    """Finished videos, newest first."""
    output_dir = Path(output_dir)
    if not output_dir.is_dir():
        return []
    entries = []
    for path in output_dir.iterdir():
        if path.name.startswith(".") or path.suffix.lower() != VIDEO_SUFFIX or not path.is_file():
            continue
        entries.append(VideoEntry(filename=path.name, size_bytes=path.stat().st_size, created=_created_at(path)))
    entries.sort(key=lambda e: (e.created, e.filename), reverse=True)
    return entries


def resolve_video(output_dir: Path, filename: str) -> Path:
    """Path of a finished video; names that leave output_dir are rejected."""
    root = Path(output_dir).resolve()
    candidate = (root / filename).resolve()
    if candidate.parent != root or filename.startswith(".") or not candidate.is_file():
        raise VideoNotFoundError(f"Video not found: {filename}")
    return candidate


def delete_video(output_dir: Path, filename: str) -> None:
    path = resolve_video(output_dir, filename)
    try:
        path.unlink()
    except FileNotFoundError as exc:
        raise VideoNotFoundError(f"Video not found: {filename}") from exc
    logger.info(f"Deleted video {filename}")

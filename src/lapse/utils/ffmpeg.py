"""FFmpeg video encoder backend.

The encoder writes to a hidden ``.<name>.partial`` sibling and renames it into
place only after ffmpeg exits cleanly, so a failed or killed encode never
leaves a file at the requested output path.
"""

from __future__ import annotations

import logging
import re
import shutil
import subprocess
from pathlib import Path
from typing import Sequence

from lapse.core.capabilities import ProgressCallback
from lapse.core.contracts import EncoderSettings
from lapse.core.errors import EncodingError

from .subprocess_utils import run_command, stream_command

logger = logging.getLogger(__name__)

FFMPEG_BIN = "ffmpeg"


def build_encode_cmd(
    input_pattern: Path,
    frame_rate: int,
    settings: EncoderSettings,
    filters: Sequence[str],
    output_path: Path,
    ffmpeg_bin: str = FFMPEG_BIN,
) -> list[str]:
    """Create the ffmpeg command for a numbered still-frame sequence."""
    cmd = [
        ffmpeg_bin,
        "-y",
        "-hide_banner",
        "-nostdin",
        "-loglevel", "error",
        "-nostats",
        "-progress", "pipe:1",
        "-framerate", str(frame_rate),
        "-i", str(input_pattern),
        "-an",
        "-c:v", settings.codec,
        "-crf", str(settings.crf),
        "-preset", settings.preset,
        "-pix_fmt", settings.pixel_format,
    ]
    if settings.tune:
        cmd += ["-tune", settings.tune]
    if settings.faststart:
        cmd += ["-movflags", "+faststart"]
    if filters:
        cmd += ["-vf", ",".join(filters)]
    # Explicit muxer: the partial file name carries no usable extension
    cmd += ["-r", str(frame_rate), "-f", "mp4", str(output_path)]
    return cmd


def count_pattern_frames(input_pattern: Path) -> int:
    """Count files in the pattern's directory matching a printf-style ``%0Nd`` name."""
    regex = re.escape(input_pattern.name)
    regex = re.sub(r"%0(\d+)d", lambda m: rf"\d{{{m.group(1)}}}", regex)
    regex = regex.replace("%d", r"\d+")
    matcher = re.compile(rf"^{regex}$")
    if not input_pattern.parent.is_dir():
        return 0
    return sum(1 for p in input_pattern.parent.iterdir() if matcher.match(p.name))


class ProgressParser:
    """Turns ``-progress pipe:1`` key=value lines into percentages."""

    def __init__(self, total_frames: int, callback: ProgressCallback | None = None):
        self.total_frames = max(1, total_frames)
        self.callback = callback
        self.percent = 0.0

    def feed(self, line: str) -> None:
        key, sep, value = line.partition("=")
        if not sep:
            return
        key = key.strip()
        value = value.strip()
        if key == "frame" and value.isdigit():
            self._report(min(100.0, int(value) * 100.0 / self.total_frames))
        elif key == "progress" and value == "end":
            self._report(100.0)

    def _report(self, percent: float) -> None:
        if percent <= self.percent and percent < 100.0:
            return
        self.percent = percent
        logger.debug(f"Encoding: {round(percent)}%")
        if self.callback is not None:
            self.callback(percent)


def _is_progress_line(line: str) -> bool:
    key, sep, _ = line.partition("=")
    return bool(sep) and re.fullmatch(r"[a-z_0-9]+", key.strip()) is not None


class FFmpegEncoder:
    """Default video encoder capability."""

    def __init__(self, ffmpeg_bin: str | None = None, timeout: float | None = None):
        self.ffmpeg_bin = ffmpeg_bin
        self.timeout = timeout

    def _resolve_bin(self) -> str:
        found = shutil.which(self.ffmpeg_bin or FFMPEG_BIN)
        if found is None:
            raise EncodingError(f"{self.ffmpeg_bin or FFMPEG_BIN} not found on PATH")
        return found

    def encode(
        self,
        input_pattern: Path,
        frame_rate: int,
        settings: EncoderSettings,
        filters: Sequence[str],
        output_path: Path,
        progress: ProgressCallback | None = None,
    ) -> Path:
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        partial = output_path.with_name(f".{output_path.name}.partial")
        cmd = build_encode_cmd(input_pattern, frame_rate, settings, filters, partial, self._resolve_bin())
        parser = ProgressParser(count_pattern_frames(Path(input_pattern)), progress)

        succeeded = False
        try:
            try:
                result = stream_command(cmd, on_line=parser.feed, timeout=self.timeout)
            except OSError as exc:
                raise EncodingError(f"Video creation failed: {exc}") from exc

            if result.timed_out:
                raise EncodingError(f"Video creation failed: encoder timed out after {self.timeout}s")
            if not result.ok:
                messages = [line for line in result.tail if not _is_progress_line(line)]
                detail = " | ".join(messages[-5:]) or f"ffmpeg exited with code {result.returncode}"
                raise EncodingError(f"Video creation failed: {detail}")
            if not partial.exists():
                raise EncodingError("Video creation failed: encoder produced no output")

            partial.replace(output_path)
            succeeded = True
        finally:
            if not succeeded:
                partial.unlink(missing_ok=True)

        logger.info(f"Encoded {output_path.name} ({output_path.stat().st_size} bytes)")
        return output_path


def ffmpeg_version(ffmpeg_bin: str = FFMPEG_BIN) -> str | None:
    """First line of ``ffmpeg -version``, or None when ffmpeg is unavailable."""
    found = shutil.which(ffmpeg_bin)
    if found is None:
        return None
    try:
        result = run_command([found, "-version"], timeout=10, check=True)
    except (OSError, subprocess.SubprocessError):
        return None
    return result.stdout.splitlines()[0] if result.stdout else None

"""Safe subprocess runner for external tools (ffmpeg, ffprobe)."""

from __future__ import annotations

import logging
import subprocess
import threading
from collections import deque
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable

logger = logging.getLogger(__name__)


def run_command(
    cmd: list[str],
    cwd: Path | None = None,
    timeout: int = 3600,
    check: bool = True,
) -> subprocess.CompletedProcess:
    """Run an external command with logging and error handling."""
    cmd_str = " ".join(cmd)
    logger.info(f"Running: {cmd_str}")

    result = subprocess.run(
        cmd,
        cwd=cwd,
        capture_output=True,
        text=True,
        timeout=timeout,
        check=False,
    )

    if result.stdout:
        logger.debug(f"stdout: {result.stdout[-500:]}")
    if result.stderr:
        logger.debug(f"stderr: {result.stderr[-500:]}")

    if check and result.returncode != 0:
        raise subprocess.CalledProcessError(
            result.returncode, cmd_str, result.stdout, result.stderr
        )
    return result


@dataclass
class StreamResult:
    """Outcome of a streamed command."""

    returncode: int
    timed_out: bool = False
    tail: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.returncode == 0 and not self.timed_out


def stream_command(
    cmd: list[str],
    on_line: Callable[[str], None] | None = None,
    timeout: float | None = None,
    tail_lines: int = 20,
) -> StreamResult:
    """Run a command, feeding each output line (stdout+stderr) to ``on_line``.

    The process is killed when ``timeout`` elapses. The last ``tail_lines``
    lines are kept for error reporting.
    """
    cmd_str = " ".join(cmd)
    logger.info(f"Running: {cmd_str}")

    proc = subprocess.Popen(
        cmd,
        stdout=subprocess.PIPE,
        stderr=subprocess.STDOUT,
        stdin=subprocess.DEVNULL,
        text=True,
        errors="replace",
    )
    timed_out = threading.Event()

    def _kill() -> None:
        timed_out.set()
        logger.warning(f"Timeout after {timeout}s, killing: {cmd[0]}")
        proc.kill()

    timer = threading.Timer(timeout, _kill) if timeout else None
    if timer is not None:
        timer.daemon = True
        timer.start()

    tail: deque[str] = deque(maxlen=tail_lines)
    try:
        assert proc.stdout is not None
        for raw in proc.stdout:
            line = raw.rstrip()
            if not line:
                continue
            tail.append(line)
            if on_line is not None:
                on_line(line)
        returncode = proc.wait()
    except BaseException:
        proc.kill()
        proc.wait()
        raise
    finally:
        if timer is not None:
            timer.cancel()

    if returncode != 0:
        logger.debug(f"output tail: {list(tail)[-5:]}")
    return StreamResult(returncode=returncode, timed_out=timed_out.is_set(), tail=list(tail))

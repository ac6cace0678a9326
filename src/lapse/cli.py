"""CLI entry point for lapse.

Usage:
    lapse convert photos.zip --interval 300 --fps 24   # Build a timelapse
    lapse convert photos.zip --preset sunset           # Use preset defaults
    lapse presets                                      # List presets
    lapse videos                                       # List finished videos
    lapse delete video_<id>.mp4                        # Delete a video
    lapse info                                         # Show pipeline info
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

import typer
from rich.console import Console
from rich.progress import BarColumn, Progress, SpinnerColumn, TextColumn, TimeElapsedColumn
from rich.table import Table

from lapse.core.errors import LapseError
from lapse.core.logging import setup_logging

app = typer.Typer(name="lapse", help="Image archive to timelapse video converter")
console = Console()
logger = logging.getLogger(__name__)

DEFAULT_CONFIG = Path("configs/pipeline.yaml")


def _format_size(size_bytes: int) -> str:
    if size_bytes < 1024:
        return f"{size_bytes} B"
    size = size_bytes / 1024
    for unit in ("KB", "MB"):
        if size < 1024:
            return f"{size:.1f} {unit}"
        size /= 1024
    return f"{size:.1f} GB"


@app.command()
def convert(
    archive: Path = typer.Argument(..., help="Zip archive of still images"),
    output: Path = typer.Option(None, "--output", "-o", help="Output .mp4 path (default: library)"),
    fps: str = typer.Option(None, "--fps", help="Output frame rate, 1-120 (default 25)"),
    interval: str = typer.Option(None, "--interval", help="Seconds between captures (default 1)"),
    quality: str = typer.Option(None, "--quality", "-q", help="low | medium | high (default medium)"),
    stabilize: bool = typer.Option(None, "--stabilize/--no-stabilize", help="Apply deshake filter"),
    transition: str = typer.Option("none", "--transition", help="none | fade"),
    preset: str = typer.Option(None, "--preset", "-p", help="Preset key supplying defaults"),
    config: Path = typer.Option(DEFAULT_CONFIG, help="Pipeline config path"),
    as_json: bool = typer.Option(False, "--json", help="Print the result payload as JSON"),
    consume: bool = typer.Option(False, "--consume", help="Delete the archive after the job"),
) -> None:
    """Convert an image archive into an H.264 video."""
    from lapse.core.contracts import ConversionRequest
    from lapse.core.library import new_video_path
    from lapse.core.pipeline_runner import load_pipeline_config, run_conversion
    from lapse.core.presets import get_preset
    from lapse.core.timing import format_duration, is_timelapse

    pipeline_cfg = load_pipeline_config(config)
    # Keep stdout clean for --json
    setup_logging("WARNING" if as_json else pipeline_cfg.log_level)

    if preset is not None:
        try:
            chosen = get_preset(preset)
        except KeyError as exc:
            console.print(f"[red]{exc.args[0]}[/red]")
            raise typer.Exit(1)
        fps = fps if fps is not None else chosen.frame_rate
        interval = interval if interval is not None else chosen.capture_interval_seconds
        quality = quality if quality is not None else chosen.quality_tier.value
        stabilize = stabilize if stabilize is not None else chosen.stabilize

    try:
        pipeline_cfg.ensure_directories()
        request = ConversionRequest.from_options(
            archive if archive.is_file() else None,
            output or new_video_path(pipeline_cfg.output_dir),
            fps=fps if fps is not None else 25,
            interval_seconds=interval if interval is not None else 1,
            quality=quality or "medium",
            stabilize=bool(stabilize),
            transition=transition,
        )
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            TextColumn("{task.percentage:>3.0f}%"),
            TimeElapsedColumn(),
            console=console,
            transient=as_json,
        ) as progress:
            task = progress.add_task(f"Encoding {request.output_path.name}", total=100)
            metrics = run_conversion(
                request,
                config=pipeline_cfg,
                progress=lambda pct: progress.update(task, completed=pct),
            )
    except LapseError as exc:
        console.print(f"[red]{type(exc).__name__}: {exc}[/red]")
        raise typer.Exit(1)
    finally:
        if consume and archive.is_file():
            archive.unlink()
            logger.info(f"Removed uploaded archive {archive}")

    payload = {"videoPath": str(request.output_path), **metrics.to_payload()}
    if as_json:
        console.print_json(json.dumps(payload))
        return

    table = Table(title="Video created")
    table.add_column("Field", style="cyan")
    table.add_column("Value", style="green")
    table.add_row("Output", str(request.output_path))
    table.add_row("Frames", str(metrics.frame_count))
    table.add_row("Frame rate", f"{metrics.frame_rate} fps")
    table.add_row("Dimensions", str(metrics.geometry))
    table.add_row("Video length", f"{metrics.video_duration_seconds:.2f}s")
    if is_timelapse(request.capture_interval_seconds):
        table.add_row("Real time", format_duration(metrics.real_duration_seconds))
        table.add_row("Speedup", f"{metrics.speedup_factor}x")
    console.print(table)


@app.command()
def presets() -> None:
    """Show the timelapse presets."""
    from lapse.core.presets import PRESETS
    from lapse.core.timing import format_duration

    table = Table(title="Timelapse presets")
    table.add_column("Key", style="cyan")
    table.add_column("Name", style="green")
    table.add_column("Interval", style="yellow")
    table.add_column("FPS")
    table.add_column("Quality")
    table.add_column("Stabilize", style="dim")
    for p in PRESETS.values():
        table.add_row(
            p.key,
            p.name,
            format_duration(p.capture_interval_seconds),
            str(p.frame_rate),
            p.quality_tier.value,
            "Y" if p.stabilize else "N",
        )
    console.print(table)


@app.command()
def videos(config: Path = typer.Option(DEFAULT_CONFIG, help="Pipeline config path")) -> None:
    """List finished videos, newest first."""
    from lapse.core.library import list_videos
    from lapse.core.pipeline_runner import load_pipeline_config

    pipeline_cfg = load_pipeline_config(config)
    entries = list_videos(pipeline_cfg.output_dir)
    if not entries:
        console.print(f"[yellow]No videos in {pipeline_cfg.output_dir}[/yellow]")
        return

    table = Table(title=f"Videos in {pipeline_cfg.output_dir}")
    table.add_column("Filename", style="cyan", no_wrap=True)
    table.add_column("Size", style="green")
    table.add_column("Created", style="dim")
    for entry in entries:
        table.add_row(entry.filename, _format_size(entry.size_bytes), entry.created.isoformat(timespec="seconds"))
    console.print(table)


@app.command()
def delete(
    filename: str = typer.Argument(..., help="Video file name as shown by `lapse videos`"),
    config: Path = typer.Option(DEFAULT_CONFIG, help="Pipeline config path"),
) -> None:
    """Delete a finished video."""
    from lapse.core.errors import VideoNotFoundError
    from lapse.core.library import delete_video
    from lapse.core.pipeline_runner import load_pipeline_config

    pipeline_cfg = load_pipeline_config(config)
    try:
        delete_video(pipeline_cfg.output_dir, filename)
    except VideoNotFoundError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(1)
    console.print(f"[green]Deleted[/green] {filename}")


@app.command()
def info(config: Path = typer.Option(DEFAULT_CONFIG, help="Pipeline config path")) -> None:
    """Show pipeline stages and their configuration."""
    from lapse.core.pipeline_runner import STAGES, load_pipeline_config
    from lapse.utils.ffmpeg import ffmpeg_version

    pipeline_cfg = load_pipeline_config(config)
    table = Table(title=f"Pipeline: {pipeline_cfg.project_name}")
    table.add_column("#", style="dim")
    table.add_column("State", style="cyan", no_wrap=True)
    table.add_column("Step", style="green", no_wrap=True)
    table.add_column("Config", style="yellow")

    for i, (state, step_cls) in enumerate(STAGES, 1):
        step_config = getattr(pipeline_cfg.steps, step_cls.name)
        table.add_row(str(i), state.value, step_cls.name, step_config.model_dump_json())
    console.print(table)
    console.print(f"Data root: {pipeline_cfg.data_root}  workers: {pipeline_cfg.max_workers}")
    console.print(f"ffmpeg: {ffmpeg_version() or '[red]not found[/red]'}")


if __name__ == "__main__":
    app()

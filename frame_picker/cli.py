from __future__ import annotations

import json
import logging
from pathlib import Path
from time import perf_counter
from typing import Callable, TypeVar

import typer
import yaml

from frame_picker.config import Settings, load_settings
from frame_picker.ingest.media_tool import FfmpegMediaTool
from frame_picker.logging_config import configure_logging
from frame_picker.pipeline_frame_selector import select_best_frames
from frame_picker.propose.candidate_planner import plan_candidates
from frame_picker.propose.exporter import export_picks, export_thumbnail
from frame_picker.scoring.frame_score import score_frame_details

app = typer.Typer(help="Pick the best thumbnail frames from a video.")
config_app = typer.Typer(help="Configuration commands.")
ingest_app = typer.Typer(help="Ingest commands.")
candidates_app = typer.Typer(help="Candidate planning commands.")

app.add_typer(config_app, name="config")
app.add_typer(ingest_app, name="ingest")
app.add_typer(candidates_app, name="candidates")

logger = logging.getLogger(__name__)

T = TypeVar("T")

CONFIG_OPTION = typer.Option(
    None,
    "--config",
    "-c",
    envvar="FRAME_PICKER_CONFIG",
    help="Path to YAML configuration file.",
)


def _run_with_progress(step_index: int, total_steps: int, label: str, work: Callable[[], T]) -> T:
    typer.echo(f"[{step_index}/{total_steps}] {label}...", err=True)
    started_at = perf_counter()
    try:
        result = work()
    except Exception:
        elapsed = perf_counter() - started_at
        typer.echo(f"[{step_index}/{total_steps}] {label} failed after {elapsed:.1f}s", err=True)
        raise
    elapsed = perf_counter() - started_at
    typer.echo(f"[{step_index}/{total_steps}] {label} done in {elapsed:.1f}s", err=True)
    return result


def _bootstrap(config_path: Path | None) -> Settings:
    try:
        settings = load_settings(config_path)
    except (OSError, ValueError, yaml.YAMLError) as exc:
        raise _fail(exc) from exc
    configure_logging(settings.logging)
    logger.debug("Loaded runtime settings from %s", config_path)
    return settings


def _media_tool(settings: Settings) -> FfmpegMediaTool:
    return FfmpegMediaTool.from_settings(settings.media)


def _fail(exc: Exception) -> typer.Exit:
    logger.error("Command failed: %s", exc)
    typer.echo(f"Error: {exc}", err=True)
    return typer.Exit(code=1)


@config_app.command("show")
def show_config(config_path: Path | None = CONFIG_OPTION) -> None:
    """Print resolved runtime configuration."""

    settings = _bootstrap(config_path)
    typer.echo(json.dumps(settings.model_dump(mode="json"), indent=2))


@ingest_app.command("probe")
def probe(video_path: str, config_path: Path | None = CONFIG_OPTION) -> None:
    """Print the probed duration of a video."""

    settings = _bootstrap(config_path)
    try:
        duration = _media_tool(settings).probe_duration(video_path)
    except (RuntimeError, FileNotFoundError) as exc:
        raise _fail(exc) from exc

    logger.info("Probe completed for %s", video_path)
    typer.echo(json.dumps({"video_path": video_path, "duration_seconds": duration}, indent=2))


@candidates_app.command("plan")
def plan(
    video_path: str | None = typer.Argument(None, help="Video to probe for its duration."),
    duration: float | None = typer.Option(None, help="Use this duration instead of probing a video."),
    max_candidates: int | None = typer.Option(None, help="Upper bound on sampled timestamps."),
    config_path: Path | None = CONFIG_OPTION,
) -> None:
    """Print the candidate timestamps that would be scored for a video."""

    settings = _bootstrap(config_path)
    planner = settings.planner
    try:
        if duration is None:
            if video_path is None:
                raise ValueError("Pass a video path or --duration.")
            duration = _media_tool(settings).probe_duration(video_path)

        timestamps = plan_candidates(
            duration,
            max_candidates if max_candidates is not None else planner.max_candidates,
            min_candidates=planner.min_candidates,
            seconds_per_candidate=planner.seconds_per_candidate,
            edge_margin_ratio=planner.edge_margin_ratio,
            tail_guard_seconds=planner.tail_guard_seconds,
        )
    except (RuntimeError, ValueError, FileNotFoundError) as exc:
        raise _fail(exc) from exc

    typer.echo(
        json.dumps(
            {
                "duration": duration,
                "count": len(timestamps),
                "timestamps": [round(timestamp, 4) for timestamp in timestamps],
            },
            indent=2,
        )
    )


@app.command("score")
def score(image_path: Path, config_path: Path | None = CONFIG_OPTION) -> None:
    """Score a single still image and print the signal breakdown."""

    settings = _bootstrap(config_path)
    if not image_path.exists():
        raise _fail(FileNotFoundError(f"Image file not found: {image_path}"))

    details = score_frame_details(
        image_path,
        _media_tool(settings),
        weights=settings.weights.model_dump(mode="python"),
    )
    typer.echo(json.dumps({"image_path": str(image_path), **details.to_dict()}, indent=2))


@app.command("select")
def select(video_path: str, config_path: Path | None = CONFIG_OPTION) -> None:
    """Print the best frames of a video as JSON without exporting images."""

    settings = _bootstrap(config_path)
    try:
        selection = select_best_frames(video_path, settings=settings, media_tool=_media_tool(settings))
    except (RuntimeError, ValueError, FileNotFoundError) as exc:
        raise _fail(exc) from exc

    typer.echo(json.dumps(selection.to_dict(), indent=2))


@app.command("run")
def run_pipeline(
    video_path: str,
    output_dir: Path | None = typer.Option(
        None,
        "--output-dir",
        "-o",
        help="Directory for exported frames. Defaults to <pipeline.output_dir>/<video name>.",
    ),
    config_path: Path | None = CONFIG_OPTION,
) -> None:
    """Select the best frames of a video and export them as JPEGs with manifests."""

    settings = _bootstrap(config_path)
    resolved_video_path = Path(video_path).expanduser().resolve()
    media_tool = _media_tool(settings)
    total_steps = 2

    try:
        if not resolved_video_path.exists():
            raise FileNotFoundError(f"Video file not found: {resolved_video_path}")

        resolved_output_dir = output_dir or Path(settings.pipeline.output_dir) / resolved_video_path.stem

        selection = _run_with_progress(
            1,
            total_steps,
            "Select best frames",
            lambda: select_best_frames(resolved_video_path, settings=settings, media_tool=media_tool),
        )
        exported = _run_with_progress(
            2,
            total_steps,
            "Export frames",
            lambda: export_picks(
                resolved_video_path,
                selection,
                resolved_output_dir,
                media_tool,
                basename=f"{resolved_video_path.stem}_picks",
            ),
        )
    except (RuntimeError, ValueError, FileNotFoundError) as exc:
        raise _fail(exc) from exc

    typer.echo(
        json.dumps(
            {
                "status": "ok",
                "video_path": str(resolved_video_path),
                "duration": selection.duration,
                "candidate_count": selection.candidate_count,
                "scored_count": selection.scored_count,
                "picks": [pick.to_dict() for pick in selection.picks],
                "outputs": {
                    "frames": [str(path) for path in exported["frames"]],
                    "json": str(exported["json"]),
                    "csv": str(exported["csv"]),
                },
            },
            indent=2,
        )
    )


@app.command("thumbnail")
def thumbnail(
    video_path: str,
    ts: str = typer.Option("mid", "--ts", help="Timestamp in seconds, or 'mid' for the middle of the video."),
    thumbs_dir: Path | None = typer.Option(None, help="Output directory. Defaults to pipeline.thumbs_dir."),
    config_path: Path | None = CONFIG_OPTION,
) -> None:
    """Write one full-resolution thumbnail at a chosen timestamp."""

    settings = _bootstrap(config_path)
    try:
        output_path = export_thumbnail(
            video_path,
            ts,
            thumbs_dir or settings.pipeline.thumbs_dir,
            _media_tool(settings),
        )
    except (RuntimeError, ValueError, FileNotFoundError) as exc:
        raise _fail(exc) from exc

    typer.echo(json.dumps({"video_path": video_path, "thumbnail_path": str(output_path)}, indent=2))


if __name__ == "__main__":
    app()

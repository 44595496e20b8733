from __future__ import annotations

import math
from pathlib import Path

from frame_picker.ingest.media_command import MediaToolError, run_media_command


def probe_duration(
    video_path: str | Path,
    *,
    ffprobe_bin: str = "ffprobe",
    timeout_seconds: float | None = None,
) -> float:
    """Return the container duration of a video in seconds via ffprobe."""

    source_path = Path(video_path).expanduser().resolve()
    if not source_path.exists():
        raise FileNotFoundError(f"Video file not found: {source_path}")

    stdout = _run_ffprobe(source_path, ffprobe_bin=ffprobe_bin, timeout_seconds=timeout_seconds)
    return _parse_duration(stdout, source_path)


def _run_ffprobe(video_path: Path, *, ffprobe_bin: str, timeout_seconds: float | None) -> str:
    command = [
        ffprobe_bin,
        "-v",
        "error",
        "-show_entries",
        "format=duration",
        "-of",
        "default=noprint_wrappers=1:nokey=1",
        str(video_path),
    ]
    return run_media_command(command, timeout_seconds=timeout_seconds).stdout


def _parse_duration(stdout: str, video_path: Path) -> float:
    raw_value = stdout.strip()
    try:
        duration = float(raw_value)
    except ValueError as exc:
        raise MediaToolError(
            f"ffprobe reported an unreadable duration {raw_value!r} for {video_path}."
        ) from exc

    if not math.isfinite(duration) or duration <= 0:
        raise MediaToolError(f"ffprobe reported an unusable duration {raw_value!r} for {video_path}.")
    return duration

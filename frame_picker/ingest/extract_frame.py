from __future__ import annotations

from pathlib import Path

from frame_picker.ingest.media_command import MediaToolError, run_media_command

JPEG_QUALITY = 2


def extract_frame(
    video_path: str | Path,
    timestamp_seconds: float,
    output_path: str | Path,
    width: int | None = None,
    *,
    ffmpeg_bin: str = "ffmpeg",
    timeout_seconds: float | None = None,
) -> Path:
    """Write the frame nearest to ``timestamp_seconds`` as a single JPEG.

    ``width`` downscales proportionally (height follows the aspect ratio);
    ``None`` or a non-positive width keeps the source resolution.
    """

    target_path = Path(output_path)
    target_path.parent.mkdir(parents=True, exist_ok=True)

    command = [
        ffmpeg_bin,
        "-v",
        "error",
        "-y",
        "-ss",
        f"{max(0.0, timestamp_seconds):.3f}",
        "-i",
        str(video_path),
        *_scale_filter(width),
        "-frames:v",
        "1",
        "-q:v",
        str(JPEG_QUALITY),
        str(target_path),
    ]
    run_media_command(command, timeout_seconds=timeout_seconds)

    # ffmpeg exits 0 without writing anything when seeking past the last frame
    if not target_path.exists() or target_path.stat().st_size == 0:
        raise MediaToolError(f"ffmpeg produced no frame at {timestamp_seconds:.3f}s for {video_path}.")
    return target_path


def _scale_filter(width: int | None) -> list[str]:
    if width is None or width <= 0:
        return []
    return ["-vf", f"scale={int(width)}:-1"]

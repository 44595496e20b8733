from __future__ import annotations

import csv
import json
import logging
import math
from pathlib import Path
from typing import Any, Callable

from frame_picker.ingest.media_tool import MediaTool
from frame_picker.models import ExportedFrame, FrameSelection

logger = logging.getLogger(__name__)

MID_TIMESTAMP = "mid"


def export_picks(
    video_path: str | Path,
    selection: FrameSelection,
    output_dir: str | Path,
    media_tool: MediaTool,
    *,
    basename: str = "picks",
) -> dict[str, Any]:
    """Materialize each pick as a full-resolution JPEG plus JSON/CSV manifests.

    Extraction failures propagate: callers expect every selected pick on disk.
    """

    resolved_output_dir = Path(output_dir)
    resolved_output_dir.mkdir(parents=True, exist_ok=True)

    frames: list[ExportedFrame] = []
    for index, pick in enumerate(selection.picks, start=1):
        frame_path = resolved_output_dir / frame_filename(index, pick.timestamp, pick.score)
        media_tool.extract_frame(video_path, pick.timestamp, frame_path)
        frames.append(ExportedFrame(index=index, timestamp=pick.timestamp, score=pick.score, path=frame_path))
        logger.debug("Exported pick %d at %.2fs to %s", index, pick.timestamp, frame_path)

    json_path = resolved_output_dir / f"{basename}.json"
    csv_path = resolved_output_dir / f"{basename}.csv"
    _write_json(video_path, selection, frames, json_path)
    _write_csv(frames, csv_path)

    return {
        "frames": [frame.path for frame in frames],
        "json": json_path,
        "csv": csv_path,
    }


def export_thumbnail(
    video_path: str | Path,
    timestamp: str | float,
    thumbs_dir: str | Path,
    media_tool: MediaTool,
) -> Path:
    """Write one full-resolution thumbnail, reusing an earlier export of the same instant."""

    source_path = Path(video_path)
    if not source_path.exists():
        raise FileNotFoundError(f"Video file not found: {source_path}")

    seconds = resolve_thumbnail_timestamp(
        timestamp,
        duration_lookup=lambda: media_tool.probe_duration(source_path),
    )
    output_path = Path(thumbs_dir) / thumbnail_filename(source_path.name, seconds)
    if output_path.exists():
        logger.info("Reusing existing thumbnail %s", output_path)
        return output_path

    return media_tool.extract_frame(source_path, seconds, output_path)


def resolve_thumbnail_timestamp(timestamp: str | float, *, duration_lookup: Callable[[], float]) -> float:
    """Turn ``"mid"`` or a numeric value into seconds; garbage means 0."""

    if isinstance(timestamp, str) and timestamp.strip().lower() == MID_TIMESTAMP:
        return max(0.0, float(duration_lookup()) * 0.5)

    try:
        seconds = float(timestamp)
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(seconds):
        return 0.0
    return max(0.0, seconds)


def frame_filename(index: int, timestamp: float, score: float) -> str:
    return f"thumb_{index}_{timestamp:.2f}s_score_{score:.3f}.jpg"


def thumbnail_filename(video_name: str, seconds: float) -> str:
    label = str(int(seconds)) if float(seconds).is_integer() else str(seconds)
    return f"{video_name}__{label.replace('.', '_')}.jpg"


def _write_json(
    video_path: str | Path,
    selection: FrameSelection,
    frames: list[ExportedFrame],
    path: Path,
) -> None:
    payload = {
        "video_path": str(video_path),
        "duration": selection.duration,
        "candidate_count": selection.candidate_count,
        "scored_count": selection.scored_count,
        "picks": [
            {
                "index": frame.index,
                "timestamp": frame.timestamp,
                "score": frame.score,
                "path": frame.path.name,
            }
            for frame in frames
        ],
    }
    path.write_text(json.dumps(payload, indent=2), encoding="utf-8")


def _write_csv(frames: list[ExportedFrame], path: Path) -> None:
    fields = ["index", "timestamp", "score", "path"]

    with path.open("w", newline="", encoding="utf-8") as handle:
        writer = csv.DictWriter(handle, fieldnames=fields)
        writer.writeheader()
        for frame in frames:
            writer.writerow(
                {
                    "index": frame.index,
                    "timestamp": f"{frame.timestamp:.3f}",
                    "score": f"{frame.score:.4f}",
                    "path": frame.path.name,
                }
            )

from __future__ import annotations

import math
import re
from pathlib import Path

from frame_picker.ingest.media_command import run_media_command
from frame_picker.models import ImageStats

SIGNALSTATS_PATTERN = re.compile(r"lavfi\.signalstats\.([A-Z]+)=(-?[0-9.]+)")
BASE_FILTER = "format=gray,signalstats,metadata=print"
EDGE_FILTER = "format=gray,edgedetect=mode=colormix:low=0.1:high=0.4,signalstats,metadata=print"

ImageSource = str | Path | bytes


def read_image_stats(
    image: ImageSource,
    *,
    edges: bool = False,
    ffmpeg_bin: str = "ffmpeg",
    timeout_seconds: float | None = None,
) -> ImageStats:
    """Measure grayscale luminance mean/stddev of an image with ffmpeg signalstats.

    With ``edges=True`` an edge-detection pass runs first, so ``mean`` becomes
    the mean edge intensity. ``image`` may be a path or raw JPEG bytes.
    """

    video_filter = EDGE_FILTER if edges else BASE_FILTER
    if isinstance(image, bytes):
        input_args = ["-f", "image2pipe", "-i", "pipe:0"]
        input_bytes: bytes | None = image
    else:
        input_args = ["-i", str(image)]
        input_bytes = None

    command = [
        ffmpeg_bin,
        "-hide_banner",
        *input_args,
        "-vf",
        video_filter,
        "-f",
        "null",
        "-",
    ]
    result = run_media_command(command, timeout_seconds=timeout_seconds, input_bytes=input_bytes)
    return stats_from_values(parse_signalstats(result.stderr))


def parse_signalstats(text: str) -> dict[str, float]:
    """Collect ``lavfi.signalstats.KEY=VALUE`` pairs; later frames overwrite earlier ones."""

    values: dict[str, float] = {}
    for key, raw_value in SIGNALSTATS_PATTERN.findall(text):
        try:
            values[key] = float(raw_value)
        except ValueError:
            continue
    return values


def stats_from_values(values: dict[str, float]) -> ImageStats:
    return ImageStats(
        mean=_finite_or_none(values.get("YAVG")),
        std=_finite_or_none(values.get("YSTD")),
        raw=dict(values),
    )


def _finite_or_none(value: float | None) -> float | None:
    if value is None or not math.isfinite(value):
        return None
    return value

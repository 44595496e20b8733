from __future__ import annotations

from pathlib import Path
from typing import Protocol

from frame_picker.config import MediaSettings
from frame_picker.ingest.extract_frame import extract_frame
from frame_picker.ingest.probe import probe_duration
from frame_picker.ingest.signalstats import ImageSource, read_image_stats
from frame_picker.models import ImageStats


class MediaTool(Protocol):
    """External media collaborator consumed by the selection pipeline."""

    def probe_duration(self, video_path: str | Path) -> float: ...

    def extract_frame(
        self,
        video_path: str | Path,
        timestamp_seconds: float,
        output_path: str | Path,
        width: int | None = None,
    ) -> Path: ...

    def image_stats(self, image: ImageSource, *, edges: bool = False) -> ImageStats: ...


class FfmpegMediaTool:
    """MediaTool backed by the ffmpeg/ffprobe binaries."""

    def __init__(
        self,
        *,
        ffmpeg_bin: str = "ffmpeg",
        ffprobe_bin: str = "ffprobe",
        timeout_seconds: float | None = None,
    ) -> None:
        self.ffmpeg_bin = ffmpeg_bin
        self.ffprobe_bin = ffprobe_bin
        self.timeout_seconds = timeout_seconds

    @classmethod
    def from_settings(cls, settings: MediaSettings) -> FfmpegMediaTool:
        return cls(
            ffmpeg_bin=settings.ffmpeg_bin,
            ffprobe_bin=settings.ffprobe_bin,
            timeout_seconds=settings.timeout_seconds,
        )

    def probe_duration(self, video_path: str | Path) -> float:
        return probe_duration(
            video_path,
            ffprobe_bin=self.ffprobe_bin,
            timeout_seconds=self.timeout_seconds,
        )

    def extract_frame(
        self,
        video_path: str | Path,
        timestamp_seconds: float,
        output_path: str | Path,
        width: int | None = None,
    ) -> Path:
        return extract_frame(
            video_path,
            timestamp_seconds,
            output_path,
            width,
            ffmpeg_bin=self.ffmpeg_bin,
            timeout_seconds=self.timeout_seconds,
        )

    def image_stats(self, image: ImageSource, *, edges: bool = False) -> ImageStats:
        return read_image_stats(
            image,
            edges=edges,
            ffmpeg_bin=self.ffmpeg_bin,
            timeout_seconds=self.timeout_seconds,
        )

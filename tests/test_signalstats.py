from __future__ import annotations

import subprocess

import pytest

from frame_picker.ingest.media_command import MediaToolError
from frame_picker.ingest.signalstats import (
    BASE_FILTER,
    EDGE_FILTER,
    parse_signalstats,
    read_image_stats,
    stats_from_values,
)

SAMPLE_STDERR = """\
[Parsed_metadata_2 @ 0x5581] frame:0    pts:0       pts_time:0
[Parsed_metadata_2 @ 0x5581] lavfi.signalstats.YMIN=16
[Parsed_metadata_2 @ 0x5581] lavfi.signalstats.YAVG=112.53
[Parsed_metadata_2 @ 0x5581] lavfi.signalstats.YSTD=45.2
[Parsed_metadata_2 @ 0x5581] lavfi.signalstats.YMAX=235
"""


def test_parse_signalstats_collects_numeric_pairs() -> None:
    values = parse_signalstats(SAMPLE_STDERR)

    assert values == {"YMIN": 16.0, "YAVG": 112.53, "YSTD": 45.2, "YMAX": 235.0}


def test_stats_from_values_leaves_missing_fields_empty() -> None:
    stats = stats_from_values({"YSTD": 12.0})

    assert stats.mean is None
    assert stats.std == 12.0


def test_read_image_stats_pipes_bytes_through_stdin() -> None:
    captured: dict[str, object] = {}

    def _fake_run(command: list[str], **kwargs: object) -> subprocess.CompletedProcess[bytes]:
        captured["command"] = command
        captured["input"] = kwargs.get("input")
        return subprocess.CompletedProcess(command, 0, stdout=b"", stderr=SAMPLE_STDERR.encode())

    with pytest.MonkeyPatch.context() as mp:
        mp.setattr(subprocess, "run", _fake_run)
        stats = read_image_stats(b"\xff\xd8jpeg")

    command = captured["command"]
    assert isinstance(command, list)
    assert command[command.index("-i") + 1] == "pipe:0"
    assert command[command.index("-vf") + 1] == BASE_FILTER
    assert captured["input"] == b"\xff\xd8jpeg"
    assert stats.mean == pytest.approx(112.53)
    assert stats.std == pytest.approx(45.2)


def test_read_image_stats_runs_edge_detection_for_edges() -> None:
    captured: list[list[str]] = []

    def _fake_run(command: list[str], **kwargs: object) -> subprocess.CompletedProcess[bytes]:
        captured.append(command)
        return subprocess.CompletedProcess(command, 0, stdout=b"", stderr=b"lavfi.signalstats.YAVG=22.5")

    with pytest.MonkeyPatch.context() as mp:
        mp.setattr(subprocess, "run", _fake_run)
        stats = read_image_stats("frame.jpg", edges=True)

    assert captured[0][captured[0].index("-i") + 1] == "frame.jpg"
    assert captured[0][captured[0].index("-vf") + 1] == EDGE_FILTER
    assert stats.mean == pytest.approx(22.5)


def test_read_image_stats_propagates_tool_failure() -> None:
    def _raise_process_error(command: list[str], **kwargs: object) -> subprocess.CompletedProcess[bytes]:
        raise subprocess.CalledProcessError(returncode=1, cmd=command, output=b"", stderr=b"corrupt jpeg")

    with pytest.MonkeyPatch.context() as mp:
        mp.setattr(subprocess, "run", _raise_process_error)
        with pytest.raises(MediaToolError, match="corrupt jpeg"):
            read_image_stats("frame.jpg")

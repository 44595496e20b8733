from __future__ import annotations

import math

import pytest

from frame_picker.propose.candidate_planner import plan_candidates


def _assert_within_window(timestamps: list[float], duration: float) -> None:
    for timestamp in timestamps:
        assert duration * 0.06 <= timestamp <= duration * 0.94
        assert timestamp <= duration - 0.15
    assert all(later >= earlier for earlier, later in zip(timestamps, timestamps[1:]))
    unclamped = [timestamp for timestamp in timestamps if timestamp < duration - 0.15]
    assert all(later > earlier for earlier, later in zip(unclamped, unclamped[1:]))


def test_plan_candidates_for_one_minute_video() -> None:
    timestamps = plan_candidates(60.0)

    assert len(timestamps) == 171
    _assert_within_window(timestamps, 60.0)
    assert timestamps[0] == pytest.approx(3.6 + 52.8 / 172)
    assert timestamps[-1] == pytest.approx(3.6 + 52.8 * 171 / 172)


def test_plan_candidates_for_short_video_uses_minimum_count() -> None:
    timestamps = plan_candidates(5.0)

    assert len(timestamps) == 40
    _assert_within_window(timestamps, 5.0)
    assert timestamps[1] - timestamps[0] == pytest.approx(4.4 / 41)
    assert max(timestamps) < 4.85


def test_plan_candidates_saturates_at_max_candidates() -> None:
    assert len(plan_candidates(1000.0)) == 180
    assert len(plan_candidates(1000.0, max_candidates=60)) == 60


def test_max_candidates_wins_over_minimum() -> None:
    assert len(plan_candidates(60.0, max_candidates=10)) == 10


def test_candidate_count_is_non_decreasing_in_duration() -> None:
    counts = [len(plan_candidates(duration / 4)) for duration in range(8, 400)]

    assert counts == sorted(counts)
    assert counts[-1] == 180


@pytest.mark.parametrize("duration", [0.5, 1.0, 3.3, 13.9, 14.0, 59.99, 61.7, 3600.0])
def test_plan_candidates_respects_window_for_assorted_durations(duration: float) -> None:
    timestamps = plan_candidates(duration)

    _assert_within_window(timestamps, duration)
    if math.floor(duration / 0.35) < 40:
        assert len(timestamps) == 40


@pytest.mark.parametrize("duration", [0.5, 1.0])
def test_plan_candidates_keeps_collapsed_tail_on_short_clips(duration: float) -> None:
    timestamps = plan_candidates(duration)

    assert len(timestamps) == 40
    assert timestamps[-1] == pytest.approx(duration - 0.15)
    assert timestamps.count(timestamps[-1]) > 1


def test_plan_candidates_collapses_sub_tail_guard_clip() -> None:
    assert plan_candidates(0.1) == [0.0] * 40


def test_plan_candidates_is_deterministic() -> None:
    assert plan_candidates(42.0) == plan_candidates(42.0)


@pytest.mark.parametrize("duration", [0.0, -2.0, math.nan, math.inf])
def test_plan_candidates_rejects_unusable_duration(duration: float) -> None:
    with pytest.raises(ValueError, match="positive finite"):
        plan_candidates(duration)

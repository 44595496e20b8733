from __future__ import annotations

from itertools import combinations

import pytest

from frame_picker.models import ScoredCandidate
from frame_picker.propose.candidate_planner import plan_candidates
from frame_picker.propose.top_k_selector import minimum_gap_seconds, select_top


def _candidates(rows: list[tuple[float, float]]) -> list[ScoredCandidate]:
    return [ScoredCandidate(timestamp=timestamp, score=score) for timestamp, score in rows]


def _timestamps(picks: list[ScoredCandidate]) -> list[float]:
    return [pick.timestamp for pick in picks]


def test_minimum_gap_scales_with_duration_above_floor() -> None:
    assert minimum_gap_seconds(10.0) == 1.2
    assert minimum_gap_seconds(60.0) == pytest.approx(3.6)


def test_select_top_returns_best_spaced_picks_in_timeline_order() -> None:
    scored = _candidates([(9.0, 0.2), (1.0, 0.9), (1.5, 0.95), (4.0, 0.8), (6.0, 0.7), (8.0, 0.6), (3.0, 0.1)])

    picks = select_top(10.0, scored)

    assert _timestamps(picks) == [1.5, 4.0, 6.0, 8.0, 9.0]


def test_relaxed_pass_fills_remaining_slots_with_one_second_gap() -> None:
    scored = _candidates([(2.0, 0.9), (3.0, 0.8), (4.0, 0.7), (5.0, 0.6), (6.0, 0.5), (2.5, 0.95)])

    picks = select_top(10.0, scored)

    # first pass keeps 2.5, 4.0 and 6.0; the relaxed pass adds 5.0 only
    assert _timestamps(picks) == [2.5, 4.0, 5.0, 6.0]


def test_small_pool_returns_every_candidate_that_fits_the_gap() -> None:
    assert _timestamps(select_top(3.0, _candidates([(2.0, 0.1), (0.5, 0.3)]))) == [0.5, 2.0]
    assert _timestamps(select_top(3.0, _candidates([(1.0, 0.5), (1.3, 0.9)]))) == [1.3]


def test_ties_keep_input_order() -> None:
    scored = _candidates([(5.0, 0.5), (1.0, 0.5), (9.0, 0.5), (3.0, 0.5), (7.0, 0.5), (8.0, 0.5)])

    picks = select_top(10.0, scored)

    assert _timestamps(picks) == [1.0, 3.0, 5.0, 7.0, 9.0]


def test_uniform_scores_pick_earliest_spaced_candidates() -> None:
    timestamps = plan_candidates(60.0)
    scored = _candidates([(timestamp, 0.5) for timestamp in timestamps])
    step = timestamps[1] - timestamps[0]

    picks = select_top(60.0, scored)

    assert len(picks) == 5
    assert picks[0].timestamp == timestamps[0]
    for earlier, later in zip(picks, picks[1:]):
        gap = later.timestamp - earlier.timestamp
        assert 3.6 <= gap < 3.6 + step + 1e-9


def test_rich_pool_honors_full_minimum_gap() -> None:
    timestamps = plan_candidates(20.0)
    scored = _candidates([(timestamp, ((index * 37) % 11) / 10) for index, timestamp in enumerate(timestamps)])

    picks = select_top(20.0, scored)

    assert len(picks) == 5
    for first, second in combinations(picks, 2):
        assert abs(first.timestamp - second.timestamp) >= 1.2


def test_select_top_is_deterministic() -> None:
    scored = _candidates([(t / 3, ((i * 7) % 5) / 5) for i, t in enumerate(range(3, 90))])

    first = select_top(30.0, list(scored))
    second = select_top(30.0, list(scored))

    assert first == second


def test_select_top_handles_empty_input_and_zero_k() -> None:
    assert select_top(10.0, []) == []
    assert select_top(10.0, _candidates([(1.0, 0.5)]), top_k=0) == []

from __future__ import annotations

from frame_picker.models import ScoredCandidate


def select_top(
    duration: float,
    scored_candidates: list[ScoredCandidate],
    top_k: int = 5,
    *,
    min_gap_floor_seconds: float = 1.2,
    min_gap_ratio: float = 0.06,
    relaxed_gap_seconds: float = 1.0,
) -> list[ScoredCandidate]:
    """Pick up to ``top_k`` high-scoring candidates that are spread out in time.

    Pipeline:
    1) rank by score, best first; ties keep input order
    2) greedy pass with ``max(min_gap_floor_seconds, duration * min_gap_ratio)``
    3) if short of ``top_k``, a second greedy pass with ``relaxed_gap_seconds``
    4) return picks in timeline order
    """

    if top_k <= 0 or not scored_candidates:
        return []

    ranked = sorted(scored_candidates, key=lambda candidate: candidate.score, reverse=True)
    min_gap = minimum_gap_seconds(duration, floor_seconds=min_gap_floor_seconds, ratio=min_gap_ratio)

    picks: list[ScoredCandidate] = []
    _greedy_fill(picks, ranked, gap_seconds=min_gap, top_k=top_k)
    if len(picks) < top_k:
        _greedy_fill(picks, ranked, gap_seconds=relaxed_gap_seconds, top_k=top_k)

    return sorted(picks, key=lambda pick: pick.timestamp)


def minimum_gap_seconds(duration: float, *, floor_seconds: float = 1.2, ratio: float = 0.06) -> float:
    return max(floor_seconds, duration * ratio)


def _greedy_fill(
    picks: list[ScoredCandidate],
    ranked: list[ScoredCandidate],
    *,
    gap_seconds: float,
    top_k: int,
) -> None:
    for candidate in ranked:
        if len(picks) >= top_k:
            return
        if any(pick is candidate or pick.timestamp == candidate.timestamp for pick in picks):
            continue
        if all(abs(pick.timestamp - candidate.timestamp) >= gap_seconds for pick in picks):
            picks.append(candidate)

from __future__ import annotations

import math


def plan_candidates(
    duration: float,
    max_candidates: int = 180,
    *,
    min_candidates: int = 40,
    seconds_per_candidate: float = 0.35,
    edge_margin_ratio: float = 0.06,
    tail_guard_seconds: float = 0.15,
) -> list[float]:
    """Plan evenly spaced, ascending sample timestamps for a video.

    Sampling covers ``[duration * margin, duration * (1 - margin)]`` and never
    reaches past ``duration - tail_guard_seconds``. Longer videos get denser
    sampling, bounded to ``[min_candidates, max_candidates]`` samples, with the
    upper bound winning if the two conflict.
    """

    if not math.isfinite(duration) or duration <= 0:
        raise ValueError(f"Video duration must be a positive finite number, got {duration!r}.")

    start = duration * edge_margin_ratio
    end = duration * (1.0 - edge_margin_ratio)
    span = max(0.0, end - start)

    count = min(max_candidates, max(min_candidates, math.floor(duration / seconds_per_candidate)))
    if count <= 0:
        return []

    step = span / (count + 1)
    latest = duration - tail_guard_seconds

    timestamps: list[float] = []
    for index in range(1, count + 1):
        # on clips shorter than ~2s the tail collapses onto duration - tail_guard_seconds
        timestamps.append(max(0.0, min(latest, start + step * index)))

    return timestamps

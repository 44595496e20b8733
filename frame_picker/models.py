from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any


@dataclass(slots=True)
class ImageStats:
    """Grayscale signal statistics reported for one still image."""

    mean: float | None = None
    std: float | None = None
    raw: dict[str, float] = field(default_factory=dict)


@dataclass(slots=True)
class ScoredCandidate:
    """A sampled timestamp paired with its frame quality score."""

    timestamp: float
    score: float

    def to_dict(self) -> dict[str, float]:
        return {"timestamp": self.timestamp, "score": self.score}


@dataclass(slots=True)
class FrameSelection:
    """Result of one selection run: probed duration plus chronological picks."""

    duration: float
    picks: list[ScoredCandidate]
    candidate_count: int = 0
    scored_count: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "duration": self.duration,
            "picks": [pick.to_dict() for pick in self.picks],
        }


@dataclass(slots=True)
class ExportedFrame:
    """A pick materialized as a full-resolution JPEG on disk."""

    index: int
    timestamp: float
    score: float
    path: Path

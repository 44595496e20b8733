from __future__ import annotations

import logging
import tempfile
from pathlib import Path

from frame_picker.config import Settings
from frame_picker.ingest.media_tool import FfmpegMediaTool, MediaTool
from frame_picker.models import FrameSelection, ScoredCandidate
from frame_picker.propose.candidate_planner import plan_candidates
from frame_picker.propose.top_k_selector import select_top
from frame_picker.scoring.frame_score import score_frame

logger = logging.getLogger(__name__)

SCRATCH_PREFIX = "frame_picker_"


def select_best_frames(
    video_path: str | Path,
    *,
    settings: Settings | None = None,
    media_tool: MediaTool | None = None,
) -> FrameSelection:
    """Probe, sample, score and pick the best spaced-out frames of one video.

    Probe failures propagate. Candidates whose frame cannot be extracted are
    skipped; scoring failures lower the candidate's score instead of failing.
    Scratch JPEGs live in a per-run temporary directory that is always removed.
    """

    resolved_settings = settings or Settings()
    tool = media_tool or FfmpegMediaTool.from_settings(resolved_settings.media)

    duration = tool.probe_duration(video_path)
    planner = resolved_settings.planner
    candidates = plan_candidates(
        duration,
        planner.max_candidates,
        min_candidates=planner.min_candidates,
        seconds_per_candidate=planner.seconds_per_candidate,
        edge_margin_ratio=planner.edge_margin_ratio,
        tail_guard_seconds=planner.tail_guard_seconds,
    )
    logger.info("Planned %d candidates for %s (duration %.2fs)", len(candidates), video_path, duration)

    scored = _score_candidates(
        video_path,
        candidates,
        media_tool=tool,
        scoring_width=resolved_settings.media.scoring_width,
        weights=resolved_settings.weights.model_dump(mode="python"),
    )

    selection_settings = resolved_settings.selection
    picks = select_top(
        duration,
        scored,
        selection_settings.top_k,
        min_gap_floor_seconds=selection_settings.min_gap_floor_seconds,
        min_gap_ratio=selection_settings.min_gap_ratio,
        relaxed_gap_seconds=selection_settings.relaxed_gap_seconds,
    )
    logger.info(
        "Selected %d picks from %d scored candidates: %s",
        len(picks),
        len(scored),
        ", ".join(f"{pick.timestamp:.2f}s={pick.score:.3f}" for pick in picks),
    )

    return FrameSelection(
        duration=duration,
        picks=picks,
        candidate_count=len(candidates),
        scored_count=len(scored),
    )


def _score_candidates(
    video_path: str | Path,
    candidates: list[float],
    *,
    media_tool: MediaTool,
    scoring_width: int,
    weights: dict[str, float],
) -> list[ScoredCandidate]:
    scored: list[ScoredCandidate] = []
    width = scoring_width if scoring_width > 0 else None

    with tempfile.TemporaryDirectory(prefix=SCRATCH_PREFIX) as scratch_dir:
        for index, timestamp in enumerate(candidates):
            frame_path = Path(scratch_dir) / f"c_{index}_{timestamp:.2f}.jpg"
            try:
                media_tool.extract_frame(video_path, timestamp, frame_path, width)
            except (RuntimeError, OSError) as exc:
                logger.warning("Skipping candidate at %.3fs: frame extraction failed (%s)", timestamp, exc)
                continue

            scored.append(
                ScoredCandidate(
                    timestamp=timestamp,
                    score=score_frame(frame_path, media_tool, weights=weights),
                )
            )
            frame_path.unlink(missing_ok=True)

    return scored

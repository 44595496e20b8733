from __future__ import annotations

import logging
import math
from dataclasses import dataclass

from frame_picker.ingest.media_tool import MediaTool
from frame_picker.ingest.signalstats import ImageSource
from frame_picker.models import ImageStats

logger = logging.getLogger(__name__)

DEFAULT_WEIGHTS = {
    "exposure": 0.45,
    "contrast": 0.30,
    "sharpness": 0.25,
}

NEUTRAL_LUMA = 128.0
CONTRAST_SATURATION = 64.0
SHARPNESS_SATURATION = 40.0


@dataclass(slots=True)
class FrameScoreDetails:
    """Explainable output for one still-image quality score."""

    score: float
    exposure: float
    contrast: float
    sharpness: float
    luma_mean: float
    luma_std: float
    edge_mean: float
    base_stats_ok: bool = True
    edge_stats_ok: bool = True

    def to_dict(self) -> dict[str, float | bool]:
        return {
            "score": self.score,
            "exposure": self.exposure,
            "contrast": self.contrast,
            "sharpness": self.sharpness,
            "luma_mean": self.luma_mean,
            "luma_std": self.luma_std,
            "edge_mean": self.edge_mean,
            "base_stats_ok": self.base_stats_ok,
            "edge_stats_ok": self.edge_stats_ok,
        }


def score_frame(
    image: ImageSource,
    media_tool: MediaTool,
    weights: dict[str, float] | None = None,
) -> float:
    """Score a still image in [0, 1]; never raises."""

    return score_frame_details(image, media_tool, weights=weights).score


def score_frame_details(
    image: ImageSource,
    media_tool: MediaTool,
    weights: dict[str, float] | None = None,
) -> FrameScoreDetails:
    try:
        base_stats = media_tool.image_stats(image, edges=False)
    except Exception as exc:
        logger.debug("Base signal statistics failed; scoring frame as 0.0: %s", exc)
        return FrameScoreDetails(
            score=0.0,
            exposure=0.0,
            contrast=0.0,
            sharpness=0.0,
            luma_mean=NEUTRAL_LUMA,
            luma_std=0.0,
            edge_mean=0.0,
            base_stats_ok=False,
            edge_stats_ok=False,
        )

    edge_stats: ImageStats | None
    try:
        edge_stats = media_tool.image_stats(image, edges=True)
    except Exception as exc:
        logger.debug("Edge signal statistics failed; sharpness forced to 0: %s", exc)
        edge_stats = None

    return score_stats(base_stats, edge_stats, weights=weights)


def score_stats(
    base_stats: ImageStats,
    edge_stats: ImageStats | None,
    weights: dict[str, float] | None = None,
) -> FrameScoreDetails:
    """Combine exposure, contrast and sharpness signals into one weighted score."""

    luma_mean = _finite_or_default(base_stats.mean, NEUTRAL_LUMA)
    luma_std = _finite_or_default(base_stats.std, 0.0)
    edge_mean = _finite_or_default(edge_stats.mean if edge_stats is not None else None, 0.0)

    exposure = 1.0 - min(1.0, abs(luma_mean - NEUTRAL_LUMA) / NEUTRAL_LUMA)
    contrast = _clamp(luma_std / CONTRAST_SATURATION)
    sharpness = _clamp(edge_mean / SHARPNESS_SATURATION)

    resolved_weights = _resolve_weights(weights)
    score = _clamp(
        resolved_weights.get("exposure", 0.0) * exposure
        + resolved_weights.get("contrast", 0.0) * contrast
        + resolved_weights.get("sharpness", 0.0) * sharpness
    )

    return FrameScoreDetails(
        score=score,
        exposure=exposure,
        contrast=contrast,
        sharpness=sharpness,
        luma_mean=luma_mean,
        luma_std=luma_std,
        edge_mean=edge_mean,
        edge_stats_ok=edge_stats is not None,
    )


def _resolve_weights(weights: dict[str, float] | None) -> dict[str, float]:
    active_weights = weights or DEFAULT_WEIGHTS

    non_negative = {
        signal_name: max(0.0, raw_weight)
        for signal_name, raw_weight in active_weights.items()
        if signal_name in DEFAULT_WEIGHTS
    }
    total_weight = sum(non_negative.values())
    if total_weight == 0:
        return {}

    return {
        signal_name: weight / total_weight
        for signal_name, weight in non_negative.items()
    }


def _finite_or_default(value: float | None, default: float) -> float:
    if value is None or not math.isfinite(value):
        return default
    return value


def _clamp(value: float, minimum: float = 0.0, maximum: float = 1.0) -> float:
    return max(minimum, min(maximum, value))

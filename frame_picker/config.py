from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field

DEFAULT_CONFIG_PATH = Path("configs/default.yaml")
ENV_PREFIX = "FRAME_PICKER_"
DEFAULT_LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


class MediaSettings(BaseModel):
    ffmpeg_bin: str = "ffmpeg"
    ffprobe_bin: str = "ffprobe"
    timeout_seconds: float = 60.0
    scoring_width: int = 320


class PlannerSettings(BaseModel):
    max_candidates: int = 180
    min_candidates: int = 40
    seconds_per_candidate: float = 0.35
    edge_margin_ratio: float = 0.06
    tail_guard_seconds: float = 0.15


class SelectionSettings(BaseModel):
    top_k: int = 5
    min_gap_floor_seconds: float = 1.2
    min_gap_ratio: float = 0.06
    relaxed_gap_seconds: float = 1.0


class WeightSettings(BaseModel):
    exposure: float = 0.45
    contrast: float = 0.30
    sharpness: float = 0.25


class PipelineSettings(BaseModel):
    output_dir: Path = Path("data/outputs")
    thumbs_dir: Path = Path("data/thumbs")


class LoggingSettings(BaseModel):
    level: str = "INFO"
    format: str = DEFAULT_LOG_FORMAT


class Settings(BaseModel):
    media: MediaSettings = Field(default_factory=MediaSettings)
    planner: PlannerSettings = Field(default_factory=PlannerSettings)
    selection: SelectionSettings = Field(default_factory=SelectionSettings)
    weights: WeightSettings = Field(default_factory=WeightSettings)
    pipeline: PipelineSettings = Field(default_factory=PipelineSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


def load_settings(config_path: str | Path | None = None) -> Settings:
    """Load typed settings from YAML with environment-variable overrides.

    A missing file at the default location yields the built-in defaults; an
    explicitly requested file must exist.
    """

    explicit_path = config_path or os.getenv(f"{ENV_PREFIX}CONFIG")
    resolved_path = Path(explicit_path or DEFAULT_CONFIG_PATH)
    if resolved_path.exists() or explicit_path:
        raw_config = yaml.safe_load(resolved_path.read_text(encoding="utf-8")) or {}
    else:
        raw_config = {}
    data = Settings.model_validate(raw_config).model_dump(mode="python")

    for key, raw_value in os.environ.items():
        if not key.startswith(ENV_PREFIX):
            continue

        suffix = key[len(ENV_PREFIX) :]
        if suffix == "CONFIG":
            continue

        path = [part.lower() for part in suffix.split("__")]
        _apply_override(data, path, raw_value)

    return Settings.model_validate(data)


def _apply_override(data: dict[str, Any], path: list[str], raw_value: str) -> None:
    current: Any = data
    for segment in path[:-1]:
        if not isinstance(current, dict) or segment not in current:
            return
        current = current[segment]

    if not isinstance(current, dict):
        return

    final_key = path[-1]
    if final_key not in current:
        return

    current[final_key] = _coerce_value(raw_value, current[final_key])


def _coerce_value(raw_value: str, existing_value: Any) -> Any:
    if isinstance(existing_value, bool):
        return raw_value.lower() in {"1", "true", "yes", "on"}
    if isinstance(existing_value, int) and not isinstance(existing_value, bool):
        return int(raw_value)
    if isinstance(existing_value, float):
        return float(raw_value)
    if isinstance(existing_value, list | dict):
        return json.loads(raw_value)
    if isinstance(existing_value, Path):
        return Path(raw_value)
    return raw_value

from __future__ import annotations

import os
from dataclasses import dataclass

_ENV_PREFIX = "PUZZLE_CAMPAIGN_"


@dataclass(frozen=True, slots=True)
class CampaignConfig:
    # Pause between a puzzle being solved and the next stage opening.
    constellation_advance_delay_s: float = 2.0
    maze_advance_delay_s: float = 1.5
    # Wrong constellation picks before the tracing hint turns on.
    hint_threshold: int = 3
    # Finale reveal: flowers bloom one by one, then the question appears.
    bloom_count: int = 12
    bloom_interval_s: float = 0.2
    question_pause_s: float = 0.5
    # Most recent campaign events kept in memory.
    event_log_size: int = 256


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(_ENV_PREFIX + name)
    if raw is None or not raw.strip():
        return default
    try:
        value = float(raw)
    except ValueError as e:
        raise ValueError(f"{_ENV_PREFIX}{name} must be a number, got {raw!r}") from e
    if value < 0:
        raise ValueError(f"{_ENV_PREFIX}{name} must be >= 0")
    return value


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(_ENV_PREFIX + name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError as e:
        raise ValueError(f"{_ENV_PREFIX}{name} must be an integer, got {raw!r}") from e
    if value < 0:
        raise ValueError(f"{_ENV_PREFIX}{name} must be >= 0")
    return value


def load_config() -> CampaignConfig:
    """Build the campaign config from `PUZZLE_CAMPAIGN_*` environment variables.

    Unset variables keep the defaults.
    """

    d = CampaignConfig()
    return CampaignConfig(
        constellation_advance_delay_s=_env_float("CONSTELLATION_DELAY_S", d.constellation_advance_delay_s),
        maze_advance_delay_s=_env_float("MAZE_DELAY_S", d.maze_advance_delay_s),
        hint_threshold=_env_int("HINT_THRESHOLD", d.hint_threshold),
        bloom_count=_env_int("BLOOM_COUNT", d.bloom_count),
        bloom_interval_s=_env_float("BLOOM_INTERVAL_S", d.bloom_interval_s),
        question_pause_s=_env_float("QUESTION_PAUSE_S", d.question_pause_s),
        event_log_size=_env_int("EVENT_LOG_SIZE", d.event_log_size),
    )

from __future__ import annotations

import os
from typing import List, Optional

import yaml
from pydantic import BaseModel, Field

from .constants import (
    DEFAULT_FALLBACK_PHASE,
    DEFAULT_LOG_MAX_ENTRIES,
    DEFAULT_MAX_DURATION_UNITS,
    DEFAULT_MIN_DURATION_UNITS,
    DEFAULT_PHASE_ORDER,
    DEFAULT_PLAYBACK_INTERVAL,
    DEFAULT_SUCCESS_RATE,
    DEFAULT_TIME_UNIT,
)


class PlaybackConfig(BaseModel):
    """Settings for timed playback."""

    interval: float = Field(default=DEFAULT_PLAYBACK_INTERVAL, gt=0)


class SimulationConfig(BaseModel):
    """Settings for interactive simulated execution."""

    success_rate: float = Field(default=DEFAULT_SUCCESS_RATE, ge=0, le=1)
    min_units: float = Field(default=DEFAULT_MIN_DURATION_UNITS, ge=0)
    max_units: float = Field(default=DEFAULT_MAX_DURATION_UNITS, ge=0)
    time_unit: float = Field(default=DEFAULT_TIME_UNIT, ge=0)
    seed: Optional[int] = None
    validate_inputs: bool = True


class LogConfig(BaseModel):
    """Retention of the execution log."""

    max_entries: Optional[int] = Field(default=DEFAULT_LOG_MAX_ENTRIES, gt=0)


class AdminflowConfig(BaseModel):
    """Top-level configuration model."""

    playback: PlaybackConfig = PlaybackConfig()
    simulation: SimulationConfig = SimulationConfig()
    log: LogConfig = LogConfig()
    phase_order: List[str] = Field(default_factory=lambda: list(DEFAULT_PHASE_ORDER))
    fallback_phase: str = DEFAULT_FALLBACK_PHASE
    database_url: Optional[str] = None


def load_config(path: Optional[str] = None) -> AdminflowConfig:
    """Load configuration from YAML file.

    Args:
        path: Optional path to config file. Falls back to ADMINFLOW_CONFIG env
            variable or 'config.yaml' in the current directory.
    """

    config_path = path or os.getenv("ADMINFLOW_CONFIG", "config.yaml")
    if os.path.exists(config_path):
        with open(config_path) as f:
            data = yaml.safe_load(f) or {}
        config = AdminflowConfig(**data)
    else:
        config = AdminflowConfig()

    env_db_url = os.getenv("ADMINFLOW_DATABASE_URL") or os.getenv("DATABASE_URL")
    if env_db_url:
        config.database_url = env_db_url
    return config

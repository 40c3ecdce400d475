"""Injectable randomness for simulated step execution."""

from __future__ import annotations

import random
from typing import Dict, Optional, Protocol

from .constants import (
    DEFAULT_MAX_DURATION_UNITS,
    DEFAULT_MIN_DURATION_UNITS,
    DEFAULT_SUCCESS_RATE,
)
from .models import Step


class OutcomeSource(Protocol):
    """Decides how long a simulated step takes and whether it succeeds."""

    rng: random.Random

    def duration(self, step: Step) -> float:
        """Simulated work time in time units."""

    def succeeds(self, step: Step) -> bool:
        """Outcome of the simulated work."""


class RandomOutcomes:
    """Uniform durations and a fixed success probability.

    ``overrides`` forces the outcome of specific step ids, which keeps runs
    deterministic in tests. Pass ``seed`` or an explicit ``rng`` to make the
    random draws repeatable.
    """

    def __init__(
        self,
        rng: Optional[random.Random] = None,
        seed: Optional[int] = None,
        success_rate: float = DEFAULT_SUCCESS_RATE,
        min_units: float = DEFAULT_MIN_DURATION_UNITS,
        max_units: float = DEFAULT_MAX_DURATION_UNITS,
        overrides: Optional[Dict[str, bool]] = None,
    ) -> None:
        if not 0.0 <= success_rate <= 1.0:
            raise ValueError("success_rate must be between 0 and 1")
        if min_units < 0 or max_units < min_units:
            raise ValueError("duration range must satisfy 0 <= min_units <= max_units")
        self.rng = rng or random.Random(seed)
        self.success_rate = success_rate
        self.min_units = min_units
        self.max_units = max_units
        self.overrides: Dict[str, bool] = dict(overrides or {})

    def duration(self, step: Step) -> float:
        return self.rng.uniform(self.min_units, self.max_units)

    def succeeds(self, step: Step) -> bool:
        if step.id in self.overrides:
            return self.overrides[step.id]
        return self.rng.random() < self.success_rate

    def force(self, step_id: str, success: bool) -> None:
        self.overrides[step_id] = success

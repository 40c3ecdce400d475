"""Progress calculations driven by a single current index.

``current_index`` counts the steps that are fully done. The step sitting at
``current_index`` is in progress and never counts towards completion.
"""

from __future__ import annotations

from typing import Dict, List, Optional, Sequence

from .constants import DEFAULT_FALLBACK_PHASE
from .models import PhaseBucket, Step, StepStatus
from .phases import find_bucket, group_phases


def _ratio(done: int, total: int) -> float:
    if total <= 0:
        return 0.0
    return min(100.0, max(0.0, done / total * 100))


def first_appearance_order(steps: Sequence[Step]) -> List[str]:
    order: List[str] = []
    for step in steps:
        if step.phase is not None and step.phase not in order:
            order.append(step.phase)
    return order


def phase_progress(
    steps: Sequence[Step],
    current_index: int,
    phase_name: str,
    phase_order: Optional[Sequence[str]] = None,
    fallback_label: str = DEFAULT_FALLBACK_PHASE,
) -> float:
    """Percentage of the ``phase_name`` bucket positioned before ``current_index``.

    Buckets are formed as :class:`ProgressTracker` forms them, so the
    fallback bucket reports the same figure here and there.
    """
    buckets = group_phases(steps, phase_order or first_appearance_order(steps), fallback_label)
    bucket = find_bucket(buckets, phase_name)
    if bucket is None:
        return 0.0
    return bucket_progress(bucket, current_index)


def bucket_progress(bucket: PhaseBucket, current_index: int) -> float:
    """Same as :func:`phase_progress` for an already grouped bucket."""
    done = sum(1 for i in bucket.indices if i < current_index)
    return _ratio(done, len(bucket))


def overall_progress(steps: Sequence[Step], current_index: int) -> float:
    """``current_index / len(steps)`` as a percentage clamped to [0, 100]."""
    return _ratio(current_index, len(steps))


def derived_status(index: int, current_index: int, running: bool) -> StepStatus:
    """Status of a step in timed playback, where nothing is stored per step."""
    if index < current_index:
        return StepStatus.COMPLETED
    if index == current_index and running:
        return StepStatus.RUNNING
    return StepStatus.PENDING


class ProgressTracker:
    """Authoritative holder of a run's current index.

    Every progress figure shown for a run is derived from the index kept
    here, whichever driver moves it.
    """

    def __init__(
        self,
        steps: Sequence[Step],
        phase_order: Optional[Sequence[str]] = None,
        fallback_label: str = DEFAULT_FALLBACK_PHASE,
    ) -> None:
        self._steps = list(steps)
        self._phase_order = list(phase_order or first_appearance_order(self._steps))
        self.buckets: List[PhaseBucket] = group_phases(
            self._steps, self._phase_order, fallback_label
        )
        self._current_index = 0

    @property
    def current_index(self) -> int:
        return self._current_index

    @property
    def total_steps(self) -> int:
        return len(self._steps)

    @property
    def phase_order(self) -> List[str]:
        return list(self._phase_order)

    def is_finished(self) -> bool:
        return self._current_index >= len(self._steps)

    def advance(self) -> int:
        """Move the index forward by one step, never past the end."""
        if not self.is_finished():
            self._current_index += 1
        return self._current_index

    def finish(self) -> int:
        self._current_index = len(self._steps)
        return self._current_index

    def seek(self, index: int) -> int:
        """Place the index at ``index``, clamped to ``[0, total_steps]``."""
        self._current_index = min(max(0, index), len(self._steps))
        return self._current_index

    def reset(self) -> None:
        self._current_index = 0

    def get_phase_progress(self, phase_name: str) -> float:
        bucket = find_bucket(self.buckets, phase_name)
        if bucket is None:
            return 0.0
        return bucket_progress(bucket, self._current_index)

    def get_overall_progress(self) -> float:
        return overall_progress(self._steps, self._current_index)

    def phase_summary(self) -> Dict[str, float]:
        """Progress of every non-empty phase in display order."""
        return {b.name: bucket_progress(b, self._current_index) for b in self.buckets}

    def active_phase(self) -> Optional[str]:
        """Name of the phase holding the step at the current index."""
        for bucket in self.buckets:
            if self._current_index in bucket.indices:
                return bucket.name
        return None

"""Shared state of a single workflow run.

A run owns the current index of one workflow and is driven either by timed
playback or by interactive execution, never both. The driver is fixed by
the concrete run class, and a workflow can only be claimed by one
unreleased run at a time.
"""

from __future__ import annotations

import abc
import asyncio
import logging
import weakref
from typing import ClassVar, Dict, List, Optional, Sequence, Set

from .constants import DEFAULT_FALLBACK_PHASE
from .errors import DriverConflictError
from .models import PhaseBucket, StepStatus, Workflow, WorkflowStatus
from .persistence import WorkflowStore
from .progress import ProgressTracker

logger = logging.getLogger(__name__)

_active_runs: "weakref.WeakValueDictionary[int, WorkflowRun]" = (
    weakref.WeakValueDictionary()
)


class WorkflowRun(abc.ABC):
    """Base class for the two run drivers."""

    mode: ClassVar[str]

    def __init__(
        self,
        workflow: Workflow,
        phase_order: Optional[Sequence[str]] = None,
        fallback_label: str = DEFAULT_FALLBACK_PHASE,
        repository: Optional[WorkflowStore] = None,
    ) -> None:
        self.workflow = workflow
        self._repository = repository
        self._released = False
        self._pending_saves: Set[asyncio.Task] = set()
        self._claim()
        self.tracker = ProgressTracker(
            workflow.steps, phase_order or workflow.phases or None, fallback_label
        )
        self._resume()

    # ------------------------------------------------------------------
    # Driver exclusivity
    def _claim(self) -> None:
        if is_claimed(self.workflow):
            holder = _active_runs[id(self.workflow)]
            raise DriverConflictError(
                f"Workflow '{self.workflow.id}' is already driven by a {holder.mode} run; "
                "release it before starting a new one"
            )
        _active_runs[id(self.workflow)] = self

    @property
    def released(self) -> bool:
        return self._released

    def release(self) -> None:
        """Give up the claim on the workflow so another run may drive it."""
        self._released = True
        if _active_runs.get(id(self.workflow)) is self:
            del _active_runs[id(self.workflow)]

    # ------------------------------------------------------------------
    # Resuming stored workflows
    def _resume(self) -> None:
        """Position the index from the stored step statuses.

        A step stored as ``running`` was interrupted mid-execution and goes
        back to ``pending``. The index lands on the first step that is not
        ``completed``; a workflow stored as ``completed`` is finished.
        """
        interrupted = [s for s in self.workflow.steps if s.status == StepStatus.RUNNING]
        for step in interrupted:
            step.reset()
            logger.warning(
                f"Step {step.id} of workflow {self.workflow.id} was interrupted; "
                "returned to pending"
            )

        if self.workflow.status == WorkflowStatus.COMPLETED:
            self.tracker.finish()
        else:
            done = 0
            for step in self.workflow.steps:
                if step.status != StepStatus.COMPLETED:
                    break
                done += 1
            self.tracker.seek(done)

        self._sync_progress()
        if interrupted or self.current_index:
            logger.info(
                f"Resumed workflow {self.workflow.id} at step "
                f"{self.current_index}/{self.total_steps}"
            )

    # ------------------------------------------------------------------
    # Progress queries
    @property
    def current_index(self) -> int:
        return self.tracker.current_index

    @property
    def total_steps(self) -> int:
        return self.tracker.total_steps

    @property
    def finished(self) -> bool:
        return self.tracker.is_finished()

    @property
    def buckets(self) -> List[PhaseBucket]:
        return self.tracker.buckets

    def get_phase_progress(self, phase_name: str) -> float:
        return self.tracker.get_phase_progress(phase_name)

    def get_overall_progress(self) -> float:
        return self.tracker.get_overall_progress()

    def phase_summary(self) -> Dict[str, float]:
        return self.tracker.phase_summary()

    # ------------------------------------------------------------------
    # Shared mutation helpers
    def _sync_progress(self) -> None:
        self.workflow.progress = self.tracker.get_overall_progress()
        self.workflow.touch()

    def _reset_workflow(self) -> None:
        self.tracker.reset()
        for step in self.workflow.steps:
            step.reset()
        self.workflow.status = WorkflowStatus.DRAFT
        self.workflow.actual_duration = None
        self._sync_progress()

    def _mark_workflow_completed(self) -> None:
        self.tracker.finish()
        self.workflow.status = WorkflowStatus.COMPLETED
        self._sync_progress()

    async def _checkpoint(self) -> None:
        """Write the workflow back to the repository, if one is configured."""
        if self._repository is None:
            return
        try:
            await self._repository.save(self.workflow)
        except Exception as e:
            logger.error(f"Failed to save workflow {self.workflow.id}: {e}")
            raise

    def _checkpoint_soon(self) -> None:
        """Schedule a checkpoint from synchronous code when a loop is running."""
        if self._repository is None:
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug(
                f"No running loop; checkpoint of workflow {self.workflow.id} skipped"
            )
            return
        task = loop.create_task(self._checkpoint())
        self._pending_saves.add(task)
        task.add_done_callback(self._pending_saves.discard)

    async def flush(self) -> None:
        """Wait for checkpoints scheduled by synchronous operations."""
        if self._pending_saves:
            await asyncio.gather(*list(self._pending_saves))

    @abc.abstractmethod
    def reset(self) -> None:
        """Return the run to its initial state."""


def is_claimed(workflow: Workflow) -> bool:
    """Whether an unreleased run currently drives ``workflow``."""
    holder = _active_runs.get(id(workflow))
    return holder is not None and holder.workflow is workflow and not holder.released

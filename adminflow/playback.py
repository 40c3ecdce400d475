"""Timed playback of a workflow for unattended demos.

Playback advances the current index on a fixed period until every step is
done. It never fails a step; per-step status is derived from the index.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from typing import Any, Awaitable, Callable, List, Optional, Sequence, Tuple, Union

from .constants import DEFAULT_FALLBACK_PHASE, DEFAULT_PLAYBACK_INTERVAL
from .errors import PlaybackAlreadyRunningError
from .models import Step, StepStatus, Workflow, WorkflowStatus
from .persistence import WorkflowStore
from .progress import derived_status
from .runs import WorkflowRun

logger = logging.getLogger(__name__)

AdvanceCallback = Callable[[int, Step], Union[None, Awaitable[None]]]
SleepFunc = Callable[[float], Awaitable[Any]]


class PlaybackRun(WorkflowRun):
    """Advance a workflow one step every ``interval`` seconds.

    ``on_advance`` is called with the new index and step after each tick
    that lands on a step, so the presentation layer can bring it into view.
    """

    mode = "playback"

    def __init__(
        self,
        workflow: Workflow,
        phase_order: Optional[Sequence[str]] = None,
        interval: float = DEFAULT_PLAYBACK_INTERVAL,
        on_advance: Optional[AdvanceCallback] = None,
        repository: Optional[WorkflowStore] = None,
        fallback_label: str = DEFAULT_FALLBACK_PHASE,
        sleep: SleepFunc = asyncio.sleep,
    ) -> None:
        if interval <= 0:
            raise ValueError("interval must be positive")
        super().__init__(workflow, phase_order, fallback_label, repository)
        self.interval = interval
        self.on_advance = on_advance
        self._sleep = sleep
        self._task: Optional[asyncio.Task] = None
        self._generation = 0
        self.ticks = 0

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self, restart: bool = False) -> None:
        """Reset to the first step and begin advancing.

        Must be called from a running event loop. Starting while the timer is
        active raises :class:`PlaybackAlreadyRunningError` unless ``restart``
        is set, in which case the previous timer is stopped first.
        """
        if self.running:
            if not restart:
                raise PlaybackAlreadyRunningError(
                    f"Playback of workflow '{self.workflow.id}' is already running; "
                    "reset it or start with restart=True"
                )
            self._stop_timer()

        loop = asyncio.get_running_loop()
        self.tracker.reset()
        self.ticks = 0
        self.workflow.status = WorkflowStatus.ACTIVE
        self.workflow.actual_duration = None
        self._sync_progress()
        self._generation += 1
        self._task = loop.create_task(self._run_timer(self._generation))
        logger.info(
            f"Started playback of workflow {self.workflow.id} "
            f"({self.total_steps} steps, every {self.interval}s)"
        )

    def reset(self) -> None:
        """Stop advancing and return every step and the index to the start."""
        self._stop_timer()
        self.ticks = 0
        self._reset_workflow()
        self._checkpoint_soon()
        logger.info(f"Reset playback of workflow {self.workflow.id}")

    def complete(self) -> None:
        """Jump straight to the finished state without firing any tick."""
        self._stop_timer()
        self._mark_workflow_completed()
        self._checkpoint_soon()
        logger.info(f"Playback of workflow {self.workflow.id} completed immediately")

    complete_immediately = complete

    async def wait(self) -> None:
        """Wait until the current timer stops on its own or is cancelled."""
        task = self._task
        if task is None:
            return
        try:
            await task
        except asyncio.CancelledError:
            if not task.cancelled():
                raise
        await self.flush()

    def step_status(self, index: int) -> StepStatus:
        return derived_status(index, self.current_index, self.running)

    def step_statuses(self) -> List[Tuple[Step, StepStatus]]:
        return [(step, self.step_status(i)) for i, step in enumerate(self.workflow.steps)]

    # ------------------------------------------------------------------
    def _stop_timer(self) -> None:
        self._generation += 1
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None

    async def _run_timer(self, generation: int) -> None:
        while True:
            await self._sleep(self.interval)
            if generation != self._generation:
                return

            index = self.tracker.advance()
            self.ticks += 1
            if self.tracker.is_finished():
                self._mark_workflow_completed()
                logger.info(f"Playback of workflow {self.workflow.id} finished")
                await self._checkpoint()
                return

            self._sync_progress()
            await self._checkpoint()
            await self._notify(index)

    async def _notify(self, index: int) -> None:
        if self.on_advance is None:
            return
        step = self.workflow.steps[index]
        try:
            result = self.on_advance(index, step)
            if inspect.isawaitable(result):
                await result
        except Exception as e:
            logger.error(
                f"Advance callback failed for step {step.id} of workflow "
                f"{self.workflow.id}: {e}"
            )

"""Interactive, step-by-step simulated execution of a workflow."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, Optional, Sequence

from pydantic import BaseModel, Field

from .constants import DEFAULT_FALLBACK_PHASE, DEFAULT_TIME_UNIT, SIMULATED_ERROR_MESSAGE
from .errors import (
    RunFinishedError,
    RunHaltedError,
    StepInFlightError,
    StepNotActiveError,
)
from .execution_log import ExecutionLog, LogEntry
from .models import Step, StepStatus, Workflow, WorkflowStatus, utcnow
from .persistence import WorkflowStore
from .results import generate_step_result, validate_step_input
from .runs import WorkflowRun
from .simulation import OutcomeSource, RandomOutcomes

logger = logging.getLogger(__name__)

SleepFunc = Callable[[float], Awaitable[Any]]


class StepOutcome(BaseModel):
    """Result of submitting input for the active step.

    A simulated failure is reported here with ``success=False``; it is not
    raised.
    """

    step_id: str
    success: bool
    result: Optional[Dict[str, Any]] = None
    error: Optional[str] = None
    duration: Optional[float] = Field(default=None, description="Seconds")
    workflow_completed: bool = False


class InteractiveRun(WorkflowRun):
    """Drive a workflow one user submission at a time.

    Each submission runs the active step for a random simulated duration and
    resolves it to ``completed`` or ``failed``. A failed step halts the run
    until :meth:`reset` is called.
    """

    mode = "interactive"

    def __init__(
        self,
        workflow: Workflow,
        phase_order: Optional[Sequence[str]] = None,
        outcomes: Optional[OutcomeSource] = None,
        time_unit: float = DEFAULT_TIME_UNIT,
        sleep: SleepFunc = asyncio.sleep,
        log: Optional[ExecutionLog] = None,
        repository: Optional[WorkflowStore] = None,
        validate_inputs: bool = True,
        fallback_label: str = DEFAULT_FALLBACK_PHASE,
    ) -> None:
        if time_unit < 0:
            raise ValueError("time_unit must not be negative")
        super().__init__(workflow, phase_order, fallback_label, repository)
        self.outcomes: OutcomeSource = outcomes or RandomOutcomes()
        self.time_unit = time_unit
        self.validate_inputs = validate_inputs
        self.log = log if log is not None else ExecutionLog()
        self.step_inputs: Dict[str, Dict[str, Any]] = {}
        self._sleep = sleep
        self._in_flight = False
        self._halted_step_id: Optional[str] = None
        step = self.active_step
        if step is not None and step.status == StepStatus.FAILED:
            self._halted_step_id = step.id

    # ------------------------------------------------------------------
    @property
    def active_step(self) -> Optional[Step]:
        if self.finished:
            return None
        return self.workflow.steps[self.current_index]

    @property
    def halted(self) -> bool:
        return self._halted_step_id is not None

    @property
    def in_flight(self) -> bool:
        return self._in_flight

    def get_log(self) -> list[LogEntry]:
        return self.log.entries()

    # ------------------------------------------------------------------
    def _check_submission(self, step_id: str, data: Optional[Dict[str, Any]]) -> Step:
        if self._in_flight:
            raise StepInFlightError(
                f"Step '{self.active_step.id}' is still running; wait for it to resolve"
            )
        if self._halted_step_id is not None:
            raise RunHaltedError(
                f"Run halted after step '{self._halted_step_id}' failed; reset to run again"
            )
        step = self.active_step
        if step is None:
            raise RunFinishedError(f"Workflow '{self.workflow.id}' has already completed")
        if step_id != step.id:
            raise StepNotActiveError(step_id, step.id)
        if self.validate_inputs:
            validate_step_input(step, data)
        return step

    async def submit_step_input(
        self, step_id: str, data: Optional[Dict[str, Any]] = None
    ) -> StepOutcome:
        """Run the active step with ``data`` and resolve its outcome."""
        try:
            step = self._check_submission(step_id, data)
        except Exception as e:
            logger.warning(f"Rejected submission for step {step_id}: {e}")
            raise

        self._in_flight = True
        self.step_inputs[step.id] = dict(data or {})
        try:
            self._start_step(step)
            await self._checkpoint()

            units = self.outcomes.duration(step)
            try:
                await self._sleep(units * self.time_unit)
            except asyncio.CancelledError:
                self._fail_step(step, "Execution cancelled")
                raise

            if self.outcomes.succeeds(step):
                outcome = self._complete_step(step, data)
            else:
                outcome = self._fail_step(step, SIMULATED_ERROR_MESSAGE)
            await self._checkpoint()
            return outcome
        finally:
            self._in_flight = False

    def _start_step(self, step: Step) -> None:
        step.mark_running()
        self.log.started(step.display_name, step.id)
        self.workflow.status = WorkflowStatus.ACTIVE
        self.workflow.touch()
        logger.info(
            f"Starting step {step.id} ({self.current_index + 1}/{self.total_steps}) "
            f"of workflow {self.workflow.id}"
        )

    def _complete_step(self, step: Step, data: Optional[Dict[str, Any]]) -> StepOutcome:
        result = generate_step_result(step.category, data, self.outcomes.rng)
        step.mark_completed(result)
        self.log.completed(step.display_name, step.id)

        is_last = self.current_index == self.total_steps - 1
        if is_last:
            self._mark_workflow_completed()
            elapsed = utcnow() - self.workflow.created_at
            self.workflow.actual_duration = max(0, int(elapsed.total_seconds() // 60))
            logger.info(f"Workflow {self.workflow.id} completed successfully")
        else:
            self.tracker.advance()
            self._sync_progress()
        logger.info(f"Completed step {step.id} of workflow {self.workflow.id}")

        return StepOutcome(
            step_id=step.id,
            success=True,
            result=result,
            duration=step.duration,
            workflow_completed=is_last,
        )

    def _fail_step(self, step: Step, error: str) -> StepOutcome:
        step.mark_failed(error)
        self.log.failed(step.display_name, error, step.id)
        self._halted_step_id = step.id
        self.workflow.touch()
        logger.warning(
            f"Step {step.id} of workflow {self.workflow.id} failed: {error}; run halted"
        )
        return StepOutcome(
            step_id=step.id, success=False, error=error, duration=step.duration
        )

    # ------------------------------------------------------------------
    def reset(self) -> None:
        """Restart the run from the first step.

        The execution log is kept; it only ever grows.
        """
        if self._in_flight:
            raise StepInFlightError("Cannot reset while a step is running")
        self._halted_step_id = None
        self.step_inputs.clear()
        self._reset_workflow()
        self._checkpoint_soon()
        logger.info(f"Reset interactive run of workflow {self.workflow.id}")

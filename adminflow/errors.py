"""Exception types raised by the adminflow engine.

Simulated step failures are not exceptions; they are returned as
``StepOutcome`` values. Everything here signals a caller mistake and is
raised before any run state is touched.
"""

from __future__ import annotations

from typing import List, Optional


class AdminflowError(Exception):
    """Base class for adminflow errors."""


class InvalidWorkflowError(AdminflowError, ValueError):
    """Raised when a workflow definition cannot be turned into a runnable workflow."""


class InvalidStepInputError(AdminflowError, ValueError):
    """Raised when submitted step input is missing required fields."""

    def __init__(
        self,
        step_id: str,
        message: str,
        missing: Optional[List[str]] = None,
    ) -> None:
        self.step_id = step_id
        self.missing = missing or []
        super().__init__(f"Invalid input for step '{step_id}': {message}")


class DriverMisuseError(AdminflowError, RuntimeError):
    """Raised when a run driver is called in a state that does not allow it."""


class StepNotActiveError(DriverMisuseError):
    """Input was submitted for a step other than the active one."""

    def __init__(self, step_id: str, active_step_id: Optional[str]) -> None:
        self.step_id = step_id
        self.active_step_id = active_step_id
        super().__init__(
            f"Step '{step_id}' is not the active step (active: {active_step_id!r})"
        )


class StepInFlightError(DriverMisuseError):
    """A step is still running and must resolve before anything else happens."""


class RunHaltedError(DriverMisuseError):
    """The run stopped on a failed step and has to be reset."""


class RunFinishedError(DriverMisuseError):
    """Every step of the run has already completed."""


class PlaybackAlreadyRunningError(DriverMisuseError):
    """Timed playback was started while its timer is still active."""


class DriverConflictError(DriverMisuseError):
    """A second driver tried to claim a workflow that already has an active run."""

"""Core data model for adminflow workflows."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, Field, model_validator


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class StepStatus(str, Enum):
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
    SKIPPED = "skipped"


class WorkflowStatus(str, Enum):
    DRAFT = "draft"
    ACTIVE = "active"
    PAUSED = "paused"
    COMPLETED = "completed"
    FAILED = "failed"


class WorkflowPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class StepCategory(str, Enum):
    """Closed set of step categories.

    A category only selects the synthetic result shape and the input fields
    of a step; it has no execution semantics.
    """

    DATA_INPUT = "data-input"
    AI = "ai"
    API = "api"
    DOCUMENT = "document"
    NOTIFICATION = "notification"
    DECISION = "decision"


class Step(BaseModel):
    """One unit of work within a workflow."""

    id: str
    name: str = ""
    description: str = ""
    category: Optional[StepCategory] = None
    status: StepStatus = StepStatus.PENDING
    phase: Optional[str] = None
    tips: List[str] = Field(default_factory=list)
    # Informational only; nothing schedules on these.
    dependencies: List[str] = Field(default_factory=list)
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    duration: Optional[float] = Field(default=None, description="Seconds")
    result: Optional[Dict[str, Any]] = None
    error: Optional[str] = None
    config: Dict[str, Any] = Field(default_factory=dict)

    @model_validator(mode="after")
    def _check_timing(self) -> "Step":
        if self.end_time is not None:
            if self.start_time is None:
                raise ValueError(f"Step '{self.id}' has an end time but no start time")
            if self.end_time < self.start_time:
                raise ValueError(f"Step '{self.id}' ends before it starts")
        if self.error is not None and self.status != StepStatus.FAILED:
            raise ValueError(
                f"Step '{self.id}' carries an error but has status '{self.status.value}'"
            )
        return self

    @property
    def display_name(self) -> str:
        return self.name or self.id

    def mark_running(self, now: Optional[datetime] = None) -> None:
        self.status = StepStatus.RUNNING
        self.start_time = now or utcnow()
        self.end_time = None
        self.duration = None
        self.result = None
        self.error = None

    def _finish(self, now: Optional[datetime]) -> None:
        if self.start_time is None:
            raise ValueError(f"Step '{self.id}' was never started")
        end = now or utcnow()
        if end < self.start_time:
            end = self.start_time
        self.end_time = end
        self.duration = (end - self.start_time).total_seconds()

    def mark_completed(
        self, result: Optional[Dict[str, Any]] = None, now: Optional[datetime] = None
    ) -> None:
        self._finish(now)
        self.status = StepStatus.COMPLETED
        self.result = result or {}
        self.error = None

    def mark_failed(self, error: str, now: Optional[datetime] = None) -> None:
        self._finish(now)
        self.status = StepStatus.FAILED
        self.error = error
        self.result = None

    def reset(self) -> None:
        """Return the step to ``pending`` and drop any execution data."""
        self.status = StepStatus.PENDING
        self.start_time = None
        self.end_time = None
        self.duration = None
        self.result = None
        self.error = None


class Workflow(BaseModel):
    """Ordered, non-empty sequence of steps plus aggregate metadata.

    ``progress`` is stored for display only. It is always recomputed from
    the current index of the run driving the workflow.
    """

    id: str = Field(default_factory=lambda: f"wf-{uuid.uuid4().hex[:12]}")
    name: str
    description: str = ""
    status: WorkflowStatus = WorkflowStatus.DRAFT
    priority: WorkflowPriority = WorkflowPriority.MEDIUM
    steps: List[Step]
    phases: List[str] = Field(default_factory=list)
    progress: float = Field(default=0.0, ge=0.0, le=100.0)
    triggers: List[str] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
    estimated_duration: int = Field(default=0, description="Minutes")
    actual_duration: Optional[int] = Field(default=None, description="Minutes")

    @model_validator(mode="after")
    def _check_shape(self) -> "Workflow":
        if not self.steps:
            raise ValueError(f"Workflow '{self.name}' must contain at least one step")

        seen: set[str] = set()
        for step in self.steps:
            if step.id in seen:
                raise ValueError(f"Duplicate step id '{step.id}' in workflow '{self.name}'")
            seen.add(step.id)

        if self.phases:
            declared = set(self.phases)
            for step in self.steps:
                if step.phase not in declared:
                    raise ValueError(
                        f"Step '{step.id}' references unknown phase {step.phase!r}; "
                        f"declared phases: {', '.join(self.phases)}"
                    )
        return self

    @property
    def total_steps(self) -> int:
        return len(self.steps)

    def step_index(self, step_id: str) -> int:
        """Return the workflow position of ``step_id``."""
        for index, step in enumerate(self.steps):
            if step.id == step_id:
                return index
        raise KeyError(step_id)

    def get_step(self, step_id: str) -> Optional[Step]:
        for step in self.steps:
            if step.id == step_id:
                return step
        return None

    def running_steps(self) -> List[Step]:
        return [s for s in self.steps if s.status == StepStatus.RUNNING]

    def touch(self) -> None:
        self.updated_at = utcnow()

    def to_json(self) -> str:
        """Serialize workflow to JSON."""
        return self.model_dump_json()

    @classmethod
    def from_json(cls, data: str) -> "Workflow":
        """Deserialize workflow from JSON."""
        return cls.model_validate_json(data)


class PhaseBucket(BaseModel):
    """Steps sharing a phase label, in workflow order.

    Derived from a workflow on demand and never persisted.
    """

    name: str
    position: int
    entries: List[Tuple[int, Step]] = Field(default_factory=list)

    @property
    def steps(self) -> List[Step]:
        return [step for _, step in self.entries]

    @property
    def indices(self) -> List[int]:
        return [index for index, _ in self.entries]

    def __len__(self) -> int:
        return len(self.entries)

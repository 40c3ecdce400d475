"""Workflow builder for adminflow."""

from __future__ import annotations

import re
import uuid
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field

from .constants import DEFAULT_STEP_ESTIMATE_MINUTES
from .errors import InvalidWorkflowError
from .models import (
    Step,
    StepCategory,
    StepStatus,
    Workflow,
    WorkflowPriority,
    WorkflowStatus,
)
from .runs import is_claimed


class StepTemplate(BaseModel):
    """Preset used when adding a hand-authored step of a given category."""

    category: StepCategory
    name: str
    description: str
    icon: str
    fields: List[str] = Field(default_factory=list)


STEP_TEMPLATES: Dict[StepCategory, StepTemplate] = {
    t.category: t
    for t in [
        StepTemplate(
            category=StepCategory.DATA_INPUT,
            name="Collect Customer Information",
            description="Gather customer details from form or email",
            icon="📝",
            fields=["Customer Name", "Email", "Phone", "Requirements"],
        ),
        StepTemplate(
            category=StepCategory.AI,
            name="AI Document Analysis",
            description="Extract information from uploaded documents",
            icon="🤖",
            fields=["Document Type", "Confidence Level", "Extracted Data"],
        ),
        StepTemplate(
            category=StepCategory.API,
            name="Create CRM Record",
            description="Add customer to CRM system",
            icon="🔗",
            fields=["CRM System", "Record Type", "Data Mapping"],
        ),
        StepTemplate(
            category=StepCategory.DOCUMENT,
            name="Generate Contract",
            description="Create personalized contract document",
            icon="📄",
            fields=["Template", "Variables", "Output Format"],
        ),
        StepTemplate(
            category=StepCategory.NOTIFICATION,
            name="Send Notification",
            description="Email or SMS notification to customer",
            icon="📧",
            fields=["Recipient", "Message Template", "Channel"],
        ),
        StepTemplate(
            category=StepCategory.DECISION,
            name="Approval Decision",
            description="Automated or manual approval step",
            icon="✅",
            fields=["Decision Criteria", "Approval Rules", "Fallback Action"],
        ),
    ]
}


class TaskAnalysis(BaseModel):
    """Output of the external task-analysis service for one task.

    Only attached to generated steps as payload; nothing here is reasoned
    over by the engine.
    """

    task_name: str
    description: str = ""
    category: Optional[StepCategory] = StepCategory.API
    explanation: str = ""
    hours_per_week: float = 0.0
    value_per_year: str = ""
    setup_time: str = ""
    software: List[str] = Field(default_factory=list)
    next_actions: List[str] = Field(default_factory=list)

    @property
    def annual_savings(self) -> int:
        return _leading_int(self.value_per_year)

    @property
    def setup_minutes(self) -> int:
        return _leading_int(self.setup_time)


def _leading_int(value: str) -> int:
    digits = re.sub(r"[^0-9]", "", value or "")
    return int(digits) if digits else 0


def _new_step_id() -> str:
    return f"step-{uuid.uuid4().hex[:8]}"


def step_from_task(analysis: TaskAnalysis, phase: Optional[str] = None) -> Step:
    return Step(
        id=_new_step_id(),
        name=analysis.task_name,
        description=analysis.description,
        category=analysis.category,
        phase=phase,
        config={
            "icon": "🤖",
            "analysis": analysis.model_dump(),
            "trigger": "Manual trigger",
            "estimated_time": analysis.setup_time or f"{DEFAULT_STEP_ESTIMATE_MINUTES} minutes",
        },
    )


class WorkflowBuilder:
    """Collects steps before a workflow is created.

    Edits happen here, before any run exists; the built workflow is handed
    to a run driver untouched.
    """

    def __init__(self) -> None:
        self._steps: List[Step] = []
        self._phases: List[str] = []
        self._estimates: Dict[str, int] = {}
        self._tags: List[str] = []

    @property
    def steps(self) -> List[Step]:
        return list(self._steps)

    @property
    def tags(self) -> List[str]:
        return list(self._tags)

    @property
    def estimated_minutes(self) -> int:
        return sum(self._estimates.values())

    def declare_phases(self, phases: List[str]) -> "WorkflowBuilder":
        self._phases = list(phases)
        return self

    def add_step(
        self,
        category: Optional[StepCategory] = None,
        name: Optional[str] = None,
        description: Optional[str] = None,
        phase: Optional[str] = None,
        step_id: Optional[str] = None,
        tips: Optional[List[str]] = None,
        dependencies: Optional[List[str]] = None,
        config: Optional[Dict[str, Any]] = None,
    ) -> Step:
        """Append a step, filling blanks from the category template."""
        template = STEP_TEMPLATES.get(category) if category is not None else None
        step_config: Dict[str, Any] = {}
        if template is not None:
            step_config = {
                "fields": list(template.fields),
                "description": template.description,
                "icon": template.icon,
            }
        step_config.update(config or {})

        step = Step(
            id=step_id or _new_step_id(),
            name=name or (template.name if template else ""),
            description=description or (template.description if template else ""),
            category=category,
            phase=phase,
            tips=tips or [],
            dependencies=dependencies or [],
            config=step_config,
        )
        if any(s.id == step.id for s in self._steps):
            raise InvalidWorkflowError(f"Duplicate step id '{step.id}'")
        self._steps.append(step)
        self._estimates[step.id] = DEFAULT_STEP_ESTIMATE_MINUTES
        return step

    def add_task(self, analysis: TaskAnalysis, phase: Optional[str] = None) -> Step:
        """Append a step generated from an analyzed task."""
        step = step_from_task(analysis, phase)
        self._steps.append(step)
        self._estimates[step.id] = analysis.setup_minutes or DEFAULT_STEP_ESTIMATE_MINUTES
        for software in analysis.software:
            tag = software.lower()
            if tag not in self._tags:
                self._tags.append(tag)
        return step

    def remove_step(self, step_id: str) -> None:
        before = len(self._steps)
        self._steps = [s for s in self._steps if s.id != step_id]
        if len(self._steps) == before:
            raise KeyError(step_id)
        self._estimates.pop(step_id, None)

    def move_step(self, step_id: str, direction: Literal["up", "down"]) -> bool:
        """Swap a step with its neighbour. Returns ``False`` at the edges."""
        index = next((i for i, s in enumerate(self._steps) if s.id == step_id), -1)
        if index == -1:
            raise KeyError(step_id)
        target = index - 1 if direction == "up" else index + 1
        if target < 0 or target >= len(self._steps):
            return False
        self._steps[index], self._steps[target] = self._steps[target], self._steps[index]
        return True

    def build(
        self,
        name: str,
        description: str = "",
        priority: WorkflowPriority = WorkflowPriority.MEDIUM,
        triggers: Optional[List[str]] = None,
        tags: Optional[List[str]] = None,
        workflow_id: Optional[str] = None,
    ) -> Workflow:
        """Create a ``draft`` workflow with every step ``pending``."""
        if not name.strip():
            raise InvalidWorkflowError("Workflow name must not be empty")
        if not self._steps:
            raise InvalidWorkflowError(f"Workflow '{name}' must contain at least one step")

        steps = [s.model_copy(deep=True) for s in self._steps]
        for step in steps:
            step.reset()

        data: Dict[str, Any] = dict(
            name=name,
            description=description,
            status=WorkflowStatus.DRAFT,
            priority=priority,
            steps=steps,
            phases=list(self._phases),
            progress=0.0,
            triggers=triggers if triggers is not None else ["Manual"],
            tags=tags if tags is not None else (self._tags or ["custom", "user-created"]),
            estimated_duration=self.estimated_minutes,
        )
        if workflow_id:
            data["id"] = workflow_id
        try:
            return Workflow(**data)
        except ValueError as e:
            raise InvalidWorkflowError(str(e)) from e


def build_workflow_from_tasks(
    name: str, analyses: List[TaskAnalysis], phase: Optional[str] = None
) -> Workflow:
    """Create a workflow with one step per analyzed task."""
    builder = WorkflowBuilder()
    for analysis in analyses:
        builder.add_task(analysis, phase)
    task_names = ", ".join(a.task_name for a in analyses)
    return builder.build(
        name,
        description=f"Automation workflow containing: {task_names}",
        triggers=["manual"],
        tags=builder.tags + ["automation"],
    )


def add_task_to_workflow(
    workflow: Workflow, analysis: TaskAnalysis, phase: Optional[str] = None
) -> Step:
    """Append a task-derived step to an existing, not yet executed workflow."""
    if is_claimed(workflow):
        raise InvalidWorkflowError(
            f"Workflow '{workflow.id}' is held by an active run; release it before "
            "adding steps"
        )
    if workflow.status != WorkflowStatus.DRAFT or any(
        s.status != StepStatus.PENDING for s in workflow.steps
    ):
        raise InvalidWorkflowError(
            f"Workflow '{workflow.id}' has already been executed; steps can only "
            "be added before a run starts"
        )
    if workflow.phases and phase not in workflow.phases:
        raise InvalidWorkflowError(
            f"Unknown phase {phase!r} for workflow '{workflow.id}'"
        )
    step = step_from_task(analysis, phase)
    workflow.steps.append(step)
    workflow.description = (
        f"{workflow.description}, {analysis.task_name}"
        if workflow.description
        else analysis.task_name
    )
    workflow.estimated_duration += analysis.setup_minutes or DEFAULT_STEP_ESTIMATE_MINUTES
    workflow.touch()
    return step

"""In-memory implementation of the workflow store."""

from __future__ import annotations

from typing import Dict

from ..models import Workflow
from .repository import WorkflowStore


class InMemoryWorkflowStore(WorkflowStore):
    """Store workflows in local memory.

    Useful for tests or when no database is configured. Data is not
    persisted across process restarts. Copies are stored so later in-place
    mutation by a run does not leak into the stored checkpoint.
    """

    def __init__(self) -> None:
        self._workflows: Dict[str, Workflow] = {}

    async def save(self, workflow: Workflow) -> None:
        self._workflows[workflow.id] = workflow.model_copy(deep=True)

    async def get(self, workflow_id: str) -> Workflow | None:
        wf = self._workflows.get(workflow_id)
        return wf.model_copy(deep=True) if wf else None

    async def load_all(self) -> Dict[str, Workflow]:
        return {wf_id: wf.model_copy(deep=True) for wf_id, wf in self._workflows.items()}

    async def delete(self, workflow_id: str) -> bool:
        return self._workflows.pop(workflow_id, None) is not None

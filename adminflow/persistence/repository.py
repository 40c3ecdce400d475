"""Store abstraction for workflow persistence."""

from __future__ import annotations

from typing import Dict, Protocol

from ..models import Workflow


class WorkflowStore(Protocol):
    """Protocol for workflow persistence backends.

    Workflows are keyed by id. Saving overwrites the previous copy; there
    are no transactions or migrations.
    """

    async def save(self, workflow: Workflow) -> None:
        """Persist the current state of ``workflow``."""

    async def get(self, workflow_id: str) -> Workflow | None:
        """Retrieve a workflow by id."""

    async def load_all(self) -> Dict[str, Workflow]:
        """Return every stored workflow keyed by id."""

    async def delete(self, workflow_id: str) -> bool:
        """Remove a workflow, returning ``True`` if it existed."""

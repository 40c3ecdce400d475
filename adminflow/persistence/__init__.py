"""Persistence layer for adminflow workflows."""

from __future__ import annotations

from typing import Optional

from ..config import AdminflowConfig, load_config
from .inmemory import InMemoryWorkflowStore
from .repository import WorkflowStore
from .sqlite import SQLiteWorkflowStore

_store_instance: WorkflowStore | None = None


def get_store(
    database_url: Optional[str] = None, config: Optional[AdminflowConfig] = None
) -> WorkflowStore:
    """Factory function to obtain a workflow store.

    The backend is selected by ``database_url`` when given, else by the
    configuration, where :func:`load_config` has already applied the
    ``ADMINFLOW_DATABASE_URL`` / ``DATABASE_URL`` overrides. Without a
    database URL an in-memory store is returned.
    """

    global _store_instance
    if _store_instance is not None and database_url is None and config is None:
        return _store_instance

    config = config or load_config()
    database_url = database_url or config.database_url

    if not database_url:
        _store_instance = InMemoryWorkflowStore()
        return _store_instance

    if database_url.startswith("sqlite://"):
        path = database_url.replace("sqlite://", "", 1)
        _store_instance = SQLiteWorkflowStore(path)
    else:
        raise ValueError(f"Unsupported database backend: {database_url}")

    return _store_instance


__all__ = [
    "WorkflowStore",
    "SQLiteWorkflowStore",
    "InMemoryWorkflowStore",
    "get_store",
]

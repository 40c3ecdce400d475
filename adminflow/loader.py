"""Load workflow definitions from YAML or JSON files."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Tuple

import yaml
from pydantic import ValidationError

from .errors import InvalidWorkflowError
from .models import Step, StepStatus, Workflow

logger = logging.getLogger(__name__)

DEMO_WORKFLOW_PATH = Path(__file__).parent / "data" / "corporate_event.yaml"


def _read_definition(path: Path) -> Dict[str, Any]:
    text = path.read_text(encoding="utf-8")
    if path.suffix.lower() == ".json":
        data = json.loads(text)
    else:
        data = yaml.safe_load(text)
    if not isinstance(data, dict):
        raise InvalidWorkflowError(f"{path}: expected a mapping at the top level")
    return data


def parse_workflow_definition(
    data: Dict[str, Any], strict_phases: bool = True
) -> Tuple[Workflow, List[str]]:
    """Build a fresh workflow and its phase order from a definition mapping.

    With ``strict_phases`` every step must use a declared phase. Otherwise
    unknown phases are accepted and end up in the fallback bucket.
    """
    meta = dict(data.get("workflow") or {})
    phase_order = list(data.get("phases") or [])
    raw_steps = data.get("steps") or []
    if not raw_steps:
        raise InvalidWorkflowError(
            f"Workflow '{meta.get('name', '?')}' must contain at least one step"
        )

    steps: List[Step] = []
    for raw in raw_steps:
        status = raw.get("status", StepStatus.PENDING.value)
        if status != StepStatus.PENDING.value:
            raise InvalidWorkflowError(
                f"Step '{raw.get('id')}' must start as 'pending', not '{status}'"
            )
        try:
            steps.append(Step(**raw))
        except ValidationError as e:
            raise InvalidWorkflowError(f"Invalid step '{raw.get('id')}': {e}") from e

    meta.setdefault("name", "Untitled workflow")
    try:
        workflow = Workflow(
            **meta, steps=steps, phases=phase_order if strict_phases else []
        )
    except ValidationError as e:
        raise InvalidWorkflowError(str(e)) from e
    return workflow, phase_order


def load_workflow_file(
    path: str | Path, strict_phases: bool = True
) -> Tuple[Workflow, List[str]]:
    """Load a workflow definition file and return ``(workflow, phase_order)``."""
    path = Path(path)
    workflow, phase_order = parse_workflow_definition(
        _read_definition(path), strict_phases=strict_phases
    )
    logger.info(
        f"Loaded workflow {workflow.id} with {workflow.total_steps} steps from {path}"
    )
    return workflow, phase_order


def load_demo_workflow() -> Tuple[Workflow, List[str]]:
    """Load the bundled corporate event workflow."""
    return load_workflow_file(DEMO_WORKFLOW_PATH)

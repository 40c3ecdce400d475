"""adminflow: step-by-step playback and simulated execution of automation workflows."""

from .builder import TaskAnalysis, WorkflowBuilder, build_workflow_from_tasks
from .execute import InteractiveRun, StepOutcome
from .execution_log import ExecutionLog, LogEntry
from .models import (
    PhaseBucket,
    Step,
    StepCategory,
    StepStatus,
    Workflow,
    WorkflowStatus,
)
from .persistence import get_store
from .phases import group_phases
from .playback import PlaybackRun
from .progress import ProgressTracker, overall_progress, phase_progress
from .simulation import RandomOutcomes

__version__ = "0.1.0"
__all__ = [
    "ExecutionLog",
    "InteractiveRun",
    "LogEntry",
    "PhaseBucket",
    "PlaybackRun",
    "ProgressTracker",
    "RandomOutcomes",
    "Step",
    "StepCategory",
    "StepOutcome",
    "StepStatus",
    "TaskAnalysis",
    "Workflow",
    "WorkflowBuilder",
    "WorkflowStatus",
    "build_workflow_from_tasks",
    "get_store",
    "group_phases",
    "overall_progress",
    "phase_progress",
]

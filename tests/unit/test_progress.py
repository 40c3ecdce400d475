"""Progress calculator tests."""

import pytest

from adminflow.models import Step, StepStatus
from adminflow.progress import (
    ProgressTracker,
    derived_status,
    overall_progress,
    phase_progress,
)


def _steps(*phases):
    return [Step(id=f"s{i}", name=f"S{i}", phase=p) for i, p in enumerate(phases)]


def test_three_step_scenario_at_index_one():
    steps = [
        Step(id="a", name="A", phase="A"),
        Step(id="b", name="B", phase="B"),
        Step(id="c", name="C", phase="B"),
    ]

    assert phase_progress(steps, 1, "A") == 100
    assert phase_progress(steps, 1, "B") == 0
    assert round(overall_progress(steps, 1)) == 33


def test_step_at_current_index_is_not_complete():
    steps = _steps("A", "A")
    assert phase_progress(steps, 0, "A") == 0
    assert phase_progress(steps, 1, "A") == 50


def test_phase_without_steps_reports_zero():
    steps = _steps("A")
    assert phase_progress(steps, 1, "Nope") == 0.0


@pytest.mark.parametrize("current_index", [3, 4, 10])
def test_finished_run_is_complete_everywhere(current_index):
    steps = _steps("A", "B", "B")
    assert overall_progress(steps, current_index) == 100
    assert phase_progress(steps, current_index, "A") == 100
    assert phase_progress(steps, current_index, "B") == 100


def test_overall_is_100_only_at_the_end():
    steps = _steps("A", "B", "C", "D")
    for index in range(len(steps)):
        assert overall_progress(steps, index) < 100
    assert overall_progress(steps, len(steps)) == 100


def test_overall_is_clamped():
    steps = _steps("A", "B")
    assert overall_progress(steps, -1) == 0
    assert overall_progress(steps, 99) == 100


def test_phase_progress_is_monotonic():
    steps = _steps("A", "B", "A", "C", "B", "A")
    for phase in ("A", "B", "C"):
        values = [phase_progress(steps, i, phase) for i in range(len(steps) + 1)]
        assert values == sorted(values)
        assert values[-1] == 100


def test_phase_reaches_100_once_last_step_passed():
    steps = _steps("A", "A", "B")
    assert phase_progress(steps, 1, "A") == 50
    assert phase_progress(steps, 2, "A") == 100


def test_derived_status():
    assert derived_status(0, 2, running=True) == StepStatus.COMPLETED
    assert derived_status(2, 2, running=True) == StepStatus.RUNNING
    assert derived_status(2, 2, running=False) == StepStatus.PENDING
    assert derived_status(3, 2, running=True) == StepStatus.PENDING


def test_tracker_advances_and_resets():
    tracker = ProgressTracker(_steps("A", "B", "B"), ["A", "B"])

    assert tracker.current_index == 0
    assert tracker.active_phase() == "A"
    tracker.advance()
    assert tracker.get_phase_progress("A") == 100
    assert tracker.get_phase_progress("B") == 0
    assert tracker.active_phase() == "B"

    tracker.advance()
    tracker.advance()
    tracker.advance()
    assert tracker.current_index == 3
    assert tracker.is_finished()
    assert tracker.phase_summary() == {"A": 100, "B": 100}
    assert tracker.active_phase() is None

    tracker.reset()
    assert tracker.current_index == 0
    assert tracker.get_overall_progress() == 0
    assert tracker.phase_summary() == {"A": 0, "B": 0}


def test_tracker_uses_first_appearance_order_without_phase_order():
    tracker = ProgressTracker(_steps("Late", "Early", "Late"))
    assert tracker.phase_order == ["Late", "Early"]
    assert list(tracker.phase_summary()) == ["Late", "Early"]


def test_tracker_reports_fallback_bucket():
    tracker = ProgressTracker(_steps("A", "Unknown"), ["A"], fallback_label="Other")
    tracker.finish()
    assert tracker.get_phase_progress("Other") == 100
    assert tracker.get_phase_progress("Unknown") == 0


def test_module_and_tracker_agree_on_fallback_bucket():
    steps = _steps("A", "Unknown", None, "A")
    tracker = ProgressTracker(steps, ["A"])

    for index in range(len(steps) + 1):
        tracker.reset()
        for _ in range(index):
            tracker.advance()
        for name in ("A", "Other"):
            assert phase_progress(steps, index, name, ["A"]) == tracker.get_phase_progress(
                name
            )

    assert phase_progress(steps, 3, "Other", ["A"]) == 100
    assert phase_progress(steps, 2, "Other", ["A"]) == 50


def test_phase_progress_counts_steps_without_phase_as_fallback():
    steps = _steps("A", None)
    assert phase_progress(steps, 2, "Other") == 100
    assert ProgressTracker(steps).get_phase_progress("Other") == 100

import pytest

from adminflow.builder import (
    STEP_TEMPLATES,
    TaskAnalysis,
    WorkflowBuilder,
    add_task_to_workflow,
    build_workflow_from_tasks,
)
from adminflow.errors import InvalidWorkflowError
from adminflow.execute import InteractiveRun
from adminflow.models import StepCategory, StepStatus, WorkflowStatus


def _analysis(name: str, **kwargs) -> TaskAnalysis:
    return TaskAnalysis(task_name=name, description=f"{name} by hand", **kwargs)


def test_template_fills_blank_fields():
    builder = WorkflowBuilder().declare_phases(["Intake"])
    step = builder.add_step(StepCategory.AI, phase="Intake")

    template = STEP_TEMPLATES[StepCategory.AI]
    assert step.name == template.name
    assert step.description == template.description
    assert step.config["fields"] == template.fields

    wf = builder.build("Docs")
    assert wf.status == WorkflowStatus.DRAFT
    assert wf.progress == 0
    assert wf.phases == ["Intake"]
    assert wf.triggers == ["Manual"]
    assert wf.tags == ["custom", "user-created"]
    assert wf.estimated_duration == 5
    assert all(s.status == StepStatus.PENDING for s in wf.steps)


def test_build_copies_steps():
    builder = WorkflowBuilder()
    builder.add_step(name="Only", step_id="only")
    first = builder.build("One")
    second = builder.build("Two")

    first.steps[0].mark_running()
    assert second.steps[0].status == StepStatus.PENDING
    assert builder.steps[0].status == StepStatus.PENDING


def test_build_rejects_empty_and_unnamed():
    with pytest.raises(InvalidWorkflowError):
        WorkflowBuilder().build("Empty")

    builder = WorkflowBuilder()
    builder.add_step(name="x")
    with pytest.raises(InvalidWorkflowError):
        builder.build("   ")


def test_build_rejects_undeclared_phase():
    builder = WorkflowBuilder().declare_phases(["Intake"])
    builder.add_step(name="x", phase="Elsewhere")
    with pytest.raises(InvalidWorkflowError, match="unknown phase"):
        builder.build("Bad phases")


def test_duplicate_step_id_is_rejected():
    builder = WorkflowBuilder()
    builder.add_step(name="a", step_id="same")
    with pytest.raises(InvalidWorkflowError):
        builder.add_step(name="b", step_id="same")


def test_move_and_remove_steps():
    builder = WorkflowBuilder()
    for step_id in ("a", "b", "c"):
        builder.add_step(name=step_id, step_id=step_id)

    assert builder.move_step("c", "up") is True
    assert [s.id for s in builder.steps] == ["a", "c", "b"]
    assert builder.move_step("a", "up") is False
    assert builder.move_step("b", "down") is False

    builder.remove_step("c")
    assert [s.id for s in builder.steps] == ["a", "b"]
    with pytest.raises(KeyError):
        builder.remove_step("c")
    with pytest.raises(KeyError):
        builder.move_step("c", "down")


def test_workflow_from_analyzed_tasks():
    analyses = [
        _analysis(
            "Invoice entry",
            value_per_year="£2,400",
            setup_time="30 minutes",
            software=["Xero", "Gmail"],
        ),
        _analysis("Lead follow-up", category=StepCategory.NOTIFICATION, software=["Gmail"]),
    ]
    assert analyses[0].annual_savings == 2400
    assert analyses[0].setup_minutes == 30

    wf = build_workflow_from_tasks("Office automation", analyses)

    assert [s.name for s in wf.steps] == ["Invoice entry", "Lead follow-up"]
    assert wf.steps[0].category == StepCategory.API
    assert wf.steps[1].category == StepCategory.NOTIFICATION
    assert wf.steps[0].config["analysis"]["task_name"] == "Invoice entry"
    assert wf.description == "Automation workflow containing: Invoice entry, Lead follow-up"
    assert wf.triggers == ["manual"]
    assert wf.tags == ["xero", "gmail", "automation"]
    assert wf.estimated_duration == 35


def test_add_task_to_fresh_workflow():
    wf = build_workflow_from_tasks("Office automation", [_analysis("First")])
    before = wf.estimated_duration

    step = add_task_to_workflow(wf, _analysis("Second", setup_time="10 minutes"))

    assert wf.steps[-1] is step
    assert wf.estimated_duration == before + 10
    assert wf.description.endswith(", Second")


def test_add_task_after_run_started_is_rejected():
    wf = build_workflow_from_tasks("Office automation", [_analysis("First")])
    wf.steps[0].mark_running()
    with pytest.raises(InvalidWorkflowError):
        add_task_to_workflow(wf, _analysis("Late"))


def test_add_task_requires_declared_phase():
    builder = WorkflowBuilder().declare_phases(["Intake"])
    builder.add_step(name="x", phase="Intake")
    wf = builder.build("Phased")
    with pytest.raises(InvalidWorkflowError):
        add_task_to_workflow(wf, _analysis("Late"), phase="Other")
    step = add_task_to_workflow(wf, _analysis("On time"), phase="Intake")
    assert step.phase == "Intake"


def test_removing_a_step_drops_its_estimate():
    builder = WorkflowBuilder()
    builder.add_step(name="a", step_id="a")
    builder.add_task(_analysis("Slow task", setup_time="45 minutes"))
    builder.add_step(name="c", step_id="c")
    assert builder.estimated_minutes == 55

    builder.remove_step("a")
    assert builder.estimated_minutes == 50
    assert builder.build("Trimmed").estimated_duration == 50


def test_add_task_rejected_while_a_run_holds_the_workflow():
    wf = build_workflow_from_tasks("Office automation", [_analysis("First")])
    run = InteractiveRun(wf)

    with pytest.raises(InvalidWorkflowError, match="active run"):
        add_task_to_workflow(wf, _analysis("Second"))
    assert wf.total_steps == 1
    assert run.total_steps == 1

    run.release()
    add_task_to_workflow(wf, _analysis("Second"))
    assert wf.total_steps == 2

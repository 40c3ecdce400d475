import asyncio

import pytest
from typer.testing import CliRunner

import adminflow.persistence as persistence
from adminflow.cli import app
from adminflow.models import WorkflowStatus
from adminflow.persistence import InMemoryWorkflowStore

SMALL_WORKFLOW = """
workflow:
  id: small
  name: Small workflow
phases: [Intake, Review]
steps:
  - id: a
    name: Collect
    phase: Intake
  - id: b
    name: Approve
    phase: Review
"""


def _setup_store() -> InMemoryWorkflowStore:
    store = InMemoryWorkflowStore()
    persistence._store_instance = store
    return store


@pytest.fixture
def definition(tmp_path):
    path = tmp_path / "small.yaml"
    path.write_text(SMALL_WORKFLOW)
    return path


@pytest.fixture
def config_file(tmp_path, monkeypatch):
    def _write(success_rate: float):
        path = tmp_path / "config.yaml"
        path.write_text(
            f"simulation:\n  success_rate: {success_rate}\n  time_unit: 0\n"
        )
        monkeypatch.setenv("ADMINFLOW_CONFIG", str(path))

    return _write


def test_list_without_workflows():
    _setup_store()
    result = CliRunner().invoke(app, ["workflow", "list"])
    assert result.exit_code == 0, result.output
    assert "No workflows found" in result.output


def test_import_list_and_show(definition):
    store = _setup_store()
    runner = CliRunner()

    result = runner.invoke(app, ["workflow", "import", str(definition)])
    assert result.exit_code == 0, result.output
    assert "Imported workflow small (2 steps)" in result.output
    assert asyncio.run(store.get("small")) is not None

    result = runner.invoke(app, ["workflow", "list"])
    assert result.exit_code == 0, result.output
    assert "small\tSmall workflow\tdraft\t0%" in result.output

    result = runner.invoke(app, ["workflow", "show", "small"])
    assert result.exit_code == 0, result.output
    assert "- Collect (Intake): pending" in result.output

    missing = runner.invoke(app, ["workflow", "show", "missing-id"])
    assert missing.exit_code == 1
    assert "Workflow not found" in missing.output


def test_import_rejects_invalid_definition(tmp_path):
    _setup_store()
    path = tmp_path / "bad.yaml"
    path.write_text("workflow:\n  name: Empty\nsteps: []\n")

    result = CliRunner().invoke(app, ["workflow", "import", str(path)])
    assert result.exit_code == 1
    assert "Could not import" in result.output


def test_play_stored_workflow_to_completion(definition):
    store = _setup_store()
    runner = CliRunner()
    result = runner.invoke(app, ["workflow", "import", str(definition)])
    assert result.exit_code == 0, result.output

    result = runner.invoke(app, ["workflow", "play", "small", "--complete"])
    assert result.exit_code == 0, result.output
    assert "Overall: 100%" in result.output

    stored = asyncio.run(store.get("small"))
    assert stored.status == WorkflowStatus.COMPLETED
    assert stored.progress == 100


def test_play_file_on_timer(definition):
    _setup_store()
    result = CliRunner().invoke(
        app, ["workflow", "play", str(definition), "--interval", "0.01"]
    )
    assert result.exit_code == 0, result.output
    assert "[1/2] Collect" in result.output
    assert "[2/2] Approve" in result.output
    assert "Intake: 100%" in result.output
    assert "Review: 100%" in result.output


def test_play_unknown_source():
    _setup_store()
    result = CliRunner().invoke(app, ["workflow", "play", "nowhere"])
    assert result.exit_code == 1
    assert "Workflow not found: nowhere" in result.output


def test_simulate_successful_run(definition, config_file):
    config_file(1.0)
    _setup_store()

    result = CliRunner().invoke(app, ["workflow", "simulate", str(definition)])
    assert result.exit_code == 0, result.output
    assert "Starting step: Collect" in result.output
    assert "Completed: Approve" in result.output
    assert "Workflow small: completed (100%)" in result.output


def test_simulate_failing_run_exits_with_two(definition, config_file):
    config_file(0.0)
    _setup_store()

    result = CliRunner().invoke(app, ["workflow", "simulate", str(definition)])
    assert result.exit_code == 2
    assert "Failed: Collect - Simulated execution error" in result.output
    assert "Approve" not in result.output


def test_simulate_demo_workflow(config_file):
    config_file(1.0)
    _setup_store()

    result = CliRunner().invoke(app, ["workflow", "simulate", "--seed", "3"])
    assert result.exit_code == 0, result.output
    assert "Starting step: Email Trigger Activated" in result.output
    assert "Workflow corporate-event: completed (100%)" in result.output

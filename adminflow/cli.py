"""Command line interface for previewing and simulating adminflow workflows."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import List, Optional, Tuple

import typer

from adminflow import InteractiveRun, PlaybackRun, RandomOutcomes, get_store
from adminflow.config import AdminflowConfig, load_config
from adminflow.errors import InvalidWorkflowError
from adminflow.execution_log import ExecutionLog
from adminflow.loader import load_demo_workflow, load_workflow_file
from adminflow.models import Step, StepStatus, Workflow, WorkflowStatus
from adminflow.persistence import WorkflowStore
from adminflow.results import sample_input

app = typer.Typer(help="CLI for adminflow workflows")

workflow_app = typer.Typer(help="Commands for managing workflows")
app.add_typer(workflow_app, name="workflow")


@app.callback()
def main() -> None:
    """adminflow CLI entry point."""
    pass


def _resolve_workflow(
    source: Optional[str], store: WorkflowStore, config: AdminflowConfig
) -> Tuple[Workflow, List[str]]:
    """Load ``source`` as a file path, a stored workflow id, or the demo."""
    if source is None:
        return load_demo_workflow()
    path = Path(source)
    if path.exists():
        return load_workflow_file(path)
    workflow = asyncio.run(store.get(source))
    if workflow is None:
        typer.secho(f"Workflow not found: {source}", fg=typer.colors.RED)
        raise typer.Exit(code=1)
    return workflow, workflow.phases or config.phase_order


def _needs_reset(workflow: Workflow) -> bool:
    return workflow.status != WorkflowStatus.DRAFT or any(
        step.status != StepStatus.PENDING for step in workflow.steps
    )


@workflow_app.command("list")
def workflow_list() -> None:
    """
    List stored workflows with their status and progress.

    Example:
        adminflow workflow list
        # Output: corporate-event    Corporate Event Automation    draft    0%
    """
    store = get_store()
    workflows = asyncio.run(store.load_all())
    if not workflows:
        typer.echo("No workflows found")
        return
    for wf in workflows.values():
        typer.echo(f"{wf.id}\t{wf.name}\t{wf.status.value}\t{round(wf.progress)}%")


@workflow_app.command("show")
def workflow_show(workflow_id: str) -> None:
    """
    Show a stored workflow with the status of every step.

    Example:
        adminflow workflow show corporate-event
    """
    store = get_store()
    wf = asyncio.run(store.get(workflow_id))
    if wf is None:
        typer.echo("Workflow not found")
        raise typer.Exit(code=1)
    typer.echo(f"Workflow {wf.id}: {wf.name} [{wf.status.value}] {round(wf.progress)}%")
    if wf.description:
        typer.echo(f"Description: {wf.description}")
    for step in wf.steps:
        phase = f" ({step.phase})" if step.phase else ""
        typer.echo(f"- {step.display_name}{phase}: {step.status.value}")
        if step.error:
            typer.echo(f"    error: {step.error}")


@workflow_app.command("import")
def workflow_import(path: Path) -> None:
    """
    Load a workflow definition file and store it.

    Example:
        adminflow workflow import ./corporate_event.yaml
    """
    try:
        workflow, _ = load_workflow_file(path)
    except (OSError, InvalidWorkflowError) as exc:
        typer.secho(f"Could not import {path}: {exc}", fg=typer.colors.RED)
        raise typer.Exit(code=1)
    asyncio.run(get_store().save(workflow))
    typer.echo(f"Imported workflow {workflow.id} ({workflow.total_steps} steps)")


@workflow_app.command("play")
def workflow_play(
    source: Optional[str] = typer.Argument(
        None, help="Workflow file or stored id (default: bundled demo)"
    ),
    interval: Optional[float] = typer.Option(None, help="Seconds between steps"),
    complete: bool = typer.Option(False, help="Jump straight to the finished state"),
) -> None:
    """
    Play a workflow back on a fixed timer, printing each step as it comes up.

    Example:
        adminflow workflow play --interval 0.2
        adminflow workflow play corporate-event --complete
    """
    config = load_config()
    store = get_store()
    workflow, phase_order = _resolve_workflow(source, store, config)

    def on_advance(index: int, step: Step) -> None:
        typer.echo(f"[{index + 1}/{workflow.total_steps}] {step.display_name}")

    run = PlaybackRun(
        workflow,
        phase_order,
        interval=interval or config.playback.interval,
        on_advance=on_advance,
        repository=store,
        fallback_label=config.fallback_phase,
    )
    if _needs_reset(workflow):
        run.reset()

    async def _play() -> None:
        if complete:
            run.complete()
            await run.flush()
            return
        typer.echo(f"[1/{workflow.total_steps}] {workflow.steps[0].display_name}")
        run.start()
        await run.wait()

    asyncio.run(_play())
    run.release()

    for name, progress in run.phase_summary().items():
        typer.echo(f"{name}: {round(progress)}%")
    typer.echo(f"Overall: {round(run.get_overall_progress())}%")


@workflow_app.command("simulate")
def workflow_simulate(
    source: Optional[str] = typer.Argument(
        None, help="Workflow file or stored id (default: bundled demo)"
    ),
    seed: Optional[int] = typer.Option(None, help="Seed for repeatable outcomes"),
    time_unit: Optional[float] = typer.Option(
        None, help="Seconds per simulated time unit"
    ),
) -> None:
    """
    Run every step interactively with sample inputs until done or a step fails.

    Example:
        adminflow workflow simulate --seed 7 --time-unit 0.05
    """
    config = load_config()
    store = get_store()
    workflow, phase_order = _resolve_workflow(source, store, config)
    sim = config.simulation
    outcomes = RandomOutcomes(
        seed=seed if seed is not None else sim.seed,
        success_rate=sim.success_rate,
        min_units=sim.min_units,
        max_units=sim.max_units,
    )
    run = InteractiveRun(
        workflow,
        phase_order,
        outcomes=outcomes,
        time_unit=time_unit if time_unit is not None else sim.time_unit,
        log=ExecutionLog(config.log.max_entries),
        repository=store,
        validate_inputs=sim.validate_inputs,
        fallback_label=config.fallback_phase,
    )
    if _needs_reset(workflow):
        run.reset()

    async def _simulate() -> None:
        while run.active_step is not None and not run.halted:
            step = run.active_step
            await run.submit_step_input(step.id, sample_input(step.category))

    asyncio.run(_simulate())
    run.release()

    for line in run.log.lines():
        typer.echo(line)
    typer.echo(
        f"Workflow {workflow.id}: {workflow.status.value} "
        f"({round(run.get_overall_progress())}%)"
    )
    if run.halted:
        raise typer.Exit(code=2)


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    app()

"""Example showing an interactive run with sample inputs and SQLite checkpoints."""

import asyncio
import sys

from adminflow import InteractiveRun, RandomOutcomes
from adminflow.loader import load_demo_workflow
from adminflow.persistence import SQLiteWorkflowStore
from adminflow.results import sample_input


async def main():
    seed = int(sys.argv[1]) if len(sys.argv) > 1 else None
    store = SQLiteWorkflowStore("adminflow.db")
    workflow, phase_order = load_demo_workflow()

    run = InteractiveRun(
        workflow,
        phase_order,
        outcomes=RandomOutcomes(seed=seed),
        time_unit=0.1,
        repository=store,
    )

    while run.active_step is not None and not run.halted:
        step = run.active_step
        outcome = await run.submit_step_input(step.id, sample_input(step.category))
        print(f"{step.name}: {'ok' if outcome.success else outcome.error}")

    for line in run.log.lines():
        print(line)
    store.close()


if __name__ == "__main__":
    asyncio.run(main())

"""Example showing timed playback of the bundled demo workflow."""

import asyncio

from adminflow import PlaybackRun
from adminflow.loader import load_demo_workflow


async def main():
    workflow, phase_order = load_demo_workflow()

    def on_advance(index, step):
        print(f"{index + 1:>2}/{workflow.total_steps} {step.phase}: {step.name}")

    run = PlaybackRun(workflow, phase_order, interval=0.3, on_advance=on_advance)
    run.start()
    await run.wait()

    for name, progress in run.phase_summary().items():
        print(f"{name}: {progress:.0f}%")


if __name__ == "__main__":
    asyncio.run(main())

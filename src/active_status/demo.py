"""Demo jobs that exercise the status board: the Batmobile launch sequence."""

import asyncio

from active_status.board import StatusBoard
from active_status.minimal import MinimalBoard
from active_status.progress import elapsed_time_job
from active_status.updates import (
    change_status,
    complete_progress,
    progress_tick,
    start_progress,
)


async def simple_job(board: StatusBoard | MinimalBoard, name: str, delay: float) -> None:
    """A job that starts, waits, and succeeds."""
    job = await board.add_job()
    job.send(f"{name} ...")
    await asyncio.sleep(delay)
    job.send(f"{name} ✓")
    job.send(change_status("success"))
    await asyncio.sleep(delay)
    job.close()


async def progress_job(
    board: StatusBoard | MinimalBoard, name: str, target: int, delay: float
) -> None:
    """A job that ticks a progress bar up to target."""
    job = await board.add_job()
    job.send(name)
    job.send(start_progress(target))
    for _ in range(target):
        await asyncio.sleep(delay)
        job.send(progress_tick())
    job.send(complete_progress())
    job.send(change_status("success"))
    await asyncio.sleep(0.1)
    job.close()


async def seatbelt_warning(board: StatusBoard | MinimalBoard) -> None:
    await asyncio.sleep(1.0)
    job = await board.add_job(status="warning")
    job.send("Please fasten your Bat-seatbelts")
    job.close()


async def start_batmobile(board: StatusBoard | MinimalBoard) -> None:
    """
    Run the Batmobile launch sequence on board, then shut the board down.

    Args:
        board: A running console or minimal board
    """
    overall = await board.add_job(status="success", pinned=True)
    overall.send("Batmobile launch sequence")
    elapsed = asyncio.create_task(elapsed_time_job(board, interval_millis=250))

    await asyncio.gather(
        simple_job(board, "Atomic turbines to speed", 2.0),
        progress_job(board, "Loading Bat-fuel", 15, 0.25),
        progress_job(board, "Rotating Batmobile platform", 180, 0.01),
        simple_job(board, "Initializing on-board Bat-computer", 1.0),
        seatbelt_warning(board),
    )
    overall.send("Batmobile ready")
    overall.close()

    await asyncio.sleep(1.0)
    await board.shutdown()
    # Stops on its own once it sees the board closed
    await elapsed

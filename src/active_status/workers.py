"""
Worker pools that report on the status board.

A common use of the board: spread I/O-bound work across several concurrent
workers and give each worker its own line.

- run_workers(): Run N workers concurrently, yielding results as they finish
- wrap_with_status(): Give each worker a job on the board

Example:
    async def migrate(job: JobHandle) -> int:
        count = 0
        async for row in rows:
            job.send(f"row {row.id}")
            await copy(row)
            count += 1
        return count

    async with create_board() as board:
        async for count in run_workers(10, wrap_with_status(board, migrate)):
            total += count
"""

import asyncio
from collections.abc import AsyncIterator, Awaitable, Callable
from typing import Protocol, TypeVar

from active_status.board import JobHandle
from active_status.types import JobStatus
from active_status.updates import change_status

T = TypeVar("T")


class Board(Protocol):
    async def add_job(
        self, status: JobStatus | str = ..., pinned: bool = ..., prefix: str | None = ...
    ) -> JobHandle: ...


async def run_workers(
    worker_count: int,
    worker_constructor: Callable[[int], Awaitable[T]],
) -> AsyncIterator[T]:
    """
    Run workers concurrently.

    Worker ids are numbered from 1. Results are yielded in completion order,
    which is not deterministic. If a worker fails, the remaining workers are
    cancelled and the failure propagates.

    Args:
        worker_count: Number of workers
        worker_constructor: Called with a worker id, returns an awaitable
    """
    tasks = [
        asyncio.ensure_future(worker_constructor(worker_id))
        for worker_id in range(1, worker_count + 1)
    ]
    try:
        for finished in asyncio.as_completed(tasks):
            yield await finished
    finally:
        for task in tasks:
            task.cancel()


def wrap_with_status(
    board: Board,
    worker: Callable[[JobHandle], Awaitable[T]],
    prefix: str = "worker %2d: ",
    initial_text: str = "waiting",
    complete_text: str = "done",
) -> Callable[[int], Awaitable[T]]:
    """
    Wrap a worker so it reports on the board; the result suits run_workers().

    Each worker gets a job prefixed from its id, initially showing
    initial_text. The worker receives the JobHandle and may send its own
    updates. When the worker returns, complete_text is sent and the job is
    closed; if it raises, the job turns to error status first.

    Args:
        board: Board to add the jobs to
        worker: Coroutine function taking the worker's JobHandle
        prefix: %-format template for the job prefix, given the worker id
        initial_text: Summary shown before the worker sends anything
        complete_text: Summary shown once the worker finishes
    """

    async def constructor(worker_id: int) -> T:
        job = await board.add_job(prefix=prefix % worker_id)
        job.send(initial_text)
        with job:
            try:
                result = await worker(job)
            except Exception:
                job.send(change_status(JobStatus.ERROR))
                raise
            job.send(complete_text)
            return result

    return constructor

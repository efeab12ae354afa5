"""
MinimalBoard: status board without cursor motion.

For terminals and IDE consoles that cannot handle terminal capabilities.
Jobs are added and updated exactly as on the console board, but only two
kinds of update are used: summary text and SetPrefix. Whenever a job's
prefix or summary changes, a fresh line `prefix + summary` is printed.
Every other update value is accepted and ignored.
"""

import asyncio
import itertools
from typing import Any

from rich.console import Console

from active_status.buffer import UpdateBuffer
from active_status.board import JobHandle
from active_status.exceptions import BoardClosedError
from active_status.types import JobStatus
from active_status.updates import SetPrefix

Model = tuple[str | None, str | None]


def update_model(model: Model, value: Any) -> Model:
    """
    Apply an update to the (prefix, summary) model.

    Args:
        model: Current (prefix, summary)
        value: Update value

    Returns:
        New (prefix, summary); unchanged for updates other than text and prefix
    """
    prefix, summary = model
    if isinstance(value, str):
        return prefix, value
    if isinstance(value, SetPrefix):
        return value.prefix, summary
    return model


class MinimalBoard:
    """
    Line-per-change status board.

    Example:
        board = MinimalBoard()
        job = await board.add_job(prefix="fetch: ")
        job.send("connecting")   # prints "fetch: connecting"
        job.close()
        await board.shutdown()
    """

    def __init__(self, console: Console | None = None, update_queue_size: int = 10) -> None:
        """
        Initialize minimal board on the running event loop.

        Args:
            console: Rich Console to print to (creates default if None)
            update_queue_size: Pending updates kept per job
        """
        self.console = console if console is not None else Console()
        self._loop = asyncio.get_running_loop()
        self._update_queue_size = update_queue_size
        self._tasks: set[asyncio.Task] = set()
        self._buffers: list[UpdateBuffer] = []
        self._ids = itertools.count(1)
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    async def add_job(
        self,
        status: JobStatus | str = JobStatus.NORMAL,
        pinned: bool = False,
        prefix: str | None = None,
    ) -> JobHandle:
        """
        Add a job. Status and pinned are accepted for compatibility and ignored.

        Raises:
            BoardClosedError: If the board is shut down
        """
        if self._closed:
            raise BoardClosedError("Status board is shut down")
        job_id = next(self._ids)
        buffer = UpdateBuffer(maxlen=self._update_queue_size)
        self._buffers.append(buffer)
        task = asyncio.create_task(
            self._job_loop(buffer, prefix), name=f"active-status-minimal-{job_id}"
        )
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return JobHandle(job_id, buffer, self._loop)

    async def _job_loop(self, buffer: UpdateBuffer, prefix: str | None) -> None:
        model: Model = (prefix, None)
        while True:
            value = await buffer.get()
            if value is None:
                return
            new_model = update_model(model, value)
            if new_model == model:
                continue
            model = new_model
            new_prefix, summary = model
            if summary:
                self.console.out((new_prefix or "") + summary, highlight=False)

    async def shutdown(self) -> None:
        """Stop all job loops; updates still queued are printed first."""
        self._closed = True
        for buffer in self._buffers:
            buffer.close()
        await asyncio.gather(*self._tasks)

    async def __aenter__(self) -> "MinimalBoard":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.shutdown()

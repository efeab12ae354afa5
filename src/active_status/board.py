"""
Status board facade.

Public entry points for presenting the status of concurrent jobs:
- create_board(): Start a board (and its coordinator task) on the running loop
- StatusBoard.add_job(): Register a job, returning its JobHandle
- JobHandle.send() / close(): Update or finish a job
- StatusBoard.shutdown(): Final redraw, then stop

Example:
    async with create_board() as board:
        job = await board.add_job(prefix="build: ")
        job.send(start_progress(len(files)))
        for f in files:
            job.send(f"compiling {f}")
            await compile(f)
            job.send(progress_tick())
        job.send(change_status("success"))
        job.close()

Only one board should write to a terminal at a time; two boards interfere
with each other's cursor motion.
"""

import asyncio
import itertools
import time
from collections import deque
from typing import TYPE_CHECKING, Any, Callable

from pydantic import ValidationError
from rich.console import Console

from active_status.buffer import UpdateBuffer
from active_status.config import BoardSettings, load_settings
from active_status.coordinator import Coordinator, JobRegistration
from active_status.exceptions import BoardClosedError, ConfigurationError, JobClosedError
from active_status.output import OutputSink
from active_status.renderer import ConsoleRenderer
from active_status.terminal import TerminalCapabilities
from active_status.types import JobOptions, JobStatus, JobTable
from active_status.updates import JobUpdate, validate_update

if TYPE_CHECKING:
    from active_status.minimal import MinimalBoard


class JobHandle:
    """
    Producer side of one job.

    send() never blocks: when the job's buffer is full the oldest pending
    update is dropped. Safe to call from other threads; the update is
    handed to the board's event loop.

    Can be used as a context manager that closes the job on exit.
    """

    def __init__(
        self, job_id: int, buffer: UpdateBuffer, loop: asyncio.AbstractEventLoop
    ) -> None:
        self.job_id = job_id
        self._buffer = buffer
        self._loop = loop
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def send(self, value: JobUpdate) -> None:
        """
        Send an update value to the job.

        Args:
            value: Summary text or an update from active_status.updates

        Raises:
            InvalidUpdate: If value is not a recognized update
            JobClosedError: If the job was already closed
        """
        validate_update(value)
        if self._closed:
            raise JobClosedError(self.job_id)
        self._call(self._buffer.put, value)

    def close(self) -> None:
        """Finish the job. Closing twice is a no-op."""
        if self._closed:
            return
        self._closed = True
        self._call(self._buffer.close)

    def _call(self, fn: Callable[..., None], *args: Any) -> None:
        try:
            running = asyncio.get_running_loop()
        except RuntimeError:
            running = None
        if running is self._loop:
            fn(*args)
        else:
            self._loop.call_soon_threadsafe(fn, *args)

    def __call__(self, value: JobUpdate) -> None:
        self.send(value)

    def __enter__(self) -> "JobHandle":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"JobHandle(job_id={self.job_id}, closed={self._closed})"


class StatusBoard:
    """
    A console status board: one line per job, updated in place.

    Must be created inside a running event loop; the coordinator runs as a
    task on that loop until shutdown().
    """

    def __init__(
        self,
        settings: BoardSettings,
        renderer: ConsoleRenderer | None = None,
        sink: OutputSink | None = None,
        capabilities: TerminalCapabilities | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """
        Initialize board and start its coordinator.

        Args:
            settings: Board settings
            renderer: Renderer to use (built from sink/capabilities if None)
            sink: Output sink (defaults to stdout)
            capabilities: Terminal capabilities (defaults to tput for the
                          configured terminal type)
            clock: Monotonic clock in seconds
        """
        self.settings = settings
        self._loop = asyncio.get_running_loop()
        if renderer is None:
            renderer = ConsoleRenderer(
                capabilities or TerminalCapabilities(settings.terminal_type),
                sink or OutputSink(),
                progress_formatter=settings.progress_formatter,
                clock=clock,
            )
        self._registrations: asyncio.Queue = asyncio.Queue(
            maxsize=settings.registration_queue_size
        )
        self._failures: deque[Exception] = deque(maxlen=settings.failure_history)
        self._coordinator = Coordinator(
            settings,
            renderer,
            self._registrations,
            on_failure=self._failures.append,
            clock=clock,
        )
        self._ids = itertools.count(1)
        self._closing = False
        self._task = self._loop.create_task(
            self._coordinator.run(), name="active-status-coordinator"
        )

    @property
    def closed(self) -> bool:
        """True once shutdown was requested or the coordinator stopped."""
        return self._closing or self._task.done()

    @property
    def failures(self) -> list[Exception]:
        """Recent non-fatal failures, oldest first."""
        return list(self._failures)

    @property
    def jobs(self) -> JobTable:
        """Snapshot of the coordinator's current job table."""
        return self._coordinator.jobs

    async def add_job(
        self,
        status: JobStatus | str = JobStatus.NORMAL,
        pinned: bool = False,
        prefix: str | None = None,
    ) -> JobHandle:
        """
        Add a job to the board.

        The job's line appears at the bottom of the board and stays blank
        until its first update. May wait while the registration queue is full.

        Args:
            status: Initial status (normal, success, warning, error)
            pinned: If True, each update moves the job to the bottom line
            prefix: Optional prefix shown before the summary

        Returns:
            JobHandle for sending updates

        Raises:
            ConfigurationError: If the options are invalid
            BoardClosedError: If the board is shut down
        """
        try:
            options = JobOptions(status=status, pinned=pinned, prefix=prefix)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid job options: {e}") from e

        if self.closed:
            raise BoardClosedError("Status board is shut down")

        job_id = next(self._ids)
        buffer = UpdateBuffer(maxlen=self.settings.update_queue_size)
        registration = JobRegistration(job_id=job_id, options=options, buffer=buffer)
        if not await self._offer(registration):
            raise BoardClosedError("Status board coordinator has stopped")
        return JobHandle(job_id, buffer, self._loop)

    async def shutdown(self) -> None:
        """
        Stop the board after a final redraw.

        Jobs still open are shown as complete. Must not be called from two
        callers concurrently.

        Raises:
            TableCorruption: If the coordinator stopped on corrupted state
        """
        if not self._closing:
            self._closing = True
            if not self._task.done():
                await self._offer(None)
        await self._task

    async def _offer(self, item: JobRegistration | None) -> bool:
        """
        Put onto the registration queue unless the coordinator stops first.

        Returns:
            True if the item was queued
        """
        put = asyncio.ensure_future(self._registrations.put(item))
        done, _ = await asyncio.wait(
            {put, self._task}, return_when=asyncio.FIRST_COMPLETED
        )
        if put not in done:
            put.cancel()
            return False
        return True

    async def __aenter__(self) -> "StatusBoard":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.shutdown()


def create_board(
    settings: BoardSettings | None = None,
    *,
    sink: OutputSink | None = None,
    capabilities: TerminalCapabilities | None = None,
    renderer: ConsoleRenderer | None = None,
    clock: Callable[[], float] = time.monotonic,
    **overrides: Any,
) -> "StatusBoard | MinimalBoard":
    """
    Create and start a status board.

    The console board is the default; settings with mode "minimal" give a
    MinimalBoard printing to the sink's stream instead.

    Args:
        settings: Board settings; loaded from the environment plus
                  overrides when None
        sink: Output sink (defaults to stdout)
        capabilities: Terminal capabilities (defaults to tput)
        renderer: Renderer, replacing sink/capabilities entirely
        clock: Monotonic clock in seconds
        **overrides: Setting overrides, e.g. dim_after_millis=500

    Returns:
        Running StatusBoard, or MinimalBoard in minimal mode

    Raises:
        ConfigurationError: If the settings are invalid
    """
    if settings is None:
        settings = load_settings(**overrides)
    elif overrides:
        settings = load_settings(**{**settings.model_dump(), **overrides})
    if settings.mode == "minimal":
        from active_status.minimal import MinimalBoard

        console = Console(file=sink.stream) if sink is not None else None
        return MinimalBoard(console=console, update_queue_size=settings.update_queue_size)
    return StatusBoard(
        settings, renderer=renderer, sink=sink, capabilities=capabilities, clock=clock
    )


async def add_job(board: StatusBoard, **options: Any) -> JobHandle:
    """Add a job to board; see StatusBoard.add_job."""
    return await board.add_job(**options)


async def shutdown(board: StatusBoard) -> None:
    """Shut board down; see StatusBoard.shutdown."""
    await board.shutdown()

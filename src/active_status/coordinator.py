"""
Coordinator: the single owner of the job table.

This module implements the event loop that serializes concurrent job
updates into deterministic redraws:
- Merges three inputs: job registrations, the composite update queue, and
  the refresh deadline
- Applies the update protocol and line allocation to its private table
- Hands the previously rendered and current tables to the renderer
- Dims jobs via a heap holding one dim marker per job, retires completed
  jobs once dimmed
- Stops scheduling refreshes while no job is active

Loop shape:
- One long-running coroutine, woken by asyncio.wait with a timeout
- Non-fatal failures are logged and reported, and the loop keeps going
- Only TableCorruption ends the loop early

No other task ever touches the table. Producers reach the coordinator
only through queues: each job's lossy UpdateBuffer is drained by a
forwarding task that tags values with the job id and pushes them into
the bounded composite queue.
"""

import asyncio
import heapq
import logging
import time
from dataclasses import dataclass, replace
from typing import Any, Callable

from active_status import lines
from active_status.buffer import UpdateBuffer
from active_status.config import BoardSettings
from active_status.exceptions import RenderFailure, TableCorruption, UpdateFailure
from active_status.renderer import ConsoleRenderer
from active_status.types import Job, JobOptions, JobTable
from active_status.updates import DimMarker, apply_update

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class JobRegistration:
    """
    Request to add a job to the board.

    Attributes:
        job_id: Identifier assigned by the board
        options: Initial status, pinned flag and prefix
        buffer: The job's update buffer, drained once registered
    """

    job_id: int
    options: JobOptions
    buffer: UpdateBuffer


class Coordinator:
    """
    Event loop that owns the job table and drives redraws.

    The registration queue carries JobRegistration values, or None to shut
    the board down.

    Example:
        registrations = asyncio.Queue(maxsize=1)
        coordinator = Coordinator(settings, renderer, registrations)
        task = asyncio.create_task(coordinator.run())
        await registrations.put(JobRegistration(1, JobOptions(), buffer))
        ...
        await registrations.put(None)
        await task
    """

    def __init__(
        self,
        settings: BoardSettings,
        renderer: ConsoleRenderer,
        registrations: asyncio.Queue,
        on_failure: Callable[[Exception], None] | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """
        Initialize coordinator.

        Args:
            settings: Board settings (timing and queue sizes)
            renderer: Renderer for job tables
            registrations: Queue of JobRegistration, None to shut down
            on_failure: Called with each non-fatal failure
            clock: Monotonic clock in seconds
        """
        self._settings = settings
        self._renderer = renderer
        self._registrations = registrations
        self._on_failure = on_failure
        self._clock = clock

        self._jobs: JobTable = {}
        self._rendered: JobTable = {}
        self._composite: asyncio.Queue = asyncio.Queue(
            maxsize=settings.composite_queue_size
        )
        self._forwarders: set[asyncio.Task] = set()
        # (due time, job id), at most one entry per job
        self._dim_markers: list[tuple[float, int]] = []
        self._dim_pending: set[int] = set()
        self._refresh_at: float | None = None

    @property
    def jobs(self) -> JobTable:
        """Current job table (a snapshot; the coordinator replaces it on change)."""
        return self._jobs

    @property
    def refresh_pending(self) -> bool:
        return self._refresh_at is not None

    @property
    def dim_markers_pending(self) -> int:
        """Number of armed dim markers; never more than one per job."""
        return len(self._dim_markers)

    async def run(self) -> None:
        """
        Process events until the registration queue delivers None.

        Raises:
            TableCorruption: If line allocation ever breaks its invariants
        """
        registration_get: asyncio.Future | None = None
        update_get: asyncio.Future | None = None

        try:
            while True:
                if registration_get is None:
                    registration_get = asyncio.ensure_future(self._registrations.get())
                if update_get is None:
                    update_get = asyncio.ensure_future(self._composite.get())

                timeout = None
                if self._refresh_at is not None:
                    timeout = max(0.0, self._refresh_at - self._clock())

                done, _ = await asyncio.wait(
                    {registration_get, update_get},
                    timeout=timeout,
                    return_when=asyncio.FIRST_COMPLETED,
                )

                if update_get in done:
                    job_id, value = update_get.result()
                    update_get = None
                    self._on_update(job_id, value)

                if registration_get in done:
                    registration = registration_get.result()
                    registration_get = None
                    if registration is None:
                        self._finish()
                        return
                    self._on_register(registration)

                if self._refresh_at is not None and self._clock() >= self._refresh_at:
                    self._on_refresh()
        except TableCorruption as e:
            logger.critical(f"Status board stopped: {e}")
            self._report(e)
            raise
        finally:
            for pending in (registration_get, update_get):
                if pending is not None:
                    pending.cancel()
            for task in list(self._forwarders):
                task.cancel()

    def _on_register(self, registration: JobRegistration) -> None:
        options = registration.options
        job = Job(
            id=registration.job_id,
            line=1,
            prefix=options.prefix,
            status=options.status,
            pinned=options.pinned,
            updated=self._clock(),
        )
        # The new row stays blank until the job's first update
        try:
            self._renderer.add_row()
        except RenderFailure as e:
            self._report(e)
        self._commit(lines.register(self._jobs, job))

        task = asyncio.create_task(
            self._forward(registration.job_id, registration.buffer),
            name=f"active-status-job-{registration.job_id}",
        )
        self._forwarders.add(task)
        task.add_done_callback(self._forwarders.discard)

    async def _forward(self, job_id: int, buffer: UpdateBuffer) -> None:
        """Move a job's updates into the composite queue; None marks the close."""
        while True:
            value = await buffer.get()
            await self._composite.put((job_id, value))
            if value is None:
                return

    def _on_update(self, job_id: int, value: Any) -> None:
        if job_id not in self._jobs:
            logger.warning(f"Discarding update for unknown job {job_id}: {value!r}")
            return

        before = self._jobs[job_id]
        now = self._clock()
        try:
            if value is None:
                new_jobs = lines.complete(self._jobs, job_id, now)
            else:
                job = apply_update(before, value, now)
                new_jobs = lines.promote_if_pinned(
                    {**self._jobs, job_id: job}, before, job_id
                )
        except Exception as e:
            # Bad update: skip it, the rest of the board carries on
            failure = UpdateFailure(self._jobs, job_id, value)
            failure.__cause__ = e
            self._report(failure)
            return

        self._commit(new_jobs)
        self._arm_dim_marker(job_id, now + self._settings.dim_after)
        self._schedule_refresh()

    def _arm_dim_marker(self, job_id: int, due: float) -> None:
        if job_id not in self._dim_pending:
            self._dim_pending.add(job_id)
            heapq.heappush(self._dim_markers, (due, job_id))

    def _on_refresh(self) -> None:
        self._refresh_at = None
        now = self._clock()

        jobs = self._jobs
        while self._dim_markers and self._dim_markers[0][0] <= now:
            _, job_id = heapq.heappop(self._dim_markers)
            self._dim_pending.discard(job_id)
            job = jobs.get(job_id)
            if job is None or not job.active:
                continue
            due = job.updated + self._settings.dim_after
            if due <= now:
                jobs = {**jobs, job_id: apply_update(job, DimMarker(job.updated), now)}
            else:
                # Updated since the marker was armed
                self._arm_dim_marker(job_id, due)
        self._commit(jobs)

        self._render()
        self._commit(lines.retire(self._jobs))
        self._rendered = {
            job_id: job for job_id, job in self._rendered.items() if job_id in self._jobs
        }

        if any(job.active for job in self._jobs.values()):
            self._schedule_refresh()

    def _finish(self) -> None:
        """Apply whatever updates are already queued, then render a final frame."""
        while not self._composite.empty():
            job_id, value = self._composite.get_nowait()
            self._on_update(job_id, value)

        self._commit(
            {
                job_id: replace(job, active=False, complete=True)
                for job_id, job in self._jobs.items()
            }
        )
        self._render()
        self._refresh_at = None

    def _render(self) -> None:
        failures = self._renderer.render(self._rendered, self._jobs)
        rendered = dict(self._jobs)
        for failure in failures:
            self._report(failure)
            # Leave the failed job's previous state so it is retried next pass
            if failure.job_id in self._rendered:
                rendered[failure.job_id] = self._rendered[failure.job_id]
            else:
                rendered.pop(failure.job_id, None)
        self._rendered = rendered

    def _commit(self, jobs: JobTable) -> None:
        lines.check_lines(jobs)
        self._jobs = jobs

    def _schedule_refresh(self) -> None:
        if self._refresh_at is None:
            self._refresh_at = self._clock() + self._settings.refresh_interval

    def _report(self, failure: Exception) -> None:
        if not isinstance(failure, TableCorruption):
            logger.warning(f"Status board: {failure}")
        if self._on_failure is not None:
            self._on_failure(failure)

"""
Process-wide status board with jobs looked up by name.

Convenience layer for applications that would rather not pass a board and
job handles around: install one board with init_status_board(), then add,
update and stop jobs by name from anywhere. When no board is installed,
every call is a no-op, so library code can report status unconditionally.
"""

import functools
import logging
from collections.abc import Callable, Hashable

from active_status.board import JobHandle, StatusBoard
from active_status.minimal import MinimalBoard
from active_status.types import JobStatus
from active_status.updates import JobUpdate

logger = logging.getLogger(__name__)

_board: StatusBoard | MinimalBoard | None = None
_jobs: dict[Hashable, JobHandle] = {}


def init_status_board(board: StatusBoard | MinimalBoard) -> None:
    """Install the process-wide board."""
    global _board
    _board = board


def active_board() -> bool:
    """Return True if a board is installed."""
    return _board is not None


def update_job(name: Hashable, value: JobUpdate) -> None:
    """
    Send an update to the named job.

    Args:
        name: Job name given to add_job()
        value: Summary text or an update from active_status.updates

    Raises:
        InvalidUpdate: If value is not a recognized update
    """
    if _board is None:
        return
    job = _jobs.get(name)
    if job is None:
        logger.debug(f"Ignoring update for unknown job {name!r}")
        return
    job.send(value)


async def add_job(
    name: Hashable,
    status: JobStatus | str = JobStatus.NORMAL,
    pinned: bool = False,
    prefix: str | None = None,
) -> Callable[[JobUpdate], None]:
    """
    Add a named job to the installed board.

    Args:
        name: Name used by update_job() and stop_job()
        status: Initial status
        pinned: If True, updates move the job to the bottom line
        prefix: Optional prefix

    Returns:
        A function sending updates to this job, i.e. update_job bound to name
    """
    if _board is not None:
        _jobs[name] = await _board.add_job(status=status, pinned=pinned, prefix=prefix)
    return functools.partial(update_job, name)


def stop_job(name: Hashable) -> None:
    """Close the named job and forget its name."""
    if _board is None:
        return
    job = _jobs.pop(name, None)
    if job is not None:
        job.close()


async def shutdown() -> None:
    """Shut down the installed board and forget all jobs."""
    global _board
    if _board is None:
        return
    board, _board = _board, None
    _jobs.clear()
    await board.shutdown()

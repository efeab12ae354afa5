"""
Job update protocol.

Producers change a job's display state by sending update values. The set of
values is closed:

- str: Replace the summary text
- ChangeStatus: Change the status (line color)
- SetPrefix: Set or clear the prefix
- StartProgress / ProgressTick / CompleteProgress / ClearProgress: Progress bar
- SetProgressFormatter: Per-job override of progress formatting
- DimMarker: Internal, clears the active flag once the dim window elapses

apply_update() maps (job, value) to a new Job. Anything outside the set is
rejected with InvalidUpdate; nothing passes through silently.
"""

from dataclasses import dataclass, replace
from typing import Any, Union

from active_status.exceptions import InvalidUpdate
from active_status.types import Job, JobStatus, Progress, ProgressFormatter


@dataclass(frozen=True)
class ChangeStatus:
    """Change the job's status, which controls the color of its line."""

    status: JobStatus


@dataclass(frozen=True)
class SetPrefix:
    """Set the job's prefix; None removes it."""

    prefix: str | None


@dataclass(frozen=True)
class StartProgress:
    """Start progress towards a target; the line gains a progress bar."""

    target: int


@dataclass(frozen=True)
class ProgressTick:
    """Increment progress by an amount (default 1)."""

    amount: int = 1


@dataclass(frozen=True)
class CompleteProgress:
    """Set current progress to the target."""


@dataclass(frozen=True)
class ClearProgress:
    """Remove progress, and the progress bar, entirely."""


@dataclass(frozen=True)
class SetProgressFormatter:
    """Override progress formatting for this job; None restores the default."""

    formatter: ProgressFormatter | None


@dataclass(frozen=True)
class DimMarker:
    """
    Internal marker applied once a job's dim window has elapsed.

    Clears the job's active flag only if the job has not been updated since
    (its updated time still matches).
    """

    updated: float


JobUpdate = Union[
    str,
    ChangeStatus,
    SetPrefix,
    StartProgress,
    ProgressTick,
    CompleteProgress,
    ClearProgress,
    SetProgressFormatter,
    DimMarker,
]

_PUBLIC_UPDATE_TYPES = (
    str,
    ChangeStatus,
    SetPrefix,
    StartProgress,
    ProgressTick,
    CompleteProgress,
    ClearProgress,
    SetProgressFormatter,
)


def validate_update(value: Any) -> None:
    """
    Check a value at the producer boundary.

    Args:
        value: Value a producer wants to send to a job

    Raises:
        InvalidUpdate: If the value is not a public update variant, or its
                       fields have the wrong type
    """
    if isinstance(value, DimMarker):
        raise InvalidUpdate(value, "dim markers are internal to the board")
    if not isinstance(value, _PUBLIC_UPDATE_TYPES):
        raise InvalidUpdate(value)
    if isinstance(value, ChangeStatus) and not isinstance(value.status, JobStatus):
        raise InvalidUpdate(value, f"unknown status {value.status!r}")
    if isinstance(value, SetPrefix) and not (
        value.prefix is None or isinstance(value.prefix, str)
    ):
        raise InvalidUpdate(value, f"prefix must be a string or None, not {value.prefix!r}")
    if isinstance(value, StartProgress) and not _is_int(value.target):
        raise InvalidUpdate(value, f"target must be an int, not {value.target!r}")
    if isinstance(value, ProgressTick) and not _is_int(value.amount):
        raise InvalidUpdate(value, f"amount must be an int, not {value.amount!r}")
    if isinstance(value, SetProgressFormatter) and not (
        value.formatter is None or callable(value.formatter)
    ):
        raise InvalidUpdate(
            value, f"formatter must be callable or None, not {value.formatter!r}"
        )


def _is_int(value: Any) -> bool:
    # bool is an int subclass but never a meaningful count
    return isinstance(value, int) and not isinstance(value, bool)


def _require_progress(job: Job, value: Any) -> Progress:
    if job.progress is None:
        raise InvalidUpdate(value, f"job {job.id} has no progress started")
    return job.progress


def apply_update(job: Job, value: JobUpdate, now: float) -> Job:
    """
    Apply one update value to a job.

    Every update except DimMarker marks the job active and stamps its
    updated time.

    Args:
        job: Current job state
        value: Update value
        now: Current clock time (seconds)

    Returns:
        The new job state

    Raises:
        InvalidUpdate: Unrecognized value, or a progress update with no
                       progress started
    """
    if isinstance(value, DimMarker):
        if job.updated == value.updated and job.active:
            return replace(job, active=False)
        return job

    if isinstance(value, str):
        job = replace(job, summary=value)
    elif isinstance(value, ChangeStatus):
        job = replace(job, status=value.status)
    elif isinstance(value, SetPrefix):
        job = replace(job, prefix=value.prefix)
    elif isinstance(value, StartProgress):
        job = replace(job, progress=Progress(current=0, target=value.target, created=now))
    elif isinstance(value, ProgressTick):
        progress = _require_progress(job, value)
        job = replace(job, progress=replace(progress, current=progress.current + value.amount))
    elif isinstance(value, CompleteProgress):
        progress = _require_progress(job, value)
        job = replace(job, progress=replace(progress, current=progress.target))
    elif isinstance(value, ClearProgress):
        job = replace(job, progress=None)
    elif isinstance(value, SetProgressFormatter):
        job = replace(job, progress_formatter=value.formatter)
    else:
        raise InvalidUpdate(value)

    return replace(job, active=True, updated=now)


def change_status(status: JobStatus | str) -> ChangeStatus:
    """
    Return an update that changes the job's status.

    Args:
        status: One of normal, success, warning, error

    Raises:
        InvalidUpdate: If the status is not recognized
    """
    try:
        return ChangeStatus(JobStatus(status))
    except ValueError as e:
        raise InvalidUpdate(status, "unknown status") from e


def set_prefix(prefix: str | None) -> SetPrefix:
    """Return an update that sets the prefix (usually ending with a space)."""
    return SetPrefix(prefix)


def start_progress(target: int) -> StartProgress:
    """Return an update that starts progress towards target."""
    return StartProgress(target)


def progress_tick(amount: int = 1) -> ProgressTick:
    """Return an update that increments progress."""
    return ProgressTick(amount)


def complete_progress() -> CompleteProgress:
    """
    Return an update that completes progress.

    Useful because, on a busy board, an occasional tick may be dropped.
    """
    return CompleteProgress()


def clear_progress() -> ClearProgress:
    """Return an update that removes the progress bar."""
    return ClearProgress()


def set_progress_formatter(formatter: ProgressFormatter | None) -> SetProgressFormatter:
    """Return an update that overrides progress formatting for the job."""
    return SetProgressFormatter(formatter)

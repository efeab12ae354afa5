"""
Exception classes for the status board.

This module defines the failures the board can raise or report:
- InvalidUpdate: An update value outside the closed update protocol
- UpdateFailure: An update that failed while being applied, with context
- TableCorruption: Line numbering invariant violated (fatal to the coordinator)
- RenderFailure: Writing a job's line to the output sink failed
- ConfigurationError: Invalid board settings or job options
- JobClosedError: Update sent to a job whose stream is closed
- BoardClosedError: Job added to a board that has shut down

InvalidUpdate, UpdateFailure and RenderFailure are reported per event and
never stop the coordinator. TableCorruption stops it.

Each exception keeps its context in attributes alongside the message.
"""

from typing import Any


class InvalidUpdate(Exception):
    """
    Raised when a value is not part of the update protocol.

    Also raised when a progress update arrives for a job that has no
    progress started.

    Attributes:
        value: The rejected update value
        reason: Why the value was rejected
    """

    def __init__(self, value: Any, reason: str = "unrecognized update value") -> None:
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid job update {value!r}: {reason}")


class UpdateFailure(Exception):
    """
    Raised (and reported) when applying an update to the job table fails.

    Carries the full coordinator context so the failure can be diagnosed
    without reproducing it.

    Attributes:
        jobs: The job table as it was before the update
        job_id: The job the update was for
        value: The update value (None for a stream close)
    """

    def __init__(self, jobs: dict, job_id: int, value: Any) -> None:
        self.jobs = jobs
        self.job_id = job_id
        self.value = value
        super().__init__(
            f"Failure updating status of job {job_id} with {value!r} "
            f"({len(jobs)} jobs on board)"
        )


class TableCorruption(Exception):
    """
    Raised when the job table violates its line invariants.

    This indicates a bug in line allocation. The coordinator stops when it
    sees one, since continuing would corrupt the display further.

    Attributes:
        jobs: The offending job table
        reason: Which invariant was violated
    """

    def __init__(self, jobs: dict, reason: str) -> None:
        self.jobs = jobs
        self.reason = reason
        super().__init__(f"Job table corrupted: {reason}")


class RenderFailure(Exception):
    """
    Raised when a job's line could not be written to the output sink.

    Attributes:
        job_id: The job whose line failed to render
    """

    def __init__(self, job_id: int, reason: str) -> None:
        self.job_id = job_id
        self.reason = reason
        super().__init__(f"Unable to render job {job_id}: {reason}")


class ConfigurationError(Exception):
    """Raised for invalid board settings or job options."""


class JobClosedError(Exception):
    """
    Raised when an update is sent to a job that was already closed.

    Attributes:
        job_id: The closed job
    """

    def __init__(self, job_id: int) -> None:
        self.job_id = job_id
        super().__init__(f"Job {job_id} is closed; no further updates accepted")


class BoardClosedError(Exception):
    """Raised when a job is added to a board that is shut down."""

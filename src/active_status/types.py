"""
Job types for the status board.

This module defines the core data structures for job display state:
- JobStatus: Enum for the status that drives a job's line color
- Progress: Progress model (current/target/created)
- Job: Immutable record of one job's display state
- JobOptions: Validated options for registering a job
- JobTable: Type alias for the authoritative job table

Jobs are never mutated in place. Every transition builds new Job values with
dataclasses.replace() and a new table dict, so the previous table can be
handed to the renderer for diffing.

Line coordinates:
    Job.line is the distance in screen rows upward from the cursor's resting
    position. Line 1 is the bottom row of the board; line N is the top row.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from pydantic import BaseModel, ConfigDict, Field


class JobStatus(str, Enum):
    """Valid job status values; each maps to a line color."""

    NORMAL = "normal"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


@dataclass(frozen=True)
class Progress:
    """
    Progress towards a target.

    Attributes:
        current: Amount completed so far
        target: Amount to reach
        created: Clock time (seconds) progress was started, used for ETA
    """

    current: int
    target: int
    created: float


ProgressFormatter = Callable[[Progress, float], str]
"""Formats a Progress model at a given clock time into display text."""


@dataclass(frozen=True)
class Job:
    """
    Display state of one job on the board.

    Attributes:
        id: Unique, monotonic job identifier assigned at registration
        line: Rows up from the cursor (1 = bottom row of the board)
        summary: Display text
        prefix: Optional identity label rendered before the summary
        status: Controls the line color
        active: Recently updated; rendered bold until the dim window elapses
        complete: The job's update stream has closed
        pinned: Every substantive update moves the job to line 1
        updated: Clock time of the last update
        progress: Optional progress model, rendered as a bar
        progress_formatter: Optional per-job override for progress rendering
    """

    id: int
    line: int
    summary: str = ""
    prefix: str | None = None
    status: JobStatus = JobStatus.NORMAL
    active: bool = False
    complete: bool = False
    pinned: bool = False
    updated: float = 0.0
    progress: Progress | None = None
    progress_formatter: Optional[ProgressFormatter] = None

    def visible_fields(self) -> tuple:
        """
        Return the fields that affect the rendered text.

        Excludes line, active and updated, which change on every update
        without changing what the line says.
        """
        return (
            self.summary,
            self.status,
            self.progress,
            self.progress_formatter,
            self.prefix,
        )


JobTable = dict[int, Job]


class JobOptions(BaseModel):
    """
    Options for registering a new job.

    Attributes:
        status: Initial status (normal, success, warning, error)
        pinned: If True, updates move the job to the bottom line
        prefix: Optional prefix shown before the summary
    """

    model_config = ConfigDict(frozen=True)

    status: JobStatus = Field(default=JobStatus.NORMAL, description="Initial status")
    pinned: bool = Field(default=False, description="Move to line 1 on each update")
    prefix: str | None = Field(default=None, description="Identity label")

"""
Live status of concurrent jobs, updated in place in the terminal.

Each job owns one line of the board. Producers send updates to their job
from any task; a single coordinator serializes them into redraws of just
the lines that changed.

This package provides:
- create_board / StatusBoard: Console board with in-place updates
- JobHandle: Producer side of a job (send updates, close)
- MinimalBoard: Fallback board that prints a line per change
- Update values: change_status, set_prefix, start_progress, progress_tick,
  complete_progress, clear_progress, set_progress_formatter
- BoardSettings / load_settings: pydantic-settings configuration
- redirect_output: Keep other output off the terminal while the board runs
- run_workers / wrap_with_status: Worker pools with a line per worker
"""

from active_status.board import JobHandle, StatusBoard, add_job, create_board, shutdown
from active_status.config import BoardSettings, load_settings
from active_status.exceptions import (
    BoardClosedError,
    ConfigurationError,
    InvalidUpdate,
    JobClosedError,
    RenderFailure,
    TableCorruption,
    UpdateFailure,
)
from active_status.minimal import MinimalBoard
from active_status.output import OutputSink, redirect_output
from active_status.progress import (
    bar,
    default_progress_formatter,
    elapsed_time_job,
    format_elapsed_time,
    report_progress,
)
from active_status.types import Job, JobOptions, JobStatus, Progress
from active_status.updates import (
    change_status,
    clear_progress,
    complete_progress,
    progress_tick,
    set_prefix,
    set_progress_formatter,
    start_progress,
)
from active_status.workers import run_workers, wrap_with_status

__all__ = [
    "BoardClosedError",
    "BoardSettings",
    "ConfigurationError",
    "InvalidUpdate",
    "Job",
    "JobClosedError",
    "JobHandle",
    "JobOptions",
    "JobStatus",
    "MinimalBoard",
    "OutputSink",
    "Progress",
    "RenderFailure",
    "StatusBoard",
    "TableCorruption",
    "UpdateFailure",
    "add_job",
    "bar",
    "change_status",
    "clear_progress",
    "complete_progress",
    "create_board",
    "default_progress_formatter",
    "elapsed_time_job",
    "format_elapsed_time",
    "load_settings",
    "progress_tick",
    "redirect_output",
    "report_progress",
    "run_workers",
    "set_prefix",
    "set_progress_formatter",
    "shutdown",
    "start_progress",
    "wrap_with_status",
]

"""
Console renderer for the status board.

This module redraws changed job lines in place:
- format_job_line(): Styled text for one job (prefix, summary, progress)
- ConsoleRenderer: Diffs two job tables and rewrites only changed lines

Each job's redraw is one atomic write under the output sink's lock:
hide cursor, save cursor, cursor up `line` rows, column 0, clear to end of
line, styled text, restore cursor, show cursor.

Styling uses rich Style rendered to standard ANSI codes:
- status color: success green, warning yellow, error red, normal default
- bold while active, italic once complete and dimmed
- the progress segment is never italic
"""

import time
from typing import Callable

from rich.color import ColorSystem
from rich.style import Style

from active_status.exceptions import RenderFailure
from active_status.output import OutputSink
from active_status.progress import default_progress_formatter
from active_status.terminal import TerminalCapabilities
from active_status.types import Job, JobStatus, JobTable, ProgressFormatter

STATUS_COLORS: dict[JobStatus, str | None] = {
    JobStatus.NORMAL: None,
    JobStatus.SUCCESS: "green",
    JobStatus.WARNING: "yellow",
    JobStatus.ERROR: "red",
}


def job_style(job: Job) -> Style:
    """Return the rich Style for a job's line."""
    return Style(
        color=STATUS_COLORS[job.status],
        bold=job.active or None,
        italic=(job.complete and not job.active) or None,
    )


def format_job_line(
    job: Job,
    now: float,
    progress_formatter: ProgressFormatter = default_progress_formatter,
) -> str:
    """
    Build the styled text for one job.

    Args:
        job: Job to format
        now: Current clock time, for progress ETA
        progress_formatter: Formatter used unless the job overrides it

    Returns:
        Text with ANSI styling, without cursor motion
    """
    style = job_style(job)
    text = style.render(
        (job.prefix or "") + job.summary, color_system=ColorSystem.STANDARD
    )
    if job.progress is not None:
        formatter = job.progress_formatter or progress_formatter
        text += (style + Style(italic=False)).render(
            formatter(job.progress, now), color_system=ColorSystem.STANDARD
        )
    return text


class ConsoleRenderer:
    """
    Redraws changed job lines using terminal capability strings.

    Example:
        renderer = ConsoleRenderer(TerminalCapabilities(), OutputSink())
        renderer.add_row()
        failures = renderer.render(old_jobs, new_jobs)
    """

    def __init__(
        self,
        capabilities: TerminalCapabilities,
        sink: OutputSink,
        progress_formatter: ProgressFormatter = default_progress_formatter,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """
        Initialize renderer.

        Args:
            capabilities: Terminal capability provider
            sink: Output sink (the terminal)
            progress_formatter: Board-wide default progress formatter
            clock: Clock used for progress ETA; must match the coordinator's
        """
        self._caps = capabilities
        self._sink = sink
        self._progress_formatter = progress_formatter
        self._clock = clock

    def add_row(self) -> None:
        """Print a blank row for a newly registered job."""
        self._write(0, "\n")

    def render(self, old_jobs: JobTable, new_jobs: JobTable) -> list[RenderFailure]:
        """
        Redraw every job in new_jobs that differs from old_jobs.

        A failure to write one job does not stop the others.

        Args:
            old_jobs: Table as last rendered
            new_jobs: Table to render

        Returns:
            Failures for jobs that could not be written
        """
        now = self._clock()
        failures = []
        for job_id, job in sorted(new_jobs.items(), key=lambda item: -item[1].line):
            if old_jobs.get(job_id) == job:
                continue
            try:
                self._write(job_id, self._job_sequence(job, now))
            except RenderFailure as e:
                failures.append(e)
        return failures

    def _job_sequence(self, job: Job, now: float) -> str:
        caps = self._caps
        try:
            text = format_job_line(job, now, self._progress_formatter)
        except Exception as e:
            # Progress formatters are caller-supplied
            raise RenderFailure(job.id, f"formatting failed: {e}") from e
        return "".join(
            [
                caps.hide_cursor(),
                caps.save_cursor(),
                caps.cursor_up(job.line),
                caps.column(0),
                caps.clear_to_eol(),
                text,
                caps.restore_cursor(),
                caps.show_cursor(),
            ]
        )

    def _write(self, job_id: int, text: str) -> None:
        try:
            self._sink.write(text)
        except (OSError, ValueError) as e:
            raise RenderFailure(job_id, str(e)) from e

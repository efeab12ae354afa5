"""
Progress formatting and progress-reporting helpers.

This module turns a job's Progress model into display text and provides
helpers for long-running jobs that report progress:
- bar: Fixed-width block-character bar for a completion ratio
- default_progress_formatter: Bar, percentage, counts and ETA
- format_eta / format_elapsed_time: Duration formatting
- report_progress: Async iterator wrapper that reports item counts to a job
- elapsed_time_job: A job that shows elapsed time until the board shuts down
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import AsyncIterable, AsyncIterator, Callable
from typing import TYPE_CHECKING, TypeVar

from active_status.types import Progress

if TYPE_CHECKING:
    from active_status.board import JobHandle, StatusBoard

T = TypeVar("T")

BAR_LENGTH = 30
FILLED = "▓"
UNFILLED = "░"

# (milliseconds, period name), largest first
DURATION_PERIODS = [
    (1000 * 60 * 60 * 24, "day"),
    (1000 * 60 * 60, "hour"),
    (1000 * 60, "minute"),
    (1000, "second"),
]


def bar(completed_ratio: float, length: int = BAR_LENGTH) -> str:
    """
    Build a progress bar from block characters.

    Args:
        completed_ratio: Fraction complete, 0 <= ratio <= 1
        length: Total number of characters in the bar

    Returns:
        String of filled blocks followed by unfilled blocks
    """
    completed = max(0, min(length, int(completed_ratio * length)))
    return FILLED * completed + UNFILLED * (length - completed)


def format_eta(seconds: float) -> str:
    """Format a duration in seconds as minutes:seconds."""
    total = max(0, int(seconds))
    return f"{total // 60}:{total % 60:02d}"


def default_progress_formatter(progress: Progress, now: float) -> str:
    """
    Default formatting of a job's progress.

    Renders a leading space and the bar. When both current and target are
    positive, also renders the percentage, the counts and an ETA
    extrapolated from the time elapsed since progress started.

    Args:
        progress: The job's progress model
        now: Current clock time (seconds, same clock as progress.created)

    Returns:
        Progress text, e.g. " ▓▓▓▓▓▓▓░░░...  25% - 1/4 ETA 0:03"
    """
    displayable = progress.current > 0 and progress.target > 0
    ratio = progress.current / progress.target if displayable else 0
    text = " " + bar(ratio)
    if not displayable:
        return text

    elapsed = max(0.0, now - progress.created)
    remaining = elapsed / ratio - elapsed
    return (
        f"{text} {int(ratio * 100):3d}% - {progress.current}/{progress.target}"
        f" ETA {format_eta(remaining)}"
    )


def _duration_terms(duration_ms: int) -> list[tuple[int, str]]:
    terms = []
    remainder = duration_ms
    for period_ms, name in DURATION_PERIODS:
        if remainder >= period_ms:
            terms.append((remainder // period_ms, name))
            remainder %= period_ms
    return terms


def format_elapsed_time(millis: int) -> str:
    """
    Format elapsed milliseconds as days, hours, minutes and seconds.

    Remaining milliseconds after whole seconds are ignored.

    Example:
        format_elapsed_time(65_000)  # "1 minute, 5 seconds"
    """
    if millis < 0:
        raise ValueError(f"Elapsed time must not be negative: {millis}")
    terms = _duration_terms(int(millis))
    if not terms:
        return "less than a second"
    return ", ".join(
        f"{count} {name}" if count == 1 else f"{count} {name}s"
        for count, name in terms
    )


def should_report(n: int, interval: int) -> bool:
    """Return True if n is positive and an even multiple of interval."""
    return n > 0 and n % interval == 0


async def report_progress(
    source: AsyncIterable[T],
    interval: int,
    job: JobHandle,
    formatter: str | Callable[[int], str],
) -> AsyncIterator[T]:
    """
    Pass values through while reporting how many have been seen.

    Sends the formatted count to the job every `interval` values, and once
    more with the final count when the source is exhausted.

    Args:
        source: Values to pass through
        interval: Report every this many values
        job: Job to send the count to
        formatter: str.format template (e.g. "read {:,} rows") or a
                   callable taking the count

    Example:
        async for row in report_progress(rows, 25, job, "read {:,} rows"):
            await handle(row)
    """
    format_fn = formatter.format if isinstance(formatter, str) else formatter
    count = 0
    async for value in source:
        count += 1
        if should_report(count, interval):
            job.send(format_fn(count))
        yield value
    job.send(format_fn(count))


async def elapsed_time_job(
    board: StatusBoard,
    delay_millis: int = 0,
    interval_millis: int = 1000,
    prefix: str = "elapsed time: ",
    formatter: Callable[[int], str] = format_elapsed_time,
) -> None:
    """
    Run a job that presents elapsed time until the board shuts down.

    Args:
        board: Board to add the job to
        delay_millis: Delay before the job is created
        interval_millis: Interval between updates
        prefix: Job prefix
        formatter: Formats elapsed milliseconds to text
    """
    if delay_millis > 0:
        await asyncio.sleep(delay_millis / 1000)
    job = await board.add_job(prefix=prefix)
    start = time.monotonic()
    while not board.closed:
        job.send(formatter(int((time.monotonic() - start) * 1000)))
        await asyncio.sleep(interval_millis / 1000)

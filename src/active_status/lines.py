"""
Line allocation for the job table.

Pure functions that take a job table and return a new one with line
assignments adjusted. The table passed in is never modified.

Line coordinates: Job.line is the number of rows up from the cursor, so
line 1 is the bottom row of the board.

Invariants maintained by every function here:
- Lines of the jobs in the table are exactly {1..N}
- Completed jobs sit above every running job (higher line numbers)
- Among completed jobs, the earliest completed is highest
"""

from dataclasses import replace

from active_status.exceptions import TableCorruption
from active_status.types import Job, JobTable


def register(table: JobTable, job: Job) -> JobTable:
    """
    Add a new job on the bottom row.

    The caller prints a newline for the new row, which pushes every
    existing job one row further from the cursor.

    Args:
        table: Current job table
        job: The new job (its line is overwritten)

    Returns:
        New table with the job at line 1 and all other lines incremented
    """
    new_table = {job_id: replace(j, line=j.line + 1) for job_id, j in table.items()}
    new_table[job.id] = replace(job, line=1)
    return new_table


def move_job_up(table: JobTable, job_id: int, new_line: int) -> JobTable:
    """
    Move a job up to new_line, closing the gap it leaves.

    When new_line is the top line, every job above the moving job shifts
    down one. Otherwise jobs strictly between the old and new line shift
    down one and the job lands on new_line - 1, since its old line below
    has collapsed.
    """
    current_line = table[job_id].line

    if new_line == current_line:
        return table

    if new_line == len(table):
        return {
            jid: (
                replace(j, line=new_line)
                if jid == job_id
                else replace(j, line=j.line - 1)
                if j.line > current_line
                else j
            )
            for jid, j in table.items()
        }

    return {
        jid: (
            replace(j, line=new_line - 1)
            if jid == job_id
            else replace(j, line=j.line - 1)
            if current_line < j.line < new_line
            else j
        )
        for jid, j in table.items()
    }


def complete(table: JobTable, job_id: int, now: float) -> JobTable:
    """
    Mark a job complete and move it to just below the completed jobs.

    The job is highlighted (active) once more. If no job has completed yet
    it moves to the top line.

    Args:
        table: Current job table
        job_id: Job whose update stream closed
        now: Current clock time (seconds)

    Returns:
        New job table
    """
    completed_lines = [
        j.line for jid, j in table.items() if j.complete and jid != job_id
    ]
    new_line = min(completed_lines) if completed_lines else len(table)
    table = {
        **table,
        job_id: replace(table[job_id], complete=True, active=True, updated=now),
    }
    return move_job_up(table, job_id, new_line)


def promote_if_pinned(table: JobTable, before: Job, job_id: int) -> JobTable:
    """
    Move a just-updated pinned job to line 1.

    Only when its visible fields actually changed, so no-op updates (the
    same summary again, a dim marker) never reorder the board.

    Args:
        table: Job table after the update was applied
        before: The job as it was before the update
        job_id: The updated job

    Returns:
        New job table
    """
    job = table[job_id]
    if not (
        job.pinned
        and job.active
        and job.line != 1
        and before.visible_fields() != job.visible_fields()
    ):
        return table

    old_line = job.line
    return {
        jid: (
            replace(j, line=1)
            if jid == job_id
            else replace(j, line=j.line + 1)
            if j.line < old_line
            else j
        )
        for jid, j in table.items()
    }


def retire(table: JobTable) -> JobTable:
    """
    Drop completed jobs that have finished dimming.

    Works down from the top line and stops at the first job that is still
    running or still highlighted, so the remaining jobs keep lines 1..M.
    The retired rows stay on screen; they are just no longer tracked.
    """
    retired = set()
    for job in sorted(table.values(), key=lambda j: j.line, reverse=True):
        if not job.complete or job.active:
            break
        retired.add(job.id)
    if not retired:
        return table
    return {jid: j for jid, j in table.items() if jid not in retired}


def check_lines(table: JobTable) -> None:
    """
    Verify the line invariants of a job table.

    Raises:
        TableCorruption: Lines are not exactly 1..N, or a completed job
                         sits below a running job
    """
    lines = sorted(j.line for j in table.values())
    if lines != list(range(1, len(table) + 1)):
        raise TableCorruption(table, f"lines {lines} are not 1..{len(table)}")

    completed = [j.line for j in table.values() if j.complete]
    running = [j.line for j in table.values() if not j.complete]
    if completed and running and min(completed) < max(running):
        raise TableCorruption(
            table,
            f"completed job at line {min(completed)} is below running job "
            f"at line {max(running)}",
        )

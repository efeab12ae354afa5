"""
Output sink and output redirection.

The terminal is the one shared mutable resource of the board:
- OutputSink: A text stream plus the lock that serializes every write to it
- redirect_output: Send the application's stdout/stderr to files while the
  board keeps writing to the terminal
"""

import sys
import threading
from collections.abc import Iterator
from contextlib import contextmanager, redirect_stderr, redirect_stdout
from pathlib import Path
from typing import TextIO


class OutputSink:
    """
    A text stream with mutual exclusion around writes.

    The stream is captured at construction, so later redirection of
    sys.stdout (see redirect_output) does not affect the board.

    Example:
        sink = OutputSink()
        sink.write("status\\n")
        with sink.exclusive() as out:
            out.write("several ")
            out.write("pieces, uninterrupted\\n")
    """

    def __init__(self, stream: TextIO | None = None) -> None:
        """
        Initialize sink.

        Args:
            stream: Stream to write to (defaults to the current sys.stdout)
        """
        self.stream = stream if stream is not None else sys.stdout
        self._lock = threading.RLock()

    @contextmanager
    def exclusive(self) -> Iterator[TextIO]:
        """Hold the sink lock, yielding the stream; flushes on exit."""
        with self._lock:
            try:
                yield self.stream
            finally:
                self.stream.flush()

    def write(self, text: str) -> None:
        """Write text atomically and flush."""
        with self.exclusive() as stream:
            stream.write(text)


@contextmanager
def redirect_output(base_path: str | Path) -> Iterator[None]:
    """
    Redirect sys.stdout and sys.stderr to files.

    The files are `<base_path>.out` and `<base_path>.err`, opened for
    append; missing parent directories are created. The status board should
    already be created, so that its sink still points at the terminal.

    Args:
        base_path: Path prefix for the two files

    Example:
        board = create_board()
        with redirect_output("logs/build"):
            await run_build(board)
    """
    base = Path(base_path)
    base.parent.mkdir(parents=True, exist_ok=True)
    out_path = base.with_name(base.name + ".out")
    err_path = base.with_name(base.name + ".err")

    with (
        open(out_path, "a", encoding="utf-8") as out,
        open(err_path, "a", encoding="utf-8") as err,
        redirect_stdout(out),
        redirect_stderr(err),
    ):
        yield

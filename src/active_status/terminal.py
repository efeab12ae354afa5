"""
Terminal capability strings via tput.

This module maps abstract cursor actions (cursor up, save/restore position,
clear to end of line, cursor visibility) to the escape sequences for the
current terminal type by invoking `tput -T<type>` in a subprocess.

- Results are memoized per argument tuple; tput runs once per distinct call
- A failed lookup (tput missing, unknown capability) returns "" and logs a
  warning, so rendering degrades instead of aborting
"""

import logging
import subprocess

logger = logging.getLogger(__name__)


class TerminalCapabilities:
    """
    Provider of terminal capability strings for one terminal type.

    Example:
        caps = TerminalCapabilities("xterm-256color")
        sys.stdout.write(caps.cursor_up(3) + caps.clear_to_eol())
    """

    def __init__(self, terminal_type: str = "xterm", timeout: float = 5.0) -> None:
        """
        Initialize capability provider.

        Args:
            terminal_type: Value passed to tput -T
            timeout: Seconds to wait for each tput invocation
        """
        self.terminal_type = terminal_type
        self._timeout = timeout
        self._cache: dict[tuple[str, ...], str] = {}

    def tput(self, *args: object) -> str:
        """
        Return the output of `tput -T<type> <args>`, memoized.

        Args:
            *args: Capability name and numeric/string arguments

        Returns:
            The capability string, or "" if the lookup failed
        """
        key = tuple(str(a) for a in args)
        if key not in self._cache:
            self._cache[key] = self._lookup(key)
        return self._cache[key]

    def _lookup(self, args: tuple[str, ...]) -> str:
        command = ["tput", f"-T{self.terminal_type}", *args]
        try:
            proc = subprocess.run(
                command,
                capture_output=True,
                text=True,
                timeout=self._timeout,
            )
        except (OSError, subprocess.SubprocessError) as e:
            logger.warning(f"Unable to invoke tput {' '.join(args)}: {e}")
            return ""

        if proc.returncode != 0:
            logger.warning(
                f"Unable to invoke tput {' '.join(args)}: {proc.stderr.strip()}"
            )
            return ""
        return proc.stdout

    def cursor_up(self, lines: int) -> str:
        return self.tput("cuu", lines)

    def column(self, column: int) -> str:
        """Move to an absolute column (0 is leftmost)."""
        return self.tput("hpa", column)

    def clear_to_eol(self) -> str:
        return self.tput("el")

    def save_cursor(self) -> str:
        return self.tput("sc")

    def restore_cursor(self) -> str:
        return self.tput("rc")

    def hide_cursor(self) -> str:
        return self.tput("civis")

    def show_cursor(self) -> str:
        return self.tput("cnorm")

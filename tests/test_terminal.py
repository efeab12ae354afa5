"""Tests for tput-backed terminal capabilities."""

import logging
import subprocess
from unittest.mock import patch

from active_status.terminal import TerminalCapabilities


def completed(stdout: str = "", returncode: int = 0, stderr: str = ""):
    return subprocess.CompletedProcess(
        args=["tput"], returncode=returncode, stdout=stdout, stderr=stderr
    )


class TestTerminalCapabilities:
    def test_invokes_tput_with_terminal_type(self):
        caps = TerminalCapabilities("vt100")
        with patch("subprocess.run", return_value=completed("\x1b[3A")) as run:
            assert caps.cursor_up(3) == "\x1b[3A"

        command = run.call_args.args[0]
        assert command == ["tput", "-Tvt100", "cuu", "3"]
        assert run.call_args.kwargs["capture_output"] is True

    def test_results_are_memoized(self):
        caps = TerminalCapabilities()
        with patch("subprocess.run", return_value=completed("\x1b[K")) as run:
            caps.clear_to_eol()
            caps.clear_to_eol()
            caps.tput("el")
        assert run.call_count == 1

    def test_distinct_arguments_are_separate_lookups(self):
        caps = TerminalCapabilities()
        with patch("subprocess.run", return_value=completed("x")) as run:
            caps.cursor_up(1)
            caps.cursor_up(2)
        assert run.call_count == 2

    def test_nonzero_exit_returns_empty(self, caplog):
        caps = TerminalCapabilities("nonesuch")
        result = completed(returncode=3, stderr="unknown terminal")
        with caplog.at_level(logging.WARNING, logger="active_status.terminal"):
            with patch("subprocess.run", return_value=result):
                assert caps.save_cursor() == ""
        assert "unknown terminal" in caplog.text

    def test_missing_tput_returns_empty(self, caplog):
        caps = TerminalCapabilities()
        with caplog.at_level(logging.WARNING, logger="active_status.terminal"):
            with patch("subprocess.run", side_effect=FileNotFoundError("tput")):
                assert caps.hide_cursor() == ""
                assert caps.hide_cursor() == ""
        assert "Unable to invoke tput civis" in caplog.text
        # The failure is memoized too, so it is logged once
        assert caplog.text.count("Unable to invoke tput") == 1

    def test_capability_names(self):
        caps = TerminalCapabilities()
        with patch("subprocess.run", return_value=completed("")) as run:
            caps.column(0)
            caps.restore_cursor()
            caps.show_cursor()
        names = [call.args[0][2] for call in run.call_args_list]
        assert names == ["hpa", "rc", "cnorm"]

"""Shared fixtures: a fake terminal and a polling helper."""

import asyncio
import io
import time
from collections.abc import Callable

import pytest

from active_status.output import OutputSink
from active_status.terminal import TerminalCapabilities


class FakeCapabilities(TerminalCapabilities):
    """Capabilities that render as readable tokens instead of running tput."""

    def tput(self, *args: object) -> str:
        return "<" + " ".join(str(a) for a in args) + ">"


@pytest.fixture(autouse=True)
def board_environment(monkeypatch):
    """Keep the developer's environment out of board settings."""
    monkeypatch.setenv("TERM", "xterm")
    for name in (
        "DIM_AFTER_MILLIS",
        "REFRESH_INTERVAL_MILLIS",
        "UPDATE_QUEUE_SIZE",
        "COMPOSITE_QUEUE_SIZE",
        "REGISTRATION_QUEUE_SIZE",
        "FAILURE_HISTORY",
        "TERMINAL_TYPE",
        "MODE",
    ):
        monkeypatch.delenv(f"ACTIVE_STATUS_{name}", raising=False)


@pytest.fixture
def output() -> io.StringIO:
    return io.StringIO()


@pytest.fixture
def sink(output) -> OutputSink:
    return OutputSink(output)


@pytest.fixture
def capabilities() -> TerminalCapabilities:
    return FakeCapabilities()


@pytest.fixture
def wait_until():
    """Poll a predicate until it holds or the timeout expires."""

    async def _wait_until(predicate: Callable[[], bool], timeout: float = 2.0) -> bool:
        deadline = time.monotonic() + timeout
        while time.monotonic() < deadline:
            if predicate():
                return True
            await asyncio.sleep(0.005)
        return predicate()

    return _wait_until

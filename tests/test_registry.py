"""Tests for the process-wide, name-keyed board."""

import io
import logging

import pytest
from rich.console import Console

from active_status import registry
from active_status.minimal import MinimalBoard


@pytest.fixture(autouse=True)
def reset_registry():
    registry._board = None
    registry._jobs.clear()
    yield
    registry._board = None
    registry._jobs.clear()


@pytest.fixture
def console():
    return Console(file=io.StringIO(), width=200)


class TestWithoutBoard:
    @pytest.mark.asyncio
    async def test_every_call_is_a_noop(self):
        assert not registry.active_board()
        update = await registry.add_job("fetch")
        update("ignored")
        registry.update_job("fetch", "ignored")
        registry.stop_job("fetch")
        await registry.shutdown()
        assert registry._jobs == {}


class TestWithBoard:
    @pytest.mark.asyncio
    async def test_named_jobs(self, console):
        registry.init_status_board(MinimalBoard(console=console))
        assert registry.active_board()

        update = await registry.add_job("fetch", prefix="fetch: ")
        update("started")
        registry.update_job("fetch", "halfway")
        registry.stop_job("fetch")
        assert "fetch" not in registry._jobs

        await registry.shutdown()
        assert not registry.active_board()
        assert console.file.getvalue().splitlines() == ["fetch: started", "fetch: halfway"]

    @pytest.mark.asyncio
    async def test_unknown_name_is_logged(self, console, caplog):
        registry.init_status_board(MinimalBoard(console=console))
        with caplog.at_level(logging.DEBUG, logger="active_status.registry"):
            registry.update_job("missing", "hello")
        assert "unknown job 'missing'" in caplog.text
        await registry.shutdown()

    @pytest.mark.asyncio
    async def test_shutdown_forgets_jobs(self, console):
        registry.init_status_board(MinimalBoard(console=console))
        await registry.add_job("a")
        await registry.add_job("b")
        await registry.shutdown()
        assert registry._jobs == {}

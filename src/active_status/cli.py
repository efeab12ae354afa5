"""active-status CLI - demonstrate the status board in a terminal."""

import asyncio
import contextlib
import logging
from pathlib import Path

import typer
from rich.console import Console

from active_status.board import create_board
from active_status.demo import start_batmobile
from active_status.exceptions import ConfigurationError
from active_status.output import OutputSink, redirect_output

app = typer.Typer(
    name="active-status",
    help="Live, in-place status of concurrent jobs in the terminal",
    no_args_is_help=True,
)


@app.callback()
def main_callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log board diagnostics"),
) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@app.command("demo")
def demo(
    minimal: bool = typer.Option(
        False, "--minimal", "-m", help="Print a line per change instead of updating in place"
    ),
    redirect: Path | None = typer.Option(
        None, "--redirect", "-r", help="Send other stdout/stderr to <path>.out/.err"
    ),
    dim_after: int = typer.Option(1000, "--dim-after", help="Milliseconds before a job dims"),
    refresh: int = typer.Option(100, "--refresh", help="Refresh interval in milliseconds"),
) -> None:
    """Run the Batmobile launch sequence demo."""
    console = Console()

    async def _run() -> None:
        # Boards capture stdout before any redirection
        overrides = {"dim_after_millis": dim_after, "refresh_interval_millis": refresh}
        if minimal:
            overrides["mode"] = "minimal"
        board = create_board(sink=OutputSink(), **overrides)
        with redirect_output(redirect) if redirect else contextlib.nullcontext():
            await start_batmobile(board)

    try:
        asyncio.run(_run())
    except ConfigurationError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)
    except KeyboardInterrupt:
        console.print("\n[yellow]Demo interrupted[/yellow]")
        raise typer.Exit(1)


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()

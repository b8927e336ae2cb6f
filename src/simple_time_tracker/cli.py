"""Command-line interface for the time tracker."""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Optional

import typer

from .config import TrackerSettings
from .logstore import LogStoreError
from .paths import get_log_path
from .reporting import format_total

app = typer.Typer(help="Track how long you actively use the computer each day.")
PACKAGE_LOGGER = "simple_time_tracker"


@app.callback(no_args_is_help=True)
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logs.")) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )


def _fail(message: str) -> None:
    typer.secho(message, fg=typer.colors.RED, err=True)
    raise typer.Exit(code=1)


def _show_debug_logs(debug: bool) -> None:
    if debug:
        logging.getLogger(PACKAGE_LOGGER).setLevel(logging.DEBUG)


@app.command()
def track(
    log_path: Optional[Path] = typer.Option(
        None,
        "--log",
        path_type=Path,
        help="Location of the activity log.",
    ),
    idle_wait_seconds: int = typer.Option(
        300,
        "--idle-wait",
        min=1,
        help="Seconds without input before time counts as idle.",
    ),
    tick_seconds: float = typer.Option(
        2.0,
        "--interval",
        min=0.1,
        help="Sampling interval in seconds.",
    ),
    debug: bool = typer.Option(
        False,
        "--debug",
        help="Log every tick and every log line considered.",
    ),
) -> None:
    """Track active time until interrupted."""
    from .tracker import ActivityTracker

    try:
        _show_debug_logs(debug)
        settings = TrackerSettings.from_options(
            log_path or get_log_path(),
            idle_wait_seconds=idle_wait_seconds,
            debug=debug,
            tick_seconds=tick_seconds,
        )
        tracker = ActivityTracker(settings)
        tracker.run_forever()
        typer.echo(f"Active time today: {format_total(*tracker.total_time_today())}")
    except (LogStoreError, ValueError) as exc:
        _fail(str(exc))


@app.command()
def total(
    log_path: Optional[Path] = typer.Option(
        None,
        "--log",
        path_type=Path,
        help="Location of the activity log.",
    ),
) -> None:
    """Print the active time recorded today."""
    from .reporting import SummaryPrinter

    try:
        SummaryPrinter(log_path or get_log_path()).print_today(int(time.time()))
    except LogStoreError as exc:
        _fail(str(exc))


@app.command()
def web(
    host: str = typer.Option("127.0.0.1", "--host", help="Interface to bind the dashboard."),
    port: int = typer.Option(
        8765, "--port", min=1, max=65535, help="TCP port for the dashboard."
    ),
    log_path: Optional[Path] = typer.Option(
        None, "--log", path_type=Path, help="Location of the activity log."
    ),
    idle_wait_seconds: int = typer.Option(
        300,
        "--idle-wait",
        min=1,
        help="Seconds without input before time counts as idle.",
    ),
    tick_seconds: float = typer.Option(
        2.0,
        "--interval",
        min=0.1,
        help="Sampling interval in seconds.",
    ),
    debug: bool = typer.Option(
        False,
        "--debug",
        help="Log every tick and every log line considered.",
    ),
    open_browser: bool = typer.Option(
        True,
        "--open-browser/--no-open-browser",
        help="Automatically open today's total in your default browser.",
    ),
) -> None:
    """Track in the background and serve status and totals over HTTP."""
    from .server_runner import run_dashboard

    try:
        _show_debug_logs(debug)
        settings = TrackerSettings.from_options(
            log_path or get_log_path(),
            idle_wait_seconds=idle_wait_seconds,
            debug=debug,
            tick_seconds=tick_seconds,
        )
        run_dashboard(settings, host=host, port=port, open_browser=open_browser)
    except (LogStoreError, ValueError) as exc:
        _fail(str(exc))

"""Watch command: re-analyze on every change until interrupted."""

import threading
from pathlib import Path
from typing import Optional

import typer

from ..analysis.snapshot import AnalysisSnapshot
from ..exceptions import ZombieDetectorError
from ..logging_config import setup_logging
from ..report import build_findings
from ..service import AnalysisService
from ..watcher import FileWatcher
from . import app
from ._common import console, resolve_config


@app.command()
def watch(
    path: Path = typer.Argument(
        Path("."),
        help="Project root to watch (default: current directory)",
        exists=True,
        file_okay=False,
        dir_okay=True,
        readable=True,
    ),
    no_tests: bool = typer.Option(
        False,
        "--no-tests",
        help="Do not treat test directories as entry points",
    ),
    config: Optional[Path] = typer.Option(
        None,
        "-c",
        "--config",
        help="Configuration file (TOML)",
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True,
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable debug logging",
    ),
):
    """
    Watch a project and print a summary after each analysis run.

    Press Ctrl+C to stop.
    """
    setup_logging(verbose=verbose)
    root = path.resolve()

    try:
        settings = resolve_config(config=config, no_tests=no_tests, verbose=verbose)
    except ZombieDetectorError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    service = AnalysisService(root, settings)

    def on_snapshot(snapshot: Optional[AnalysisSnapshot]) -> None:
        if snapshot is None:
            console.print("[yellow]No PHP files found.[/yellow]")
            return
        findings = build_findings(snapshot, settings.report_magic_methods)
        dead = sum(1 for f in findings if f.status == "dead")
        console.print(
            f"[bold cyan]Analysis complete[/bold cyan]  "
            f"[red]{dead} dead[/red]  [yellow]{len(findings) - dead} zombie[/yellow]"
        )

    service.add_listener(on_snapshot)
    watcher = FileWatcher(service, root)

    console.print(f"Watching [blue]{root}[/blue] (Ctrl+C to stop)")
    service.refresh()
    watcher.start()
    try:
        threading.Event().wait()
    except KeyboardInterrupt:
        console.print("\n[yellow]Stopping...[/yellow]")
    finally:
        watcher.stop()
        service.dispose()

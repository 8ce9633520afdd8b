"""Entry points command: list the files analysis starts from."""

from pathlib import Path
from typing import Optional

import typer
from rich.table import Table

from ..analysis.entry_points import EntryPointPolicy
from ..exceptions import ZombieDetectorError
from ..frontend.source import collect_php_files, relative_path
from . import app
from ._common import console, resolve_config


@app.command("entry-points")
def entry_points(
    path: Path = typer.Argument(
        Path("."),
        help="Project root (default: current directory)",
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
):
    """
    List the PHP files treated as entry points, with the rule that selected each.
    """
    root = path.resolve()
    try:
        settings = resolve_config(config=config, no_tests=no_tests)
        files = collect_php_files(root, settings)
    except ZombieDetectorError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    policy = EntryPointPolicy(root, settings)
    table = Table(show_header=True, show_lines=False, pad_edge=True)
    table.add_column("File", min_width=24)
    table.add_column("Rule", style="dim")

    selected = 0
    for file in files:
        reasons = policy.reasons(file.resolve().as_posix())
        if reasons:
            selected += 1
            table.add_row(relative_path(file.resolve(), root), ", ".join(reasons))

    if not selected:
        console.print("[yellow]No entry point files found.[/yellow]")
        return

    console.print(table)
    console.print(f"[bold]{selected}[/bold] of {len(files)} PHP files are entry points")

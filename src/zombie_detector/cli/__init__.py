"""CLI entry point: registers all subcommands."""

import typer

from .. import __version__
from ._common import console

app = typer.Typer(
    name="zombie-detector",
    help="zombie-detector - Dead & Zombie Code Analysis for PHP",
    add_completion=False,
    rich_markup_mode="rich",
)


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        help="Show version and exit",
    ),
):
    """Find PHP classes, traits, functions and methods unreachable from entry points."""
    if version:
        console.print(f"[bold cyan]zombie-detector[/bold cyan] version [green]{__version__}[/green]")
        raise typer.Exit(0)
    if ctx.invoked_subcommand is None:
        console.print(ctx.get_help())
        raise typer.Exit(0)


# Import subcommands to register them
from .analyze import analyze as _analyze  # noqa: F401, E402
from .entry_points import entry_points as _entry_points  # noqa: F401, E402
from .watch import watch as _watch  # noqa: F401, E402

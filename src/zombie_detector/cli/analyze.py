"""Analyze command: one full run, printed as a table or JSON."""

from pathlib import Path
from typing import Optional

import typer

from ..analysis.pipeline import run_analysis
from ..exceptions import ZombieDetectorError
from ..logging_config import setup_logging
from ..report import build_findings, findings_to_json, summarize
from . import app
from ._common import console, findings_table, resolve_config
from .progress import ProgressReporter, SilentReporter


@app.command()
def analyze(
    path: Path = typer.Argument(
        Path("."),
        help="Project root to analyze (default: current directory)",
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
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Output in machine-readable JSON format",
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
    quiet: bool = typer.Option(
        False,
        "--quiet",
        "-q",
        help="Only log errors",
    ),
    include_magic: bool = typer.Option(
        False,
        "--include-magic",
        help="Also report methods starting with __ (constructors, magic methods)",
    ),
    fail_on_findings: bool = typer.Option(
        False,
        "--fail-on-findings",
        help="Exit 1 if any dead or zombie symbol is found",
    ),
):
    """
    Find dead and zombie PHP code.

    Dead code is unreachable from every entry point and referenced by nothing.
    Zombie code is unreachable but still referenced, only by other unreachable code.

    [bold cyan]Examples:[/bold cyan]

      zombie-detector analyze

      zombie-detector analyze path/to/project --no-tests

      zombie-detector analyze --json --fail-on-findings
    """
    logger = setup_logging(verbose=verbose, quiet=quiet)
    root = path.resolve()

    try:
        settings = resolve_config(
            config=config,
            no_tests=no_tests,
            include_magic=include_magic,
            verbose=verbose,
            quiet=quiet,
        )

        reporter = SilentReporter() if json_output or quiet else ProgressReporter(console)
        snapshot = reporter.run(
            lambda on_progress: run_analysis(root, settings, on_progress=on_progress)
        )

    except ZombieDetectorError as e:
        logger.error(f"{e.__class__.__name__}: {e}")
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    except KeyboardInterrupt:
        logger.info("Analysis interrupted by user")
        console.print("\n[yellow]Analysis interrupted[/yellow]")
        raise typer.Exit(130)

    findings = build_findings(snapshot, settings.report_magic_methods) if snapshot else []

    if json_output:
        print(findings_to_json(snapshot, findings))
    elif snapshot is None:
        console.print("[yellow]No PHP files found.[/yellow]")
    else:
        _output_rich(snapshot, findings, root)

    if fail_on_findings and findings:
        raise typer.Exit(1)


def _output_rich(snapshot, findings, root: Path) -> None:
    console.print()
    if not findings:
        console.print("[green]No dead or zombie code found.[/green]")
        return

    console.print(findings_table(findings, root))
    console.print()

    counts = summarize(snapshot)
    parts = []
    for kind, by_status in counts.items():
        total = by_status["dead"] + by_status["zombie"]
        if total:
            parts.append(f"{kind}: {by_status['dead']} dead, {by_status['zombie']} zombie")
    console.print(f"[bold]{len(findings)} finding(s)[/bold]  [dim]{'; '.join(parts)}[/dim]")

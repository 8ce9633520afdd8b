"""Shared CLI helpers."""

from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.table import Table

from ..config import DetectorConfig, load_config
from ..report import Finding

console = Console()


def resolve_config(
    config: Optional[Path] = None,
    no_tests: bool = False,
    include_magic: bool = False,
    verbose: bool = False,
    quiet: bool = False,
) -> DetectorConfig:
    """Build configuration from CLI options."""
    overrides = {}
    if no_tests:
        overrides["include_tests"] = False
    if include_magic:
        overrides["report_magic_methods"] = True
    if verbose:
        overrides["verbose"] = True
    if quiet:
        overrides["quiet"] = True
    return load_config(config_file=config, **overrides)


def display_path(path: str, root: Path) -> str:
    """Project-relative path for display, absolute when outside the project."""
    try:
        return Path(path).relative_to(root).as_posix()
    except ValueError:
        return path


def findings_table(findings: list[Finding], root: Path) -> Table:
    table = Table(show_header=True, show_lines=False, pad_edge=True)
    table.add_column("Status")
    table.add_column("Kind")
    table.add_column("Symbol", min_width=24)
    table.add_column("Location", style="dim")

    for finding in findings:
        status = "[red]dead[/red]" if finding.status == "dead" else "[yellow]zombie[/yellow]"
        location = f"{display_path(finding.path, root)}:{finding.line}" if finding.path else ""
        table.add_row(status, finding.symbol.kind.value, finding.symbol.label, location)
    return table

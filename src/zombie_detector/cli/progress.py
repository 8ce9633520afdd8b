"""Progress reporting: wraps Rich or runs silently."""

from rich.console import Console
from rich.progress import (
    BarColumn,
    Progress,
    SpinnerColumn,
    TaskProgressColumn,
    TextColumn,
    TimeElapsedColumn,
)

from ..analysis.pipeline import phase_percent


class ProgressReporter:
    """Rich progress bar driven by pipeline phase messages."""

    def __init__(self, console: Console):
        self.console = console

    def run(self, callback):
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            TaskProgressColumn(),
            TimeElapsedColumn(),
            console=self.console,
            transient=True,
        ) as progress:
            task = progress.add_task("Starting...", total=100)

            def on_progress(message: str) -> None:
                pct = phase_percent(message)
                progress.update(
                    task,
                    description=message,
                    completed=pct * 100 if pct is not None else None,
                )

            result = callback(on_progress)
            progress.update(task, description="Done", completed=100)
            return result


class SilentReporter:
    """No-op reporter for --json and --quiet modes."""

    def run(self, callback):
        return callback(None)

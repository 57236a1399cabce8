from pathlib import Path
import platform
import resource

import psutil
from rich.console import Console
from rich.progress import Progress, SpinnerColumn, BarColumn, TextColumn, TimeElapsedColumn, TimeRemainingColumn
from rich.table import Table
from rich import box

console = Console()


class MemoryTracker:
    """Context manager to track memory usage during a code block."""

    def __init__(self, name: str = "Operation", enabled: bool = True, console: Console = console):
        self.name = name
        self.enabled = enabled
        self.console = console
        self.peak_mb = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if not self.enabled:
            return

        # maxrss is in bytes on macOS, kilobytes on Linux
        peak_memory = resource.getrusage(resource.RUSAGE_SELF).ru_maxrss
        if platform.system() != 'Darwin':
            peak_memory *= 1024

        self.peak_mb = peak_memory / 1024 / 1024
        total_memory_mb = psutil.virtual_memory().total / (1024 * 1024)
        percentage_used = (self.peak_mb / total_memory_mb) * 100

        if percentage_used < 20.0:
            color = "green"
        elif percentage_used < 50.0:
            color = "yellow"
        else:
            color = "red"

        table = Table(title=f"{self.name} memory", box=box.ROUNDED, show_header=True, header_style="bold #FF8C00")
        table.add_column("Metric", style="#FF8C00", no_wrap=True, min_width=20)
        table.add_column("Value", justify="right", style=color)
        table.add_row("Peak RAM usage", f"{self.peak_mb / 1024:.2f} GB")
        table.add_row("Share of system RAM", f"{percentage_used:.1f}%")

        self.console.print()
        self.console.print(table)
        self.console.print()


class NullReporter:
    """Progress reporter that ignores everything."""

    def report(self, iteration: int, mean_advection: float, step_factor: float):
        pass

    def advance(self, count: int = 1):
        pass

    def finish(self):
        pass


class RichProgressReporter(NullReporter):
    """Progress bar with one unit per outer iteration."""

    def __init__(self, total: int, console: Console = console, description: str = "Matching colors..."):
        self.progress = Progress(
            SpinnerColumn("dots"),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            TextColumn("[progress.percentage]{task.percentage:>3.0f}%"),
            TimeElapsedColumn(),
            TimeRemainingColumn(),
            console=console,
            transient=True
        )
        self.task = self.progress.add_task(f"[#FF8C00]{description}", total=total)
        self.progress.start()

    def advance(self, count: int = 1):
        self.progress.update(self.task, advance=count)

    def finish(self):
        self.progress.stop()


class VerboseReporter(NullReporter):
    """Prints per-iteration diagnostics instead of a progress bar."""

    def __init__(self, console: Console = console):
        self.console = console

    def report(self, iteration: int, mean_advection: float, step_factor: float):
        self.console.print(
            f"iter {iteration}: mean advection {mean_advection} (step factor = {step_factor})",
            highlight=False
        )


def format_file_size(path: Path) -> str:
    """Format file size in human-readable format"""
    size = Path(path).stat().st_size
    for unit in ['B', 'KB', 'MB', 'GB']:
        if size < 1024.0:
            return f"{size:.1f} {unit}"
        size /= 1024.0
    return f"{size:.1f} TB"

"""Console reporter using Rich library for formatted CLI output.

Provides colorful, formatted output while commands run:
- A header naming the command, bucket and target
- Upload progress lines
- Upload and delete results
- A table of listed objects
"""

from datetime import datetime
from typing import Optional

from rich import box
from rich.console import Console
from rich.rule import Rule
from rich.table import Table

from shdw_drive.models import (
    DeleteResult,
    ObjectInfo,
    ProgressEvent,
    ProgressStatus,
    UploadOutcome,
)
from shdw_drive.reporters.base import Reporter

MIB = 1024 * 1024


def format_size(size: int) -> str:
    """Render a byte count in MB, as the listing shows it."""
    return f"{size / MIB:.2f} MB"


def format_timestamp(value: Optional[str]) -> str:
    if not value:
        return "-"
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00")).strftime("%Y-%m-%d %H:%M:%S")
    except ValueError:
        return value


class ConsoleReporter(Reporter):
    """Rich-based console reporter for CLI output.

    Args:
        quiet: If True, suppress progress output (results are still shown)
        console: Optional Console to print to
    """

    def __init__(self, quiet: bool = False, console: Optional[Console] = None):
        # Use legacy_windows=True for ASCII-safe output on Windows consoles
        self.console = console or Console(legacy_windows=True)
        self.quiet = quiet

    def on_command_start(self, command: str, bucket: str, target: str) -> None:
        if self.quiet:
            return
        title = f"[bold cyan]{command.capitalize()}: {bucket}[/bold cyan]"
        self.console.print(Rule(title, style="cyan", characters="-"))
        if target:
            self.console.print(f"  [dim]{target}[/dim]")

    def on_progress(self, event: ProgressEvent) -> None:
        if self.quiet or event.status != ProgressStatus.UPLOADING:
            return
        self.console.print(f"Upload progress: {event.percent:.2f}%")

    def on_upload_complete(self, outcome: UploadOutcome) -> None:
        self.console.print("[bold green]Upload complete![/bold green]")
        self.console.print(f"File location: {outcome.finalized_location}")
        for error in outcome.upload_errors:
            self.console.print(f"   [dim red]{error.file}: {error.error}[/dim red]")

    def on_delete_complete(self, result: DeleteResult) -> None:
        if result.success:
            self.console.print("[bold green]Delete operation successful[/bold green]")
            self.console.print(f"Server response: {result.message}")
        else:
            self.console.print("[bold red]Delete operation failed[/bold red]")
            self.console.print(f"Reason: {result.message}")

    def on_list_complete(self, bucket: str, objects: list[ObjectInfo]) -> None:
        if not objects:
            self.console.print("[yellow]No files found[/yellow]")
            return

        table = Table(
            title="",
            show_header=True,
            header_style="bold magenta",
            border_style="dim",
            box=box.ASCII,
        )
        table.add_column("Key", style="cyan", no_wrap=True)
        table.add_column("Size", justify="right", no_wrap=True)
        table.add_column("Last Modified", no_wrap=True)

        for obj in objects:
            table.add_row(obj.key, format_size(obj.size), format_timestamp(obj.last_modified))

        self.console.print(table)

    def on_error(self, command: str, error: Exception) -> None:
        self.console.print(f"[bold red]Error during {command}:[/bold red] {error}")

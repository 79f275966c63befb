"""Terminal output handling using Rich library.

This module provides the OutputHandler class for all CLI terminal output:
colored status lines, a spinner for long operations, and publish and pull
summaries. Supports verbosity levels and the --no-color flag.
"""

import os
from contextlib import contextmanager
from typing import Iterator, List, Optional

from rich.console import Console
from rich.live import Live
from rich.markup import escape
from rich.spinner import Spinner

from src.publisher.models import PublishResult, PublishStatus
from src.puller.puller import PullResult

from .models import PublishSummary

STATUS_STYLES = {
    PublishStatus.CREATED: ("green", "+"),
    PublishStatus.UPDATED: ("green", "↑"),
    PublishStatus.UNCHANGED: ("dim", "─"),
    PublishStatus.FAILED: ("red", "✗"),
}


class OutputHandler:
    """Handles all terminal output using Rich library.

    Attributes:
        verbosity: Verbosity level (0=summary, 1=info, 2=debug)
        console: Rich Console instance for output

    Example:
        >>> handler = OutputHandler(verbosity=1, no_color=False)
        >>> handler.success("Operation completed")
        >>> with handler.spinner("Publishing..."):
        ...     pass
    """

    def __init__(self, verbosity: int = 0, no_color: bool = False):
        self.verbosity = verbosity
        self.no_color = no_color
        self.console = Console(
            force_terminal=not no_color,
            no_color=no_color,
            highlight=False,
        )

    def success(self, message: str) -> None:
        self.console.print(f"[green]✓[/green] {message}")

    def error(self, message: str) -> None:
        self.console.print(f"[red]✗[/red] {message}", style="red")

    def warning(self, message: str) -> None:
        self.console.print(f"[yellow]⚠[/yellow] {message}", style="yellow")

    def info(self, message: str) -> None:
        """Display info message (only if verbosity >= 1)."""
        if self.verbosity >= 1:
            self.console.print(message)

    def print(self, message: str) -> None:
        self.console.print(message)

    @contextmanager
    def spinner(self, message: str) -> Iterator[None]:
        """Display a spinner while a single long operation runs.

        Without colors the message is printed once instead.
        """
        if self.no_color:
            self.console.print(message)
            yield
            return
        spinner = Spinner("dots", text=message)
        with Live(spinner, console=self.console, refresh_per_second=10, transient=True):
            yield

    def print_publish_results(self, results: List[PublishResult], content_root: Optional[str] = None) -> None:
        """Print one line per document, then a summary with color coding."""
        for result in results:
            style, symbol = STATUS_STYLES[result.status]
            path = result.document.absolute_path
            if content_root:
                path = os.path.relpath(path, content_root)
            line = f"  [{style}]{symbol}[/{style}] {result.status.value:<9} {escape(result.document.title)} ({escape(path)})"
            if result.status == PublishStatus.FAILED:
                line += f": {escape(result.reason or '')}"
            elif result.status != PublishStatus.UNCHANGED:
                changed = [
                    name for name, value in (
                        ("content", result.content_result),
                        ("images", result.image_result),
                        ("labels", result.label_result),
                    ) if value == "updated"
                ]
                if changed:
                    line += " " + escape(f"[{', '.join(changed)}]")
            self.console.print(line)

        summary = PublishSummary.from_results(results)
        self.console.print("\n[bold]Publish Summary:[/bold]")
        if summary.created > 0:
            self.console.print(f"  [green]+[/green] Created: {summary.created} page(s)")
        if summary.updated > 0:
            self.console.print(f"  [green]↑[/green] Updated: {summary.updated} page(s)")
        if summary.unchanged > 0:
            self.console.print(f"  [dim]─[/dim] Unchanged: {summary.unchanged} page(s)")
        if summary.failed > 0:
            self.console.print(f"  [red]✗[/red] Failed: {summary.failed} page(s)")

        if summary.total == 0:
            self.console.print("\n[yellow]No pages to publish[/yellow]")
        elif summary.failed > 0:
            self.console.print("\n[red]Publish completed with failures[/red]")
        elif summary.created == 0 and summary.updated == 0:
            self.console.print("\n[green]Already up to date. No changes published.[/green]")
        else:
            self.console.print("\n[green]Publish completed successfully[/green]")

    def print_pull_results(self, results: List[PullResult]) -> None:
        """Print one line per pulled page, then a summary."""
        for result in results:
            if result.success:
                self.console.print(f"  [blue]↓[/blue] {escape(result.page_title)} → {escape(result.file_path or '')}")
            else:
                label = result.page_title or result.page_id
                self.console.print(f"  [red]✗[/red] {escape(label)}: {escape(result.error or '')}")

        pulled = sum(1 for r in results if r.success)
        failed = len(results) - pulled
        self.console.print("\n[bold]Pull Summary:[/bold]")
        self.console.print(f"  [blue]↓[/blue] Pulled: {pulled} page(s)")
        if failed > 0:
            self.console.print(f"  [red]✗[/red] Failed: {failed} page(s)")
            self.console.print("\n[red]Pull completed with failures[/red]")
        else:
            self.console.print("\n[green]Pull completed successfully[/green]")

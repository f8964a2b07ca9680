"""Console reporting with semantic markers."""

from typing import Iterable, Optional

from rich.console import Console
from rich.markup import escape


class Reporter:
    """Writes the user-facing lines of a run."""

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console(highlight=False)

    def info(self, message: str) -> None:
        self.console.print(f'[blue]ℹ[/blue] {escape(message)}')

    def warning(self, message: str) -> None:
        self.console.print(f'[yellow]⚠[/yellow] {escape(message)}')

    def success(self, message: str) -> None:
        self.console.print(f'[green]✓[/green] {escape(message)}')

    def error(self, message: str) -> None:
        self.console.print(f'[red]✗[/red] {escape(message)}')

    def lines(self, items: Iterable[str]) -> None:
        """Print items verbatim, one per line."""
        for item in items:
            self.console.print(item, markup=False, highlight=False, soft_wrap=True)

import logging
from typing import Any, Optional

from rich.box import HEAVY, ROUNDED, SIMPLE
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from pagedrain.domain.interfaces.user_interface import UserInterface
from pagedrain.domain.models.batch import DrainResult

logger = logging.getLogger(__name__)

STOP_REASON_STYLES = {
    "exhausted": "green",
    "cancelled": "yellow",
    "max_pages": "yellow",
}


class ConsoleDisplay(UserInterface):
    """Concrete implementation of UserInterface using the rich library for console output."""

    def __init__(self, console: Optional[Console] = None):
        """Initializes the rich Console."""
        self._console = console or Console()

    @property
    def console(self) -> Console:
        """Get the Rich console instance for direct operations."""
        return self._console

    @console.setter
    def console(self, console: Console) -> None:
        self._console = console

    def display_output(self, output: str, **kwargs: Any) -> None:
        """Prints plain output, optionally styled via `style=`."""
        self.console.print(Text(str(output), style=kwargs.get("style", "")))

    def display_error(self, error_message: str, **kwargs: Any) -> None:
        """Displays an error message in a distinct style.

        Args:
            error_message: The error message to display.
        """
        panel = Panel(
            Text(error_message, style="white"),
            title="[bold red]Error[/bold red]",
            border_style="red",
            box=HEAVY,
            padding=(0, 1)
        )
        self.console.print(panel)

    def display_info(self, info_message: str, **kwargs: Any) -> None:
        panel = Panel(
            Text(info_message, style="white"),
            title="[bold blue]Info[/bold blue]",
            border_style="blue",
            box=SIMPLE,
            padding=(0, 1)
        )
        self.console.print(panel)

    def display_warning(self, warning_message: str, **kwargs: Any) -> None:
        logger.warning(f"Display warning: {warning_message}")
        panel = Panel(
            Text(warning_message, style="white"),
            title="[bold yellow]Warning[/bold yellow]",
            border_style="yellow",
            box=HEAVY,
            padding=(0, 1)
        )
        self.console.print(panel)

    def display_drain_summary(self, result: DrainResult, **kwargs: Any) -> None:
        """Displays the counters of a finished drain as a table.

        Args:
            result: The DrainResult to render.
            **kwargs: `title` overrides the table title.
        """
        table = Table(title=kwargs.get("title", "Drain summary"), box=ROUNDED, show_header=True)
        table.add_column("Metric", style="bold cyan")
        table.add_column("Value", justify="right")

        table.add_row("Pages processed", str(result.pages_processed))
        table.add_row("Items processed", str(result.items_processed))
        table.add_row("Final offset", str(result.final_offset))
        table.add_row("Page fetches", str(result.fetch_calls))
        table.add_row("Peak batches in flight", str(result.peak_in_flight))
        reason_style = STOP_REASON_STYLES.get(result.stop_reason, "white")
        table.add_row("Stop reason", f"[{reason_style}]{result.stop_reason}[/{reason_style}]")

        self.console.print(table)

import logging
from typing import Any, Mapping, Optional

from rich.box import HEAVY, ROUNDED, SIMPLE
from rich.console import Console
from rich.panel import Panel
from rich.syntax import Syntax
from rich.table import Table
from rich.text import Text

from localhub_cache.domain.interfaces.user_interface import UserInterface

logger = logging.getLogger(__name__)

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
        """Displays a cache value, highlighted as JSON.

        Args:
            output: JSON text of the value.
            **kwargs: Additional arguments including:
                - title: Panel title (default: "Value")
        """
        title = kwargs.get("title", "Value")
        panel = Panel(
            Syntax(str(output), "json", word_wrap=True),
            title=f"[bold white]{title}[/bold white]",
            title_align="left",
            border_style="blue",
            box=ROUNDED,
            padding=(0, 1)
        )
        self.console.print(panel)

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
        """Displays an informational message.

        Args:
            info_message: The informational message to display.
        """
        panel = Panel(
            Text(info_message, style="white"),
            title="[bold blue]Info[/bold blue]",
            border_style="blue",
            box=SIMPLE,
            padding=(0, 1)
        )
        self.console.print(panel)

    def display_warning(self, warning_message: str, **kwargs: Any) -> None:
        """Displays a warning message.

        Args:
            warning_message: The warning message to display.
        """
        logger.warning(f"Display warning: {warning_message}")
        panel = Panel(
            Text(warning_message, style="white"),
            title="[bold yellow]Warning[/bold yellow]",
            border_style="yellow",
            box=HEAVY,
            padding=(0, 1)
        )
        self.console.print(panel)

    def display_stats(self, stats: Mapping[str, Mapping[str, Any]]) -> None:
        """Renders one table row per tier with its statistics."""
        table = Table(title="Cache Statistics", show_header=True, box=ROUNDED, border_style="cyan", padding=(0, 1))
        table.add_column("Tier", style="bold cyan")
        table.add_column("Available", justify="center")
        table.add_column("Entries", justify="right")
        table.add_column("Bytes", justify="right")
        table.add_column("Details", style="dim")

        for tier_name, tier_stats in stats.items():
            if "max_size" in tier_stats:
                available = "yes"
                entries = f"{tier_stats['size']}/{tier_stats['max_size']}"
                size_bytes = tier_stats.get("total_approx_size_bytes")
                details = (
                    f"hits={tier_stats.get('hits', 0)} misses={tier_stats.get('misses', 0)} "
                    f"hit_rate={tier_stats.get('hit_rate', 0.0)}% "
                    f"expired={tier_stats.get('expired_but_not_yet_evicted', 0)}"
                )
            else:
                available = "yes" if tier_stats.get("available") else "[red]no[/red]"
                entries = str(tier_stats.get("entries", 0))
                size_bytes = tier_stats.get("usage_bytes")
                details = ""
            table.add_row(
                tier_name,
                available,
                entries,
                "-" if size_bytes is None else str(size_bytes),
                details,
            )

        self.console.print(table)

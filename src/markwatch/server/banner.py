"""Startup banner."""

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from markwatch import __version__
from markwatch.config.models import ServerConfig


def print_banner(config: ServerConfig, console: Console | None = None) -> None:
    """Print where the watcher reads from, writes to and serves."""
    console = console or Console()

    table = Table.grid(padding=(0, 2))
    table.add_column(style="bold")
    table.add_column()
    table.add_row("Watching", str(config.source_path))
    table.add_row("Document", str(config.output_path))
    table.add_row("Status", str(config.status_path))
    table.add_row("URL", f"{config.base_url}/")
    table.add_row("Debounce", f"{config.debounce_ms} ms")
    table.add_row("Poll", f"{config.poll_interval_ms} ms")

    console.print(
        Panel(
            table,
            title=f"[bold blue]markwatch[/bold blue] v{__version__}",
            expand=False,
        )
    )
    console.print("Press Ctrl+C to exit", style="dim")

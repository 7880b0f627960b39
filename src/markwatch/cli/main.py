"""CLI main entry point using Typer."""

import errno
import logging
import socket
import webbrowser
from pathlib import Path

import typer
import uvicorn
from rich.console import Console
from rich.logging import RichHandler

from markwatch.config.models import VALID_LOG_LEVELS, ServerConfig
from markwatch.config.settings import (
    DEBOUNCE_DELAY_MS,
    DEFAULT_HOST,
    DEFAULT_LOG_LEVEL,
    DEFAULT_OUTPUT_FILE,
    DEFAULT_PORT,
    DEFAULT_STATUS_FILE,
    POLL_INTERVAL_MS,
    WATCH_TIMEOUT_MS,
)

app = typer.Typer(
    name="markwatch",
    help="Watch a Markdown file and serve it as auto-refreshing HTML",
    add_completion=False,
)

console = Console()
err_console = Console(stderr=True)


def port_in_use(host: str, port: int) -> bool:
    """
    Return True if another socket already holds ``host:port``.

    Raises:
        OSError: If binding fails for a reason other than the port being taken
    """
    family = socket.AF_INET6 if ":" in host else socket.AF_INET
    with socket.socket(family, socket.SOCK_STREAM) as s:
        # Match the server socket so ports in TIME_WAIT are not reported as taken
        s.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        try:
            s.bind((host, port))
        except OSError as e:
            if e.errno == errno.EADDRINUSE:
                return True
            raise
    return False


def configure_logging(level: str) -> None:
    """Send log records to stderr through rich."""
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


@app.command()
def serve(
    source: Path = typer.Argument(
        ...,
        help="Path to the Markdown file to watch",
    ),
    port: int = typer.Option(
        DEFAULT_PORT,
        "--port",
        "-p",
        help="Port to bind server (1024-65535)",
    ),
    host: str = typer.Option(
        DEFAULT_HOST,
        "--host",
        "-h",
        help="Host to bind server",
    ),
    output: Path = typer.Option(
        Path(DEFAULT_OUTPUT_FILE),
        "--output",
        "-o",
        help="Where to write the rendered HTML document",
    ),
    status: Path = typer.Option(
        Path(DEFAULT_STATUS_FILE),
        "--status",
        "-s",
        help="Where to write the status record",
    ),
    debounce: int = typer.Option(
        DEBOUNCE_DELAY_MS,
        "--debounce",
        help="Quiet interval in ms before re-rendering",
    ),
    poll_interval: int = typer.Option(
        POLL_INTERVAL_MS,
        "--poll-interval",
        help="Browser poll interval in ms",
    ),
    no_open: bool = typer.Option(
        False,
        "--no-open",
        help="Don't open browser automatically",
    ),
    log_level: str = typer.Option(
        DEFAULT_LOG_LEVEL,
        "--log-level",
        "--log",
        "-l",
        help=f"Logging level ({'/'.join(VALID_LOG_LEVELS)})",
    ),
) -> None:
    """Watch SOURCE, re-render it on change and serve the result."""
    if not source.is_file():
        err_console.print(f"[red]Error:[/red] File '{source}' not found")
        raise typer.Exit(code=1)

    config = ServerConfig(
        source_path=source.absolute(),
        output_path=output.absolute(),
        status_path=status.absolute(),
        host=host,
        port=port,
        debounce_ms=debounce,
        poll_interval_ms=poll_interval,
        watch_timeout_ms=WATCH_TIMEOUT_MS,
        open_browser=not no_open,
        log_level=log_level.upper(),
    )

    try:
        config.validate()
    except ValueError as e:
        err_console.print(f"[red]✗[/red] Configuration error: {e}", style="bold")
        raise typer.Exit(code=2)

    try:
        taken = port_in_use(config.host, config.port)
    except OSError as e:
        err_console.print(f"[red]✗[/red] Cannot bind {config.host}:{config.port}: {e}", style="bold")
        raise typer.Exit(code=1)
    if taken:
        err_console.print(f"[red]✗[/red] Port {config.port} is already in use", style="bold")
        raise typer.Exit(code=5)

    configure_logging(config.log_level)

    from markwatch.renderer import DocumentRenderer
    from markwatch.server.app import create_app
    from markwatch.server.banner import print_banner
    from markwatch.watcher import FileObserver

    renderer = DocumentRenderer(config)
    observer = FileObserver(
        source_path=config.source_path,
        render=renderer.render,
        debounce_seconds=config.debounce_seconds,
        timeout_seconds=config.watch_timeout_seconds,
    )
    server_app = create_app(config, renderer=renderer, observer=observer)

    print_banner(config, console=console)

    # Open browser if requested
    if config.open_browser:
        import threading
        import time

        def open_browser_delayed() -> None:
            time.sleep(1.5)  # Wait for server to start
            webbrowser.open(f"{config.base_url}/")

        threading.Thread(target=open_browser_delayed, daemon=True).start()

    try:
        uvicorn.run(
            server_app,
            host=config.host,
            port=config.port,
            log_level=config.log_level.lower(),
            lifespan="on",
        )
    except KeyboardInterrupt:
        console.print("\n[yellow]Stopped[/yellow]")
        raise typer.Exit(code=0)


def main() -> None:
    """Main entry point."""
    app()


if __name__ == "__main__":
    main()

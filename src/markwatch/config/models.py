"""Core data models for markwatch."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

# Valid log level names
VALID_LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

# Watchdog event kinds that mean the file's content may have changed
CONTENT_EVENT_TYPES = ("created", "modified", "deleted", "moved")


@dataclass
class RenderStatus:
    """The status record polled by the browser to detect a new render."""

    timestamp: int  # Milliseconds since the Unix epoch

    @classmethod
    def empty(cls) -> "RenderStatus":
        """Fallback record served when no render is available."""
        return cls(timestamp=0)

    @classmethod
    def from_dict(cls, data: Any) -> "RenderStatus":
        """
        Build a status record from decoded JSON.

        Raises:
            ValueError: If the payload has no integer ``timestamp`` field
        """
        if not isinstance(data, dict):
            raise ValueError("Status record must be a JSON object")
        timestamp = data.get("timestamp")
        if not isinstance(timestamp, int) or isinstance(timestamp, bool):
            raise ValueError(f"Invalid status timestamp: {timestamp!r}")
        return cls(timestamp=timestamp)

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON responses."""
        return {"timestamp": self.timestamp}


@dataclass
class WatcherEvent:
    """Represents a file system event from the watcher."""

    event_type: str  # created, modified, deleted, moved, opened, closed, ...
    file_path: Path  # Absolute path to affected file
    timestamp: float  # Event timestamp
    dest_path: Path | None = None  # Destination of a move

    def is_content_change(self) -> bool:
        """Check if event may have changed the file's content."""
        return self.event_type in CONTENT_EVENT_TYPES

    def concerns(self, path: Path) -> bool:
        """Check if event touches ``path`` as its source or destination."""
        target = path.resolve()
        candidates = [self.file_path]
        if self.dest_path is not None:
            candidates.append(self.dest_path)
        return any(candidate.resolve() == target for candidate in candidates)


@dataclass
class RenderConfig:
    """Configuration for Markdown renderer."""

    extensions: list[str] = field(default_factory=list)  # Markdown extensions to enable
    extension_configs: dict[str, Any] = field(
        default_factory=dict
    )  # Extension-specific settings
    title: str | None = None  # Page title, defaults to the source file name

    @classmethod
    def default(cls) -> "RenderConfig":
        """Create default configuration using the converter's built-in rules."""
        return cls()


@dataclass
class ServerConfig:
    """Configuration for the watcher and web server."""

    source_path: Path  # Markdown file to watch
    output_path: Path = Path("output.html")  # Rendered document
    status_path: Path = Path("status.json")  # Status record
    host: str = "127.0.0.1"  # Bind address
    port: int = 8000  # Port number
    debounce_ms: int = 100  # Quiet interval before rendering
    poll_interval_ms: int = 500  # Browser poll interval
    watch_timeout_ms: int = 100  # Watch loop wake-up interval when idle
    open_browser: bool = False  # Auto-open browser on start
    log_level: str = "INFO"  # Logging level
    render: RenderConfig = field(default_factory=RenderConfig.default)

    @property
    def document_route(self) -> str:
        """URL path serving the rendered document."""
        return f"/{self.output_path.name}"

    @property
    def status_route(self) -> str:
        """URL path serving the status record."""
        return f"/{self.status_path.name}"

    @property
    def connect_host(self) -> str:
        """Host a local client connects to; wildcard binds map to loopback."""
        if self.host in ("", "0.0.0.0"):
            return "127.0.0.1"
        if self.host == "::":
            return "[::1]"
        if ":" in self.host and not self.host.startswith("["):
            return f"[{self.host}]"
        return self.host

    @property
    def base_url(self) -> str:
        """Root URL of the server."""
        return f"http://{self.connect_host}:{self.port}"

    @property
    def status_url(self) -> str:
        """Absolute status URL, usable from pages opened outside the server."""
        return f"{self.base_url}{self.status_route}"

    @property
    def debounce_seconds(self) -> float:
        return self.debounce_ms / 1000

    @property
    def watch_timeout_seconds(self) -> float:
        return self.watch_timeout_ms / 1000

    def validate(self) -> None:
        """Validate configuration values."""
        if not (1024 <= self.port <= 65535):
            raise ValueError("Port must be 1024-65535")
        if not self.source_path.exists():
            raise ValueError(f"File '{self.source_path}' not found")
        if not self.source_path.is_file():
            raise ValueError(f"Not a file: {self.source_path}")
        if self.debounce_ms < 0:
            raise ValueError("Debounce must not be negative")
        if not (0 < self.poll_interval_ms < 1000):
            raise ValueError("Poll interval must be 1-999 ms")
        if self.watch_timeout_ms <= 0:
            raise ValueError("Watch timeout must be positive")
        if self.output_path.name == self.status_path.name:
            raise ValueError("Document and status files must have different names")
        if self.log_level.upper() not in VALID_LOG_LEVELS:
            raise ValueError(f"Invalid log level: {self.log_level}")

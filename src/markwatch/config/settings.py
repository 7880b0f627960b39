"""Application settings and configuration."""

import os
from pathlib import Path

from markwatch.config.models import VALID_LOG_LEVELS, RenderConfig, ServerConfig

# Default settings
DEFAULT_HOST = os.getenv("MARKWATCH_HOST", "127.0.0.1")
DEFAULT_PORT = int(os.getenv("MARKWATCH_PORT", "8000"))
DEFAULT_LOG_LEVEL = os.getenv("MARKWATCH_LOG_LEVEL", "INFO")

# Output artifacts, relative to the working directory
DEFAULT_OUTPUT_FILE = "output.html"
DEFAULT_STATUS_FILE = "status.json"

# Debounce settings for file watcher
DEBOUNCE_DELAY_MS = int(os.getenv("MARKWATCH_DEBOUNCE_MS", "100"))

# Browser polling
POLL_INTERVAL_MS = int(os.getenv("MARKWATCH_POLL_INTERVAL_MS", "500"))

# Watch loop wake-up interval while idle
WATCH_TIMEOUT_MS = 100


def get_default_server_config(source_path: Path) -> ServerConfig:
    """Get default server configuration."""
    return ServerConfig(
        source_path=source_path,
        output_path=Path(DEFAULT_OUTPUT_FILE),
        status_path=Path(DEFAULT_STATUS_FILE),
        host=DEFAULT_HOST,
        port=DEFAULT_PORT,
        debounce_ms=DEBOUNCE_DELAY_MS,
        poll_interval_ms=POLL_INTERVAL_MS,
        watch_timeout_ms=WATCH_TIMEOUT_MS,
        open_browser=True,
        log_level=DEFAULT_LOG_LEVEL,
        render=RenderConfig.default(),
    )


__all__ = [
    "VALID_LOG_LEVELS",
    "DEFAULT_HOST",
    "DEFAULT_PORT",
    "DEFAULT_LOG_LEVEL",
    "DEFAULT_OUTPUT_FILE",
    "DEFAULT_STATUS_FILE",
    "DEBOUNCE_DELAY_MS",
    "POLL_INTERVAL_MS",
    "WATCH_TIMEOUT_MS",
    "get_default_server_config",
]

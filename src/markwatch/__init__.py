"""markwatch: watch a Markdown file and serve it as auto-refreshing HTML."""

__version__ = "0.1.0"
__author__ = "markwatch contributors"
__license__ = "MIT"

from markwatch.config.models import (
    RenderConfig,
    RenderStatus,
    ServerConfig,
    WatcherEvent,
)

__all__ = [
    "RenderConfig",
    "RenderStatus",
    "ServerConfig",
    "WatcherEvent",
    "__version__",
]

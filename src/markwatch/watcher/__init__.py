"""File system watching components for markwatch."""

from .observer import DebouncedEventHandler, FileObserver, WatcherError

__all__ = ["DebouncedEventHandler", "FileObserver", "WatcherError"]

"""Debounced file watching built on watchdog."""

import logging
import queue
import threading
import time
from pathlib import Path
from typing import Any, Callable

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from markwatch.config.models import WatcherEvent
from markwatch.renderer.writer import RenderError

logger = logging.getLogger(__name__)


class WatcherError(Exception):
    """Raised when the file system watch cannot be established."""

    pass


def _to_path(path: str | bytes) -> Path:
    if isinstance(path, bytes):
        return Path(path.decode("utf-8", errors="replace"))
    return Path(path)


class DebouncedEventHandler(FileSystemEventHandler):
    """Forwards content changes of a single file to a queue.

    Runs on the watchdog observer thread; the queue is drained by
    :class:`FileObserver`, which does the actual debouncing.
    """

    def __init__(self, watch_path: Path, events: "queue.Queue[WatcherEvent]") -> None:
        super().__init__()
        self.watch_path = watch_path
        self.events = events
        # (inode, size, mtime) of the file as last rendered
        self.rendered_stat: tuple[int, int, int] | None = None

    def snapshot(self) -> tuple[int, int, int] | None:
        """Current identity of the watched file, or None if it is missing."""
        try:
            st = self.watch_path.stat()
        except OSError:
            return None
        return (st.st_ino, st.st_size, st.st_mtime_ns)

    def _is_metadata_only(self, event: WatcherEvent) -> bool:
        # inotify reports chmod/chown as a modification; content and mtime are untouched
        if event.event_type != "modified" or self.rendered_stat is None:
            return False
        return self.snapshot() == self.rendered_stat

    def on_any_event(self, event: FileSystemEvent) -> None:
        if event.is_directory:
            return

        dest = getattr(event, "dest_path", None)
        watcher_event = WatcherEvent(
            event_type=event.event_type,
            file_path=_to_path(event.src_path),
            timestamp=time.time(),
            dest_path=_to_path(dest) if dest else None,
        )

        if not watcher_event.concerns(self.watch_path):
            return
        if not watcher_event.is_content_change():
            logger.debug(f"Ignoring {watcher_event.event_type} event for {self.watch_path}")
            return
        if self._is_metadata_only(watcher_event):
            logger.debug(f"Ignoring metadata change of {self.watch_path}")
            return

        logger.debug(f"File change detected: {self.watch_path} (type: {watcher_event.event_type})")
        self.events.put(watcher_event)


class FileObserver:
    """Watches one file and renders it once per burst of changes.

    The loop alternates between two states. While idle it blocks on the
    event queue for at most ``timeout_seconds``. Once an event arrives it
    waits ``debounce_seconds``, folds every event queued in the meantime
    into that one cycle and calls ``render`` if the file still exists.
    Renders happen on the worker thread only, so they never overlap.
    """

    def __init__(
        self,
        source_path: Path,
        render: Callable[[], Any],
        debounce_seconds: float = 0.1,
        timeout_seconds: float = 0.1,
    ) -> None:
        self.source_path = source_path.resolve()
        self.render = render
        self.debounce_seconds = debounce_seconds
        self.timeout_seconds = timeout_seconds
        self.events: "queue.Queue[WatcherEvent]" = queue.Queue()
        self.handler = DebouncedEventHandler(self.source_path, self.events)
        self._observer: Any = None
        self._worker: threading.Thread | None = None
        self._stopped = threading.Event()

    def start(self) -> None:
        """
        Start the watchdog observer and the worker thread.

        Raises:
            WatcherError: If the watch cannot be scheduled
        """
        # The caller has just rendered the file as it is now
        self.handler.rendered_stat = self.handler.snapshot()
        observer = Observer()
        try:
            # Watch the directory so editors that replace the file are still seen
            observer.schedule(self.handler, str(self.source_path.parent), recursive=False)
            observer.start()
        except OSError as e:
            raise WatcherError(f"Cannot watch {self.source_path}: {e}") from e
        self._observer = observer

        self._stopped.clear()
        self._worker = threading.Thread(target=self.run, name="markwatch-watch", daemon=True)
        self._worker.start()
        logger.info(f"Watching {self.source_path}")

    def stop(self) -> None:
        """Stop watching. Work already in progress is not waited for."""
        self._stopped.set()
        if self._observer is not None:
            self._observer.stop()
            self._observer.join(timeout=1)
            self._observer = None
        if self._worker is not None:
            self._worker.join(timeout=1)
            self._worker = None

    def run(self) -> None:
        """Run debounce cycles until :meth:`stop` is called."""
        while not self._stopped.is_set():
            self.run_once()

    def run_once(self) -> bool:
        """
        Run a single idle/debounce cycle.

        Returns:
            True if a render completed successfully
        """
        try:
            first = self.events.get(timeout=self.timeout_seconds)
        except queue.Empty:
            return False

        if self._stopped.wait(self.debounce_seconds):
            return False
        coalesced = 1 + self._drain()
        logger.debug(f"Debounced {coalesced} event(s), first: {first.event_type}")

        if not self.source_path.exists():
            logger.debug(f"{self.source_path} is gone, skipping render")
            return False

        stat = self.handler.snapshot()
        try:
            self.render()
        except RenderError as e:
            logger.error(f"Render error: {e}")
            return False
        except Exception:
            logger.exception(f"Unexpected error rendering {self.source_path}")
            return False
        self.handler.rendered_stat = stat
        return True

    def _drain(self) -> int:
        """Discard queued events, returning how many there were."""
        count = 0
        while True:
            try:
                self.events.get_nowait()
            except queue.Empty:
                return count
            count += 1

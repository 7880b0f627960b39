"""Tests for the debounced watch loop."""

from __future__ import annotations

import logging
import os
import threading
import time
from pathlib import Path

import pytest
from watchdog.events import (
    DirModifiedEvent,
    FileClosedEvent,
    FileCreatedEvent,
    FileDeletedEvent,
    FileModifiedEvent,
    FileMovedEvent,
)

from markwatch.config.models import ServerConfig, WatcherEvent
from markwatch.renderer import DocumentRenderer, RenderError
from markwatch.watcher import FileObserver

from .conftest import read_status


class CountingRender:
    """Render callable that records how often it was called."""

    def __init__(self, inner=None, error: Exception | None = None):
        self.calls = 0
        self.inner = inner
        self.error = error

    def __call__(self):
        self.calls += 1
        if self.error is not None:
            raise self.error
        if self.inner is not None:
            return self.inner()


def modified(path: Path) -> WatcherEvent:
    return WatcherEvent("modified", path, time.time())


@pytest.fixture
def render() -> CountingRender:
    return CountingRender()


@pytest.fixture
def observer(source_file: Path, render: CountingRender) -> FileObserver:
    return FileObserver(source_file, render, debounce_seconds=0.05, timeout_seconds=0.05)


# ---------------------------------------------------------------------------
# DebouncedEventHandler
# ---------------------------------------------------------------------------


class TestEventHandler:
    """Only content changes of the watched file reach the queue."""

    def test_modification_is_queued(self, observer: FileObserver, source_file: Path):
        observer.handler.dispatch(FileModifiedEvent(str(source_file)))
        event = observer.events.get_nowait()
        assert event.event_type == "modified"
        assert event.file_path == source_file

    @pytest.mark.parametrize("event_class", [FileCreatedEvent, FileDeletedEvent])
    def test_create_and_delete_are_queued(self, observer, source_file, event_class):
        observer.handler.dispatch(event_class(str(source_file)))
        assert observer.events.qsize() == 1

    def test_move_onto_watched_file_is_queued(self, observer, source_file, tmp_path):
        # Editors often save to a temp file then rename it over the original
        observer.handler.dispatch(FileMovedEvent(str(tmp_path / ".notes.md.swp"), str(source_file)))
        assert observer.events.qsize() == 1

    def test_other_files_are_ignored(self, observer, tmp_path):
        observer.handler.dispatch(FileModifiedEvent(str(tmp_path / "output.html")))
        assert observer.events.empty()

    def test_non_content_events_are_ignored(self, observer, source_file):
        observer.handler.dispatch(FileClosedEvent(str(source_file)))
        assert observer.events.empty()

    def test_directory_events_are_ignored(self, observer, source_file):
        observer.handler.dispatch(DirModifiedEvent(str(source_file.parent)))
        assert observer.events.empty()

    def test_modification_without_content_change_is_ignored(self, observer, source_file):
        observer.handler.rendered_stat = observer.handler.snapshot()
        os.chmod(source_file, 0o600)

        observer.handler.dispatch(FileModifiedEvent(str(source_file)))

        assert observer.events.empty()

    def test_modification_after_edit_is_queued(self, observer, source_file):
        observer.handler.rendered_stat = observer.handler.snapshot()
        source_file.write_text("# Hello\n\nmore text\n", encoding="utf-8")

        observer.handler.dispatch(FileModifiedEvent(str(source_file)))

        assert observer.events.qsize() == 1

    def test_create_is_queued_even_with_matching_stat(self, observer, source_file):
        observer.handler.rendered_stat = observer.handler.snapshot()
        observer.handler.dispatch(FileCreatedEvent(str(source_file)))
        assert observer.events.qsize() == 1

    def test_successful_render_records_file_state(self, observer, source_file):
        observer.events.put(modified(source_file))
        assert observer.run_once() is True
        assert observer.handler.rendered_stat == observer.handler.snapshot()

    def test_failed_render_keeps_previous_state(self, source_file):
        failing = CountingRender(error=RenderError("disk full"))
        observer = FileObserver(source_file, failing, debounce_seconds=0.01, timeout_seconds=0.05)
        observer.events.put(modified(source_file))

        assert observer.run_once() is False
        assert observer.handler.rendered_stat is None


# ---------------------------------------------------------------------------
# FileObserver.run_once
# ---------------------------------------------------------------------------


class TestDebounceCycle:
    def test_idle_timeout_does_not_render(self, observer, render):
        assert observer.run_once() is False
        assert render.calls == 0

    def test_single_event_renders_once(self, observer, render, source_file):
        observer.events.put(modified(source_file))
        assert observer.run_once() is True
        assert render.calls == 1
        assert observer.events.empty()

    def test_burst_is_coalesced(self, observer, render, source_file):
        for _ in range(5):
            observer.events.put(modified(source_file))

        assert observer.run_once() is True
        assert observer.run_once() is False
        assert render.calls == 1

    def test_events_during_quiet_interval_are_coalesced(self, source_file, render):
        observer = FileObserver(source_file, render, debounce_seconds=0.2, timeout_seconds=0.05)
        observer.events.put(modified(source_file))
        late = threading.Timer(0.05, lambda: observer.events.put(modified(source_file)))
        late.start()

        assert observer.run_once() is True
        late.join()
        assert render.calls == 1
        assert observer.events.empty()

    def test_deleted_file_is_skipped(self, observer, render, source_file):
        source_file.unlink()
        observer.events.put(WatcherEvent("deleted", source_file, time.time()))

        assert observer.run_once() is False
        assert render.calls == 0

    def test_recreated_file_is_rendered(self, observer, render, source_file):
        source_file.unlink()
        observer.events.put(WatcherEvent("deleted", source_file, time.time()))
        source_file.write_text("# Back\n", encoding="utf-8")
        observer.events.put(WatcherEvent("created", source_file, time.time()))

        assert observer.run_once() is True
        assert render.calls == 1

    def test_render_error_is_logged_and_loop_continues(self, source_file, caplog):
        failing = CountingRender(error=RenderError("disk full"))
        observer = FileObserver(source_file, failing, debounce_seconds=0.01, timeout_seconds=0.05)

        with caplog.at_level(logging.ERROR, logger="markwatch.watcher.observer"):
            observer.events.put(modified(source_file))
            assert observer.run_once() is False
            observer.events.put(modified(source_file))
            assert observer.run_once() is False

        assert failing.calls == 2
        assert "disk full" in caplog.text

    def test_stop_interrupts_debounce(self, source_file, render):
        observer = FileObserver(source_file, render, debounce_seconds=5, timeout_seconds=0.05)
        observer.events.put(modified(source_file))
        observer.stop()

        started = time.monotonic()
        assert observer.run_once() is False
        assert time.monotonic() - started < 1
        assert render.calls == 0

    def test_deleted_file_leaves_artifacts_unchanged(self, config: ServerConfig):
        renderer = DocumentRenderer(config)
        renderer.render()
        page_before = config.output_path.read_bytes()
        status_before = config.status_path.read_bytes()

        observer = FileObserver(config.source_path, renderer.render, 0.01, 0.05)
        config.source_path.unlink()
        observer.events.put(WatcherEvent("deleted", config.source_path, time.time()))

        assert observer.run_once() is False
        assert config.output_path.read_bytes() == page_before
        assert config.status_path.read_bytes() == status_before


# ---------------------------------------------------------------------------
# End to end with a real watchdog observer
# ---------------------------------------------------------------------------


def wait_for(predicate, timeout: float = 5.0) -> bool:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.02)
    return False


class TestLiveWatch:
    def test_append_triggers_exactly_one_rerender(self, config: ServerConfig):
        renderer = DocumentRenderer(config)
        initial = renderer.render().timestamp
        render = CountingRender(inner=renderer.render)

        observer = FileObserver(
            config.source_path,
            render,
            debounce_seconds=config.debounce_seconds,
            timeout_seconds=config.watch_timeout_seconds,
        )
        observer.start()
        try:
            # Let the observer settle before touching the file
            time.sleep(0.2)
            with config.source_path.open("a", encoding="utf-8") as f:
                f.write("\n\nWorld")

            assert wait_for(lambda: render.calls >= 1)
            # Give a second, unwanted render the chance to happen
            time.sleep(config.debounce_seconds * 6)
        finally:
            observer.stop()

        assert render.calls == 1
        page = config.output_path.read_text(encoding="utf-8")
        assert "<h1>Hello</h1>" in page
        assert "<p>World</p>" in page
        assert read_status(config) > initial

    def test_permission_change_does_not_rerender(self, config: ServerConfig):
        renderer = DocumentRenderer(config)
        initial = renderer.render().timestamp
        render = CountingRender(inner=renderer.render)

        observer = FileObserver(
            config.source_path,
            render,
            debounce_seconds=config.debounce_seconds,
            timeout_seconds=config.watch_timeout_seconds,
        )
        observer.start()
        try:
            time.sleep(0.2)
            os.chmod(config.source_path, 0o600)
            time.sleep(0.8)
            assert render.calls == 0

            # A real edit afterwards is still picked up
            with config.source_path.open("a", encoding="utf-8") as f:
                f.write("\n\nWorld")
            assert wait_for(lambda: render.calls >= 1)
        finally:
            observer.stop()

        assert render.calls == 1
        assert read_status(config) > initial

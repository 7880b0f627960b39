"""Shared test fixtures for markwatch."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from markwatch.config.models import ServerConfig
from markwatch.renderer import DocumentRenderer


@pytest.fixture
def source_file(tmp_path: Path) -> Path:
    """A Markdown file containing a single heading."""
    path = tmp_path / "notes.md"
    path.write_text("# Hello\n", encoding="utf-8")
    return path


@pytest.fixture
def config(tmp_path: Path, source_file: Path) -> ServerConfig:
    """Configuration writing its artifacts into the temp directory."""
    return ServerConfig(
        source_path=source_file,
        output_path=tmp_path / "output.html",
        status_path=tmp_path / "status.json",
        port=8123,
        debounce_ms=50,
        poll_interval_ms=250,
        watch_timeout_ms=50,
    )


@pytest.fixture
def document_renderer(config: ServerConfig) -> DocumentRenderer:
    return DocumentRenderer(config)


def read_status(config: ServerConfig) -> int:
    """Timestamp currently stored in the status record."""
    return json.loads(config.status_path.read_text(encoding="utf-8"))["timestamp"]

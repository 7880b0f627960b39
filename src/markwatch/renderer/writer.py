"""Writes the rendered document and status record to disk."""

import json
import logging
import os
import tempfile
import time
from datetime import datetime
from pathlib import Path
from typing import Callable

from markwatch.config.models import RenderStatus, ServerConfig
from markwatch.renderer.engine import MarkdownRenderer
from markwatch.renderer.page import render_page

logger = logging.getLogger(__name__)


class RenderError(Exception):
    """Raised when the source cannot be read or an artifact cannot be written."""

    pass


def _stage(path: Path, text: str) -> Path:
    """Write ``text`` to a synced temporary file next to ``path``."""
    fd, tmp_name = tempfile.mkstemp(
        prefix=f".{path.name}.", suffix=".tmp", dir=path.parent
    )
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as tmp:
            tmp.write(text)
            tmp.flush()
            os.fsync(tmp.fileno())
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise
    return Path(tmp_name)


def write_artifacts(files: list[tuple[Path, str]]) -> None:
    """
    Replace each path with its text, in order, each in a single rename.

    Every file is staged before any target is touched, so a failure while
    writing leaves all targets as they were. Readers see either the old file
    or the new one, never a partial write.
    """
    staged: list[tuple[Path, Path]] = []
    try:
        for path, text in files:
            staged.append((_stage(path, text), path))
        while staged:
            tmp, path = staged[0]
            os.replace(tmp, path)
            staged.pop(0)
    finally:
        for tmp, _ in staged:
            tmp.unlink(missing_ok=True)


class DocumentRenderer:
    """Renders the watched Markdown file into the document and status artifacts."""

    def __init__(
        self,
        config: ServerConfig,
        renderer: MarkdownRenderer | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.config = config
        self.renderer = renderer or MarkdownRenderer(config.render)
        self._clock = clock

    @property
    def title(self) -> str:
        return self.config.render.title or self.config.source_path.name or "Markdown"

    def render(self) -> RenderStatus:
        """
        Render the source file and overwrite both artifacts.

        Both artifacts are staged before either is replaced, and the document
        is replaced before the status record, so a client that sees a new
        timestamp always finds the matching document.

        Returns:
            The status record that was written

        Raises:
            RenderError: If reading the source or writing an artifact fails
        """
        source = self.config.source_path
        try:
            content = source.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise RenderError(f"Cannot read {source}: {e}") from e

        now = self._clock()
        html = self.renderer.render(content)
        page = render_page(
            body_html=html,
            title=self.title,
            rendered_at=datetime.fromtimestamp(now).strftime("%Y-%m-%d %H:%M:%S"),
            status_url=self.config.status_url,
            poll_interval_ms=self.config.poll_interval_ms,
        )
        status = RenderStatus(timestamp=int(now * 1000))

        try:
            write_artifacts(
                [
                    (self.config.output_path, page),
                    (self.config.status_path, json.dumps(status.to_dict())),
                ]
            )
        except OSError as e:
            raise RenderError(f"Cannot write output: {e}") from e

        logger.info(
            f"Rendered {source.name} at {datetime.fromtimestamp(now):%H:%M:%S}"
        )
        return status

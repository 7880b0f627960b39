"""Markdown to HTML conversion."""

import markdown

from markwatch.config.models import RenderConfig


class MarkdownRenderer:
    """Converts the watched file's Markdown into an HTML fragment.

    One converter is kept for the life of the watcher and reset before each
    pass. Only the latest source and its HTML are remembered, so a save that
    leaves the text unchanged skips the conversion.
    """

    def __init__(self, config: RenderConfig | None = None) -> None:
        self.config = config or RenderConfig.default()
        self._converter = markdown.Markdown(
            extensions=self.config.extensions,
            extension_configs=self.config.extension_configs,
        )
        self._last: tuple[str, str] | None = None

    def render(self, content: str) -> str:
        """Return the HTML fragment for ``content``."""
        if self._last is not None and self._last[0] == content:
            return self._last[1]
        html = self._converter.reset().convert(content)
        self._last = (content, html)
        return html

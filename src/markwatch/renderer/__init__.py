"""Markdown to HTML rendering for markwatch."""

from .engine import MarkdownRenderer
from .writer import DocumentRenderer, RenderError, write_artifacts

__all__ = [
    "MarkdownRenderer",
    "DocumentRenderer",
    "RenderError",
    "write_artifacts",
]

"""FastAPI server components for markwatch."""

from .app import create_app

__all__ = ["create_app"]

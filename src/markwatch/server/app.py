"""FastAPI application factory."""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from markwatch import __version__
from markwatch.config.models import ServerConfig
from markwatch.renderer.writer import DocumentRenderer, RenderError
from markwatch.server.routers.artifacts import create_router
from markwatch.watcher import FileObserver, WatcherError

logger = logging.getLogger(__name__)


def create_app(
    config: ServerConfig,
    renderer: DocumentRenderer | None = None,
    observer: FileObserver | None = None,
) -> FastAPI:
    """
    Create and configure FastAPI application.

    Args:
        config: Server configuration
        renderer: Renderer used for the initial render on startup
        observer: File observer started and stopped with the application

    Returns:
        Configured FastAPI app
    """
    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """Handle application lifespan events."""
        # Startup: initial render, then start the file watcher
        if app.state.renderer:
            try:
                app.state.renderer.render()
            except RenderError as e:
                logger.error(f"Initial render failed: {e}")

        if app.state.file_observer:
            try:
                app.state.file_observer.start()
            except WatcherError as e:
                logger.error(f"✗ {e}")
                raise

        yield

        # Shutdown: stop file watcher
        if app.state.file_observer:
            app.state.file_observer.stop()

    app = FastAPI(
        title="markwatch",
        description="Watches a Markdown file and serves the rendered HTML",
        version=__version__,
        lifespan=lifespan,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )

    # Store config on app state
    app.state.config = config
    app.state.renderer = renderer
    app.state.file_observer = observer

    # Pages opened from any local origin (or file://) poll the status route
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET"],
    )

    @app.middleware("http")
    async def add_security_headers(request: Request, call_next):  # type: ignore
        response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        return response

    app.include_router(create_router(config))

    return app

"""Router serving the rendered document and the status record.

Both artifacts are read from disk on every request. Nothing is cached in
memory, and a missing or unreadable artifact yields a placeholder instead
of an error response.
"""

import json
import logging

from fastapi import APIRouter, Depends
from fastapi.responses import HTMLResponse, JSONResponse

from markwatch.config.models import RenderStatus, ServerConfig
from markwatch.renderer.page import placeholder_page
from markwatch.server.dependencies import get_server_config

logger = logging.getLogger(__name__)

NO_CACHE_HEADERS = {
    "Cache-Control": "no-cache, no-store, must-revalidate",
    "Pragma": "no-cache",
    "Expires": "0",
}


async def serve_document(
    config: ServerConfig = Depends(get_server_config),
) -> HTMLResponse:
    """Return the current rendered document.

    Args:
        config: Server configuration (injected)

    Returns:
        The document, or a placeholder page if it cannot be read
    """
    try:
        content = config.output_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        logger.debug(f"Document unavailable, serving placeholder: {e}")
        content = placeholder_page(f"Waiting for {config.source_path.name} to render...")
    return HTMLResponse(content=content, headers=NO_CACHE_HEADERS)


async def serve_status(
    config: ServerConfig = Depends(get_server_config),
) -> JSONResponse:
    """Return the current status record.

    Args:
        config: Server configuration (injected)

    Returns:
        The status record, or a zero timestamp if it is missing or malformed
    """
    try:
        raw = config.status_path.read_text(encoding="utf-8")
        status = RenderStatus.from_dict(json.loads(raw))
    except (OSError, UnicodeDecodeError, ValueError) as e:
        logger.debug(f"Status unavailable, serving fallback: {e}")
        status = RenderStatus.empty()
    return JSONResponse(content=status.to_dict(), headers=NO_CACHE_HEADERS)


def create_router(config: ServerConfig) -> APIRouter:
    """Build the router for the configured artifact names."""
    router = APIRouter(tags=["artifacts"])
    router.add_api_route("/", serve_document, methods=["GET"], response_class=HTMLResponse)
    router.add_api_route(
        config.document_route, serve_document, methods=["GET"], response_class=HTMLResponse
    )
    router.add_api_route(
        config.status_route, serve_status, methods=["GET"], response_class=JSONResponse
    )
    return router

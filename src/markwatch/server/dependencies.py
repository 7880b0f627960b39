"""Request dependencies shared by the routers."""

from fastapi import Request

from markwatch.config.models import ServerConfig


def get_server_config(request: Request) -> ServerConfig:
    """Return the configuration stored on the application."""
    return request.app.state.config

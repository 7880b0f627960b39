"""Page template for the rendered document."""

from jinja2 import Environment, PackageLoader, select_autoescape
from markupsafe import Markup

_env = Environment(
    loader=PackageLoader("markwatch", "templates"),
    autoescape=select_autoescape(["html"]),
    keep_trailing_newline=True,
)


def render_page(
    body_html: str,
    title: str,
    rendered_at: str,
    status_url: str,
    poll_interval_ms: int,
) -> str:
    """
    Wrap a rendered Markdown fragment in the full HTML document.

    Args:
        body_html: HTML produced by the Markdown converter, inserted verbatim
        title: Page title (escaped)
        rendered_at: Human readable render time shown in the footer
        status_url: URL of the status record the page polls
        poll_interval_ms: Delay between polls

    Returns:
        Complete HTML document
    """
    template = _env.get_template("document.html")
    return template.render(
        title=title,
        content=Markup(body_html),
        rendered_at=rendered_at,
        status_url=status_url,
        poll_interval_ms=poll_interval_ms,
    )


def placeholder_page(message: str) -> str:
    """Page served while no rendered document can be read."""
    template = _env.get_template("placeholder.html")
    return template.render(message=message)

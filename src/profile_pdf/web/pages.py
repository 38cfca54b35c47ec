"""Jinja2 environment for the small HTML status pages of the OAuth flow."""

from __future__ import annotations

from pathlib import Path

from jinja2 import Environment, FileSystemLoader, select_autoescape

TEMPLATE_DIR = Path(__file__).resolve().parent / "templates"


def setup_jinja_env() -> Environment:
    """Create and configure the Jinja2 template environment."""
    return Environment(
        loader=FileSystemLoader(str(TEMPLATE_DIR)),
        autoescape=select_autoescape(["html"]),
    )


_env = setup_jinja_env()


def status_page(title: str, message: str = "", *, error: bool = False) -> str:
    """Render a one-heading HTML page."""
    return _env.get_template("status.html").render(
        title=title, message=message, error=error,
    )

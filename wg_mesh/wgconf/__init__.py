"""WireGuard config documents and rendering."""

from .document import build_document
from .render import render_wg_conf, format_endpoint

__all__ = ["build_document", "render_wg_conf", "format_endpoint"]

"""Common infrastructure utilities."""

from __future__ import annotations

from .html_selectors import extract_attr, extract_text, parse_html, probe_attr, select_items
from .http import DEFAULT_USER_AGENT, build_http_client, fetch, parse_json

__all__ = [
    "DEFAULT_USER_AGENT",
    "build_http_client",
    "extract_attr",
    "extract_text",
    "fetch",
    "parse_html",
    "parse_json",
    "probe_attr",
    "select_items",
]

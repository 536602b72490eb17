"""CSS-selector-based HTML extraction with fallback chains.

Provider pages are an unversioned external contract.  Every helper here
takes a primary selector plus optional fallbacks and uses the first one
that matches, so a renamed class or an extra wrapper ``<div>`` on the
site degrades to the next known layout instead of an outage.
"""

from __future__ import annotations

from collections.abc import Sequence

from bs4 import BeautifulSoup, Tag


def parse_html(html: str) -> BeautifulSoup:
    """Parse an HTML string (full page or ajax fragment) with lxml."""
    return BeautifulSoup(html, "lxml")


def select_items(
    root: BeautifulSoup | Tag,
    selector: str,
    *fallback_selectors: str,
) -> list[Tag]:
    """Select elements via CSS with a fallback chain.

    Returns the matches of the **first** selector that matches at least
    one element.
    """
    for sel in (selector, *fallback_selectors):
        items = root.select(sel)
        if items:
            return items
    return []


def extract_text(
    element: Tag,
    selector: str,
    *fallback_selectors: str,
    default: str = "",
) -> str:
    """Stripped text of the first matching child element.

    With ``selector=""`` the element's own text is returned.
    """
    if selector == "":
        text = element.get_text(strip=True)
        return text if text else default

    for sel in (selector, *fallback_selectors):
        match = element.select_one(sel)
        if match:
            text = match.get_text(strip=True)
            if text:
                return text
    return default


def extract_attr(
    element: Tag,
    selector: str,
    attr: str,
    *fallback_selectors: str,
    default: str = "",
) -> str:
    """Attribute of the first matching child element that carries it.

    With ``selector=""`` the attribute is read from *element* itself.
    """
    if selector == "":
        val = element.get(attr)
        return str(val).strip() if val else default

    for sel in (selector, *fallback_selectors):
        match = element.select_one(sel)
        if match:
            val = match.get(attr)
            if val:
                return str(val).strip()
    return default


def probe_attr(
    root: BeautifulSoup | Tag,
    probes: Sequence[tuple[str, str]],
    default: str = "",
) -> str:
    """Try ``(selector, attribute)`` pairs in order and return the first hit.

    Unlike ``extract_attr`` each probe names its own attribute, which
    covers layouts that move an id from ``data-id`` to a form ``value``.
    """
    for selector, attr in probes:
        match = root.select_one(selector)
        if match is None:
            continue
        val = match.get(attr)
        if val and str(val).strip():
            return str(val).strip()
    return default

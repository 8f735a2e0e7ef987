"""CSS-selector-based HTML extraction helpers.

Thin wrappers around BeautifulSoup that return empty values instead of
raising when markup is missing.  Every extraction function accepts a
primary selector and optional *fallback_selectors*; the first selector
that yields at least one match wins, which keeps parsing resilient against
minor theme changes on the site.
"""

from __future__ import annotations

from bs4 import BeautifulSoup, Tag


def parse_html(html: str | bytes) -> BeautifulSoup:
    """Parse an HTML string into a BeautifulSoup tree using ``lxml``."""
    return BeautifulSoup(html, "lxml")


def select_items(
    root: BeautifulSoup | Tag,
    selector: str,
    *fallback_selectors: str,
) -> list[Tag]:
    """Select elements via CSS with a fallback chain."""
    for sel in (selector, *fallback_selectors):
        items = root.select(sel)
        if items:
            return items
    return []


def extract_text(
    element: BeautifulSoup | Tag,
    selector: str,
    *fallback_selectors: str,
    default: str = "",
    strip: bool = True,
) -> str:
    """Extract text from the first matching child element.

    With ``selector=""`` the element's own text is returned.
    """
    if selector == "":
        text = element.get_text(strip=strip)
        return text if text else default

    for sel in (selector, *fallback_selectors):
        match = element.select_one(sel)
        if match:
            text = match.get_text(strip=strip)
            if text:
                return text
    return default


def extract_attr(
    element: BeautifulSoup | Tag,
    selector: str,
    attr: str,
    *fallback_selectors: str,
    default: str = "",
) -> str:
    """Extract an HTML attribute from the first matching element that has it.

    With ``selector=""`` the attribute is read from *element* itself.
    """
    if selector == "":
        val = element.get(attr)
        return str(val) if val else default

    for sel in (selector, *fallback_selectors):
        for match in element.select(sel):
            val = match.get(attr)
            if val:
                return str(val)
    return default


def own_text(element: Tag, strip: bool = True) -> str:
    """Return only the text nodes directly inside *element* (no descendants).

    Works for script bodies too, which ``get_text()`` may skip.
    """
    text = "".join(str(child) for child in element.children if isinstance(child, str))
    return text.strip() if strip else text


def next_element_sibling(element: Tag) -> Tag | None:
    """Return the next sibling that is an element (skipping text nodes)."""
    sibling = element.find_next_sibling()
    return sibling if isinstance(sibling, Tag) else None

"""Locate the inline player payload on a Drive player page."""

from __future__ import annotations

from bs4 import BeautifulSoup

from dramarr.infrastructure.common.html_selectors import (
    next_element_sibling,
    own_text,
)

# The player config script directly follows this image element.
PAYLOAD_MARKER_SELECTOR = ".picasa"


def locate_payload(document: BeautifulSoup) -> str | None:
    """Return the raw text of the script following the marker element.

    Returns ``None`` when the marker or its sibling is missing.
    """
    marker = document.select_one(PAYLOAD_MARKER_SELECTOR)
    if marker is None:
        return None
    sibling = next_element_sibling(marker)
    if sibling is None:
        return None
    return own_text(sibling, strip=False)

"""Decode embedded-player references from an episode page's mirror selector.

Each ``<option value="...">`` under the mirror ``<select>`` holds a base64
encoded HTML fragment with a single ``<iframe>``; the iframe ``src`` is the
candidate player URL.
"""

from __future__ import annotations

import base64
import binascii

import structlog
from bs4 import BeautifulSoup

from dramarr.domain.entities.media import CandidateReference
from dramarr.domain.exceptions import ReferenceDecodeError
from dramarr.infrastructure.common.html_selectors import extract_attr, parse_html
from dramarr.infrastructure.common.parsers import fix_url

log = structlog.get_logger(__name__)

MIRROR_OPTION_SELECTOR = ".mobius > .mirror > option"


def mirror_values(document: BeautifulSoup) -> list[str]:
    """Return the non-blank ``value`` attributes of all mirror options."""
    values: list[str] = []
    for option in document.select(MIRROR_OPTION_SELECTOR):
        value = str(option.get("value") or "")
        if value.strip():
            values.append(value)
    return values


def _b64decode(data: str) -> str:
    """Decode base64 (padding optional); raises on malformed input."""
    data = data.strip()
    padding = -len(data) % 4
    return base64.b64decode(data + "=" * padding, validate=True).decode("utf-8")


def decode_reference(raw_value: str, base_url: str) -> CandidateReference:
    """Decode one mirror value into a candidate reference.

    Raises ``ReferenceDecodeError`` if the value is not valid base64 or the
    decoded fragment has no ``<iframe src>``.
    """
    try:
        fragment = _b64decode(raw_value)
    except (binascii.Error, UnicodeDecodeError, ValueError) as exc:
        raise ReferenceDecodeError(f"invalid base64 mirror value: {exc}") from exc

    src = extract_attr(parse_html(fragment), "iframe", "src")
    if not src.strip():
        raise ReferenceDecodeError("decoded mirror fragment has no iframe src")
    return CandidateReference(url=fix_url(src, base_url), raw_value=raw_value)


def extract_references(
    document: BeautifulSoup, base_url: str
) -> list[CandidateReference]:
    """Return all decodable candidate references in document order.

    Entries that fail to decode are dropped; duplicates are kept.
    """
    references: list[CandidateReference] = []
    for value in mirror_values(document):
        try:
            references.append(decode_reference(value, base_url))
        except ReferenceDecodeError as exc:
            log.debug("mirror_reference_dropped", error=str(exc))
    return references

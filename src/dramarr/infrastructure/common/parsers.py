"""Heuristic field parsers for site markup.

Each function is pure (``str -> value | None``) and returns ``None``
instead of a guessed default when its pattern does not match.
"""

from __future__ import annotations

import re

from dramarr.domain.entities.catalog import ContentType, ShowStatus

_EPISODE_NUMBER_RE = re.compile(r"\b(?:Episode|Eps|Ep)\.?\s*(\d+)", re.IGNORECASE)
# Release dates render as e.g. "Mar 3, 2021"
_YEAR_RE = re.compile(r"\d, ([0-9]*)")
_EPISODE_PAGE_RE = re.compile(r"/(.+)-ep.+")


def parse_episode_number(title: str) -> int | None:
    """Extract the episode ordinal from titles like ``"Eps 12"``.

    Returns ``None`` when no number is found.
    """
    match = _EPISODE_NUMBER_RE.search(title or "")
    if not match:
        return None
    return int(match.group(1))


def parse_year(text: str) -> int | None:
    """Extract the year from a rendered release date."""
    match = _YEAR_RE.search(text or "")
    if not match:
        return None
    try:
        return int(match.group(1))
    except ValueError:
        # "\d, " followed by no digits
        return None


def parse_status(text: str | None) -> ShowStatus | None:
    """Map the detail page status label to a ShowStatus.

    ``"Ongoing"`` maps to ONGOING; any other non-empty label is treated as
    COMPLETED, matching how the site labels finished and hiatus shows.
    Returns ``None`` when the label is missing.
    """
    if not text:
        return None
    label = text.replace("Status: ", "").strip()
    if not label:
        return None
    if label == "Ongoing":
        return ShowStatus.ONGOING
    return ShowStatus.COMPLETED


def parse_content_type(text: str | None) -> ContentType:
    """Infer the entry type from the ``Tipe:`` label (drama when unknown)."""
    lowered = (text or "").lower()
    if "movie" in lowered:
        return ContentType.MOVIE
    if "anime" in lowered:
        return ContentType.ANIME
    return ContentType.DRAMA


def series_url_for(url: str, base_url: str) -> str:
    """Map an episode permalink to its series page.

    Listing cards on the index link to the newest episode
    (``{base}/<slug>-episode-5-subtitle-indonesia/``); the series page lives
    at ``{base}/series/<slug>``. Other URLs are returned unchanged.
    """
    if "-episode-" not in url or not url.startswith(base_url):
        return url
    match = _EPISODE_PAGE_RE.match(url[len(base_url) :])
    if match is None:
        return url
    return f"{base_url}/series/{match.group(1)}"


def fix_url(url: str, base_url: str) -> str:
    """Complete scheme-relative and relative URLs against *base_url*."""
    url = (url or "").strip()
    if not url:
        return ""
    if url.startswith(("http://", "https://")) or url.startswith('{"'):
        return url
    if url.startswith("//"):
        return f"https:{url}"
    if url.startswith("/"):
        return f"{base_url}{url}"
    return f"{base_url}/{url}"

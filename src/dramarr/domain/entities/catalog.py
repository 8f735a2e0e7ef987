"""Domain entities for the drama catalog.

Pure value objects without I/O.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class ContentType(str, Enum):
    """Kind of catalog entry as advertised by the site."""

    DRAMA = "drama"
    MOVIE = "movie"
    ANIME = "anime"


class ShowStatus(str, Enum):
    ONGOING = "ongoing"
    COMPLETED = "completed"


@dataclass(frozen=True)
class Episode:
    """A single playable episode of a catalog entry."""

    title: str
    url: str  # Episode page holding the mirror selector
    number: int | None = None  # None when the title carries no number


@dataclass(frozen=True)
class CatalogEntry:
    """A drama, movie or anime listed on the site.

    Listing and search results only fill identity and poster; detail loads
    fill the remaining fields.
    """

    title: str
    url: str
    content_type: ContentType = ContentType.DRAMA
    poster_url: str | None = None
    tags: tuple[str, ...] = ()
    status: ShowStatus | None = None
    synopsis: str = ""
    year: int | None = None
    episodes: tuple[Episode, ...] = ()
    recommendations: tuple[CatalogEntry, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class CatalogSection:
    """A named listing on the site's series index (e.g. "Drama Popular")."""

    name: str
    query: str  # Appended to the listing URL, e.g. "&order=latest"

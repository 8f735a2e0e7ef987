"""Port for fetching and parsing remote HTML pages."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from bs4 import BeautifulSoup


@runtime_checkable
class PageFetcherPort(Protocol):
    """Fetches a URL and returns its parsed document.

    Implementations raise ``TransportError`` on network failure, timeout
    or an HTTP error status. No retry contract is assumed.
    """

    async def fetch_document(
        self, url: str, *, referer: str | None = None
    ) -> BeautifulSoup: ...

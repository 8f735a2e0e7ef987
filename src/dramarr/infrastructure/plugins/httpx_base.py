"""Shared base class for httpx-based site plugins.

Owns the httpx client lifecycle and turns responses into parsed
BeautifulSoup documents.  Implements ``PageFetcherPort``: transport
failures surface as ``TransportError`` so top-level catalog calls fail
loudly, while the resolution pipeline absorbs them per candidate.
"""

from __future__ import annotations

import httpx
import structlog
from bs4 import BeautifulSoup

from dramarr.domain.exceptions import TransportError
from dramarr.infrastructure.common.html_selectors import parse_html
from dramarr.infrastructure.config.schema import AppConfig

from .constants import (
    DEFAULT_CANDIDATE_TIMEOUT,
    DEFAULT_CLIENT_TIMEOUT,
    DEFAULT_MAX_CONCURRENT,
    DEFAULT_USER_AGENT,
)


class HttpxPluginBase:
    """Shared base for httpx-based site plugins.

    Subclasses **must** set:
    - ``name``
    - ``_domains`` (list with at least one domain string)

    Subclasses **may** override:
    - ``version``, ``lang``
    - ``_max_concurrent``, ``_timeout``, ``_candidate_timeout``
    - ``_user_agent``

    An ``AppConfig`` passed to the constructor takes precedence over the
    class-level defaults.
    """

    # --- Must be set by subclass ---
    name: str = ""

    # --- Overridable defaults ---
    version: str = "1.0.0"
    lang: str = "id"

    _domains: list[str] = []  # noqa: RUF012  # subclass overrides
    _max_concurrent: int = DEFAULT_MAX_CONCURRENT
    _timeout: float = DEFAULT_CLIENT_TIMEOUT
    _candidate_timeout: float = DEFAULT_CANDIDATE_TIMEOUT
    _user_agent: str = DEFAULT_USER_AGENT
    _follow_redirects: bool = True

    def __init__(
        self,
        config: AppConfig | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._client: httpx.AsyncClient | None = http_client
        self._owns_client = http_client is None
        self.base_url: str = f"https://{self._domains[0]}" if self._domains else ""
        if config is not None:
            self.base_url = config.site_base_url
            self._timeout = config.http_timeout_seconds
            self._user_agent = config.http_user_agent
            self._follow_redirects = config.http_follow_redirects
            self._max_concurrent = config.max_concurrent_candidates
            self._candidate_timeout = config.candidate_timeout_seconds
        self._log = structlog.get_logger(self.name or __name__)

    # ------------------------------------------------------------------
    # Client lifecycle
    # ------------------------------------------------------------------

    async def _ensure_client(self) -> httpx.AsyncClient:
        """Create httpx client if not already running."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self._timeout,
                follow_redirects=self._follow_redirects,
                headers={"User-Agent": self._user_agent},
            )
            self._owns_client = True
        return self._client

    async def cleanup(self) -> None:
        """Close the httpx client if this plugin created it."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
        self._client = None

    # ------------------------------------------------------------------
    # Fetching
    # ------------------------------------------------------------------

    async def fetch_document(
        self, url: str, *, referer: str | None = None
    ) -> BeautifulSoup:
        """Fetch *url* and parse it with lxml.

        Raises ``TransportError`` on timeout, network error or HTTP >= 400.
        """
        client = await self._ensure_client()
        headers = {"Referer": referer} if referer else None
        try:
            resp = await client.get(url, headers=headers)
            resp.raise_for_status()
        except httpx.TimeoutException as exc:
            self._log.warning(f"{self.name}_timeout", url=url)
            raise TransportError(url, "timeout") from exc
        except httpx.HTTPStatusError as exc:
            self._log.warning(
                f"{self.name}_http_error",
                url=url,
                status=exc.response.status_code,
            )
            raise TransportError(url, f"HTTP {exc.response.status_code}") from exc
        except httpx.HTTPError as exc:
            self._log.warning(f"{self.name}_fetch_error", url=url, error=str(exc))
            raise TransportError(url, str(exc) or type(exc).__name__) from exc
        return parse_html(resp.content)

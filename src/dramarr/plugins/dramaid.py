"""dramaid.nl site plugin.

Scrapes dramaid.nl (Indonesian-subtitled Asian drama site) with:
- httpx for all requests (server-rendered WordPress theme)
- GET /series/?page={page}{section query} -> catalog listings
- GET /?s={query} -> search results (same card markup as listings)
- Detail page scraping for metadata, episode list and recommendations
- Episode pages resolved to playable links via ``ResolutionDispatcher``

No authentication required.
"""

from __future__ import annotations

from urllib.parse import quote_plus

import httpx
from bs4 import BeautifulSoup, Tag

from dramarr.domain.entities.catalog import CatalogEntry, CatalogSection, Episode
from dramarr.domain.entities.media import ResolutionResult
from dramarr.domain.ports.extractor import ExternalExtractorPort, LinkSink, SubtitleSink
from dramarr.infrastructure.common.html_selectors import (
    extract_attr,
    extract_text,
    own_text,
    select_items,
)
from dramarr.infrastructure.common.parsers import (
    fix_url,
    parse_content_type,
    parse_episode_number,
    parse_status,
    parse_year,
    series_url_for,
)
from dramarr.infrastructure.config.schema import AppConfig
from dramarr.infrastructure.extractors.registry import ExtractorRegistry
from dramarr.infrastructure.plugins.httpx_base import HttpxPluginBase
from dramarr.infrastructure.resolution.dispatcher import ResolutionDispatcher

# ---------------------------------------------------------------------------
# Configurable settings
# ---------------------------------------------------------------------------
_DOMAINS = ["dramaid.nl"]

SECTIONS: tuple[CatalogSection, ...] = (
    CatalogSection("Drama Terbaru", "&status=&type=&order=update"),
    CatalogSection("Baru Ditambahkan", "&order=latest"),
    CatalogSection("Drama Popular", "&status=&type=&order=popular"),
)

# ---------------------------------------------------------------------------
# Selectors
# ---------------------------------------------------------------------------
_CARD = "article[itemscope=itemscope]"
_CARD_LINK = "a.tip"
_CARD_TITLE = "h2[itemprop=headline]"

_DETAIL_TITLE = "h1.entry-title"
_DETAIL_POSTER = "div.thumb img:last-child"
_DETAIL_TAGS = ".genxed > a"
_DETAIL_INFO = ".info-content .spe span"
_DETAIL_YEAR = ".info-content > .spe > span > time"
_DETAIL_STATUS = ".info-content > .spe > span:nth-child(1)"
_DETAIL_SYNOPSIS = ".entry-content > p"
_DETAIL_EPISODES = ".eplister > ul > li"
_DETAIL_RECOMMENDATIONS = ".listupd > article[itemscope=itemscope]"

_TYPE_LABEL = "Tipe:"
_STATUS_PREFIX = "Status: "


class DramaidPlugin(HttpxPluginBase):
    """Catalog and link resolution for dramaid.nl."""

    name = "dramaid"
    display_name = "DramaId"
    version = "1.0.0"
    lang = "id"

    _domains = _DOMAINS

    def __init__(
        self,
        config: AppConfig | None = None,
        http_client: httpx.AsyncClient | None = None,
        extractor: ExternalExtractorPort | None = None,
    ) -> None:
        super().__init__(config, http_client)
        self._extractor = extractor
        self._owns_extractor = extractor is None

    @property
    def sections(self) -> tuple[CatalogSection, ...]:
        return SECTIONS

    # ------------------------------------------------------------------
    # Card parsing (listings, search, recommendations)
    # ------------------------------------------------------------------

    def _parse_card(self, card: Tag) -> CatalogEntry | None:
        """Parse one ``article`` card; ``None`` if link or title is missing."""
        href = extract_attr(card, _CARD_LINK, "href")
        if not href:
            return None
        title = extract_text(card, _CARD_TITLE)
        if not title:
            return None

        posters = [str(img["src"]) for img in card.select("img") if img.get("src")]
        return CatalogEntry(
            title=title,
            url=series_url_for(fix_url(href, self.base_url), self.base_url),
            poster_url=fix_url(posters[-1], self.base_url) if posters else None,
        )

    def _parse_cards(
        self, root: BeautifulSoup | Tag, selector: str
    ) -> list[CatalogEntry]:
        entries: list[CatalogEntry] = []
        for card in select_items(root, selector):
            entry = self._parse_card(card)
            if entry is not None:
                entries.append(entry)
        return entries

    # ------------------------------------------------------------------
    # Catalog
    # ------------------------------------------------------------------

    async def list_catalog_page(
        self, page: int, section: CatalogSection
    ) -> list[CatalogEntry]:
        """Return the entries of one listing page of *section*."""
        url = f"{self.base_url}/series/?page={page}{section.query}"
        document = await self.fetch_document(url)
        entries = self._parse_cards(document, _CARD)
        self._log.info(
            "dramaid_catalog_page",
            section=section.name,
            page=page,
            results=len(entries),
        )
        return entries

    async def search(self, query: str) -> list[CatalogEntry]:
        """Search the site by free-text *query*."""
        if not query.strip():
            return []
        document = await self.fetch_document(f"{self.base_url}/?s={quote_plus(query)}")
        entries = self._parse_cards(document, _CARD)
        self._log.info("dramaid_search_results", query=query, results=len(entries))
        return entries

    async def load_entry_details(self, url: str) -> CatalogEntry:
        """Load the detail page at *url* into a fully populated entry."""
        document = await self.fetch_document(url)
        entry = self._parse_details(document, url)
        self._log.debug(
            "dramaid_entry_loaded",
            url=url,
            episodes=len(entry.episodes),
            recommendations=len(entry.recommendations),
        )
        return entry

    def _parse_details(self, document: BeautifulSoup, url: str) -> CatalogEntry:
        poster = extract_attr(document, _DETAIL_POSTER, "src")
        type_label = next(
            (
                own_text(span)
                for span in document.select(_DETAIL_INFO)
                if _TYPE_LABEL in span.get_text()
            ),
            None,
        )
        status_text = " ".join(
            el.get_text(" ", strip=True) for el in document.select(_DETAIL_STATUS)
        )
        synopsis = " ".join(
            p.get_text(" ", strip=True) for p in document.select(_DETAIL_SYNOPSIS)
        )

        return CatalogEntry(
            title=extract_text(document, _DETAIL_TITLE),
            url=url,
            content_type=parse_content_type(type_label),
            poster_url=fix_url(poster, self.base_url) if poster else None,
            tags=tuple(a.get_text(strip=True) for a in document.select(_DETAIL_TAGS)),
            status=parse_status(status_text.replace(_STATUS_PREFIX, "").strip()),
            synopsis=synopsis.strip(),
            year=parse_year(extract_text(document, _DETAIL_YEAR)),
            episodes=tuple(self._parse_episodes(document)),
            recommendations=tuple(
                self._parse_cards(document, _DETAIL_RECOMMENDATIONS)
            ),
        )

    def _parse_episodes(self, document: BeautifulSoup) -> list[Episode]:
        """Parse the episode list, oldest first.

        The site lists newest first, so the parsed list is reversed.
        """
        episodes: list[Episode] = []
        for item in document.select(_DETAIL_EPISODES):
            anchor = item.select_one("a")
            if anchor is None:
                continue
            title = extract_text(item, "a > .epl-title") or anchor.get_text(strip=True)
            episodes.append(
                Episode(
                    title=title,
                    url=fix_url(str(anchor.get("href") or ""), self.base_url),
                    number=parse_episode_number(title),
                )
            )
        episodes.reverse()
        return episodes

    # ------------------------------------------------------------------
    # Link resolution
    # ------------------------------------------------------------------

    async def _dispatcher(self) -> ResolutionDispatcher:
        client = await self._ensure_client()
        if self._extractor is None:
            self._extractor = ExtractorRegistry(
                http_client=client, probe_timeout=self._timeout
            )
        return ResolutionDispatcher(
            self,
            self._extractor,
            name=self.display_name,
            base_url=self.base_url,
            max_concurrent=self._max_concurrent,
            candidate_timeout=self._candidate_timeout,
        )

    async def resolve_episode_links(self, url: str) -> ResolutionResult:
        """Resolve the episode page at *url* into links and subtitles."""
        dispatcher = await self._dispatcher()
        return await dispatcher.resolve_episode(url)

    async def load_links(
        self,
        url: str,
        subtitle_sink: SubtitleSink,
        link_sink: LinkSink,
    ) -> bool:
        """Sink-style variant of ``resolve_episode_links``."""
        dispatcher = await self._dispatcher()
        return await dispatcher.resolve(url, link_sink, subtitle_sink)

    async def cleanup(self) -> None:
        if self._owns_extractor:
            self._extractor = None
        await super().cleanup()


plugin = DramaidPlugin()

"""Registry that dispatches third-party player URLs to per-hoster extractors."""

from __future__ import annotations

from urllib.parse import urlparse

import httpx
import structlog

from dramarr.domain.entities.media import ResolvedLink, StreamQuality
from dramarr.domain.ports.extractor import HosterExtractorPort, LinkSink, SubtitleSink

log = structlog.get_logger(__name__)

# Provider label for links found by the content-type probe
PROBE_PROVIDER = "Direct"

_HLS_CONTENT_TYPES = ("application/vnd.apple.mpegurl", "application/x-mpegurl")


def extract_domain(url: str) -> str:
    """Extract the second-level domain from a URL.

    ``"fembed"`` from ``"https://www.fembed.com/v/abc"``.  Returns ``""``
    when the URL cannot be parsed or has fewer than two hostname segments.
    """
    try:
        hostname = urlparse(url).hostname or ""
    except ValueError:
        return ""
    parts = hostname.split(".")
    return parts[-2] if len(parts) >= 2 else ""


class ExtractorRegistry:
    """Dispatches player URLs to the matching hoster extractor.

    Falls back to a HEAD content-type probe when no extractor is
    registered for the URL's domain (or for its redirect target).
    """

    def __init__(
        self,
        extractors: list[HosterExtractorPort] | None = None,
        http_client: httpx.AsyncClient | None = None,
        probe_timeout: float = 15.0,
    ) -> None:
        self._extractors: dict[str, HosterExtractorPort] = {}
        self._domain_map: dict[str, HosterExtractorPort] = {}
        self._http_client = http_client
        self._probe_timeout = probe_timeout
        for extractor in extractors or []:
            self.register(extractor)

    def register(self, extractor: HosterExtractorPort) -> None:
        """Register an extractor under its name and any ``supported_domains``."""
        self._extractors[extractor.name] = extractor
        domains: frozenset[str] | None = getattr(extractor, "supported_domains", None)
        if domains:
            for domain in domains:
                self._domain_map[domain] = extractor
        log.debug("extractor_registered", hoster=extractor.name)

    @property
    def supported_hosters(self) -> list[str]:
        return list(self._extractors.keys())

    def _lookup(self, hoster: str) -> HosterExtractorPort | None:
        return self._extractors.get(hoster) or self._domain_map.get(hoster)

    async def extract(
        self,
        url: str,
        referer: str,
        link_sink: LinkSink,
        subtitle_sink: SubtitleSink,
    ) -> bool:
        """Resolve a player URL, pushing results into the sinks.

        1. Try the extractor registered for the URL's domain.
        2. Otherwise follow HTTP redirects and retry with the final domain.
        3. Fall back to content-type probing (HEAD request).
        """
        hoster = extract_domain(url)
        extractor = self._lookup(hoster)
        if extractor is not None:
            return await self._try_extractor(
                extractor, hoster, url, referer, link_sink, subtitle_sink
            )

        final_url = await self._follow_redirects(url, referer)
        if final_url:
            redirected = extract_domain(final_url)
            extractor = self._lookup(redirected)
            if extractor is not None:
                log.info(
                    "extractor_after_redirect",
                    original=hoster,
                    redirected=redirected,
                    url=final_url,
                )
                return await self._try_extractor(
                    extractor, redirected, final_url, referer, link_sink, subtitle_sink
                )

        link = await self._probe_content_type(url, referer, hoster)
        if link is None:
            log.debug("extractor_not_found", hoster=hoster, url=url)
            return False
        link_sink(link)
        return True

    async def _try_extractor(
        self,
        extractor: HosterExtractorPort,
        hoster: str,
        url: str,
        referer: str,
        link_sink: LinkSink,
        subtitle_sink: SubtitleSink,
    ) -> bool:
        """Run one extractor, logging success/failure."""
        try:
            ok = await extractor.extract(url, referer, link_sink, subtitle_sink)
            if ok:
                log.info("extractor_success", hoster=hoster)
                return True
            log.warning("extractor_failed", hoster=hoster, url=url)
        except httpx.TimeoutException:
            log.warning("extractor_timeout", hoster=hoster, url=url)
        except httpx.HTTPError as exc:
            log.warning("extractor_http_error", hoster=hoster, url=url, error=str(exc))
        except Exception:
            log.exception("extractor_error", hoster=hoster, url=url)
        return False

    def _headers(self, referer: str) -> dict[str, str]:
        return {"Referer": referer} if referer else {}

    async def _follow_redirects(self, url: str, referer: str) -> str | None:
        """Follow HTTP redirects and return the final URL if it changed."""
        if self._http_client is None:
            return None
        try:
            resp = await self._http_client.head(
                url,
                headers=self._headers(referer),
                follow_redirects=True,
                timeout=self._probe_timeout,
            )
        except httpx.TimeoutException:
            log.debug("extractor_redirect_timeout", url=url)
            return None
        except httpx.HTTPError as exc:
            log.debug("extractor_redirect_http_error", url=url, error=str(exc))
            return None

        final_url = str(resp.url)
        if final_url != url:
            log.debug("extractor_redirect_followed", original=url, final=final_url)
            return final_url
        return None

    async def _probe_content_type(
        self, url: str, referer: str, hoster: str
    ) -> ResolvedLink | None:
        """Probe *url* via HEAD; return a link if it is directly playable."""
        if self._http_client is None:
            return None
        try:
            resp = await self._http_client.head(
                url,
                headers=self._headers(referer),
                follow_redirects=True,
                timeout=self._probe_timeout,
            )
        except httpx.TimeoutException:
            log.debug("extractor_probe_timeout", hoster=hoster, url=url)
            return None
        except httpx.HTTPError as exc:
            log.debug(
                "extractor_probe_http_error", hoster=hoster, url=url, error=str(exc)
            )
            return None

        if resp.status_code >= 400:
            return None

        content_type = resp.headers.get("content-type", "").lower()
        if content_type.startswith("video/"):
            log.info(
                "extractor_probe_direct_video",
                hoster=hoster,
                content_type=content_type,
            )
            return ResolvedLink(
                name=PROBE_PROVIDER,
                provider=PROBE_PROVIDER,
                url=str(resp.url),
                referer=referer,
                quality=StreamQuality.UNKNOWN,
            )
        if any(t in content_type for t in _HLS_CONTENT_TYPES):
            log.info("extractor_probe_hls", hoster=hoster, content_type=content_type)
            return ResolvedLink(
                name=PROBE_PROVIDER,
                provider=PROBE_PROVIDER,
                url=str(resp.url),
                referer=referer,
                quality=StreamQuality.UNKNOWN,
                is_hls=True,
            )
        return None

"""Resolve an episode page into playable links and subtitles.

Flow per episode page::

    mirror options -> decode -> classify
        SpecialOrigin  -> fetch player -> locate payload -> repair -> normalize
        ExternalOrigin -> external extractor (registry)

Candidates are resolved concurrently (bounded), each in isolation: a
failing candidate becomes a ``CandidateOutcome`` with a failure status and
never aborts the batch.  Results are emitted to the sinks in candidate
discovery order, each candidate's results contiguous.
"""

from __future__ import annotations

import asyncio

import structlog
from bs4 import BeautifulSoup

from dramarr.domain.entities.media import (
    CandidateOutcome,
    CandidateReference,
    CandidateStatus,
    ExternalOrigin,
    ResolutionResult,
    ResolvedLink,
    ResolvedSubtitle,
    SpecialOrigin,
)
from dramarr.domain.exceptions import ReferenceDecodeError, TransportError
from dramarr.domain.ports.extractor import ExternalExtractorPort, LinkSink, SubtitleSink
from dramarr.domain.ports.page_fetcher import PageFetcherPort

from .blob_locator import locate_payload
from .link_normalizer import normalize
from .origin import classify
from .quasi_json import parse_tracks, parse_variants
from .reference_extractor import decode_reference, mirror_values

log = structlog.get_logger(__name__)


class ResolutionDispatcher:
    """Orchestrates media-link resolution for one site."""

    def __init__(
        self,
        fetcher: PageFetcherPort,
        extractor: ExternalExtractorPort,
        *,
        name: str,
        base_url: str,
        max_concurrent: int = 4,
        candidate_timeout: float = 30.0,
    ) -> None:
        self._fetcher = fetcher
        self._extractor = extractor
        self._name = name
        self._base_url = base_url
        self._max_concurrent = max_concurrent
        self._candidate_timeout = candidate_timeout

    async def resolve(
        self,
        episode_url: str,
        link_sink: LinkSink,
        subtitle_sink: SubtitleSink,
    ) -> bool:
        """Resolve *episode_url*, pushing results into the sinks.

        Returns ``True`` once every candidate has been attempted, however
        many failed.  Raises ``TransportError`` only if the episode page
        itself cannot be fetched.
        """
        document = await self._fetcher.fetch_document(episode_url)
        outcomes = await self.resolve_document(document)
        for outcome in outcomes:
            for link in outcome.links:
                link_sink(link)
            for subtitle in outcome.subtitles:
                subtitle_sink(subtitle)

        log.info(
            "episode_resolved",
            url=episode_url,
            candidates=len(outcomes),
            resolved=sum(o.status is CandidateStatus.RESOLVED for o in outcomes),
        )
        return True

    async def resolve_episode(self, episode_url: str) -> ResolutionResult:
        """Resolve *episode_url* into a ``ResolutionResult``."""
        links: list[ResolvedLink] = []
        subtitles: list[ResolvedSubtitle] = []
        document = await self._fetcher.fetch_document(episode_url)
        outcomes = await self.resolve_document(document)
        for outcome in outcomes:
            links.extend(outcome.links)
            subtitles.extend(outcome.subtitles)
        return ResolutionResult(
            links=links, subtitles=subtitles, outcomes=outcomes, success=True
        )

    async def resolve_document(
        self, document: BeautifulSoup
    ) -> list[CandidateOutcome]:
        """Resolve every mirror entry of a parsed episode page.

        Returns one outcome per non-blank mirror entry, in document order.
        """
        sem = asyncio.Semaphore(self._max_concurrent)

        async def _bounded(raw_value: str) -> CandidateOutcome:
            try:
                reference = decode_reference(raw_value, self._base_url)
            except ReferenceDecodeError as exc:
                log.debug("candidate_decode_failed", error=str(exc))
                return CandidateOutcome(
                    reference=None,
                    status=CandidateStatus.DECODE_FAILED,
                    error=str(exc),
                )
            async with sem:
                return await self._resolve_isolated(reference)

        return list(
            await asyncio.gather(*[_bounded(v) for v in mirror_values(document)])
        )

    async def _resolve_isolated(
        self, reference: CandidateReference
    ) -> CandidateOutcome:
        """Resolve one candidate; all failures become an outcome."""
        try:
            return await asyncio.wait_for(
                self.resolve_candidate(reference), timeout=self._candidate_timeout
            )
        except asyncio.TimeoutError:
            log.warning("candidate_timeout", url=reference.url)
            return CandidateOutcome(
                reference=reference,
                status=CandidateStatus.FETCH_FAILED,
                error="timeout",
            )
        except TransportError as exc:
            return CandidateOutcome(
                reference=reference,
                status=CandidateStatus.FETCH_FAILED,
                error=str(exc),
            )
        except Exception as exc:
            log.exception("candidate_error", url=reference.url)
            return CandidateOutcome(
                reference=reference,
                status=CandidateStatus.ERROR,
                error=str(exc) or type(exc).__name__,
            )

    async def resolve_candidate(
        self, reference: CandidateReference
    ) -> CandidateOutcome:
        """Classify and resolve a single candidate.

        Raises ``TransportError`` if the special-origin player page is
        unreachable.
        """
        origin = classify(reference.url, self._base_url)
        if isinstance(origin, SpecialOrigin):
            return await self._resolve_special(reference, origin)
        return await self._resolve_external(reference, origin)

    async def _resolve_special(
        self, reference: CandidateReference, origin: SpecialOrigin
    ) -> CandidateOutcome:
        document = await self._fetcher.fetch_document(origin.url)
        payload = locate_payload(document)
        if payload is None:
            log.debug("drive_payload_missing", url=origin.url)
            return CandidateOutcome(
                reference=reference,
                status=CandidateStatus.EMPTY,
                origin=origin,
                error="player payload not found",
            )

        links, subtitles = normalize(
            parse_variants(payload),
            parse_tracks(payload),
            name=self._name,
            base_url=self._base_url,
        )
        return CandidateOutcome(
            reference=reference,
            status=(
                CandidateStatus.RESOLVED
                if links or subtitles
                else CandidateStatus.EMPTY
            ),
            origin=origin,
            links=tuple(links),
            subtitles=tuple(subtitles),
        )

    async def _resolve_external(
        self, reference: CandidateReference, origin: ExternalOrigin
    ) -> CandidateOutcome:
        links: list[ResolvedLink] = []
        subtitles: list[ResolvedSubtitle] = []
        ok = await self._extractor.extract(
            origin.url, origin.referer, links.append, subtitles.append
        )
        if not ok and not links and not subtitles:
            return CandidateOutcome(
                reference=reference,
                status=CandidateStatus.EXTRACTOR_FAILED,
                origin=origin,
            )
        return CandidateOutcome(
            reference=reference,
            status=(
                CandidateStatus.RESOLVED
                if links or subtitles
                else CandidateStatus.EMPTY
            ),
            origin=origin,
            links=tuple(links),
            subtitles=tuple(subtitles),
        )

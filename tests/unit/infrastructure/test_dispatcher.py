"""Tests for ResolutionDispatcher."""

from __future__ import annotations

import asyncio
from collections import Counter
from typing import Callable
from unittest.mock import AsyncMock

import pytest

from dramarr.domain.entities.media import (
    CandidateStatus,
    ExternalOrigin,
    ResolvedLink,
    ResolvedSubtitle,
    SpecialOrigin,
)
from dramarr.domain.exceptions import TransportError
from dramarr.infrastructure.resolution.dispatcher import ResolutionDispatcher

BASE = "https://dramaid.nl"
EPISODE_URL = f"{BASE}/my-love-episode-1-subtitle-indonesia/"
DRIVE_URL = "https://motonews.club/player/abc"
EXTERNAL_URL = "https://streamtape.com/e/xyz"


def _dispatcher(
    fetcher: AsyncMock, extractor: AsyncMock, **kwargs: float
) -> ResolutionDispatcher:
    return ResolutionDispatcher(
        fetcher, extractor, name="DramaId", base_url=BASE, **kwargs
    )


def _external_link(url: str) -> ResolvedLink:
    return ResolvedLink(name="Streamtape", provider="Streamtape", url=url, referer=BASE)


# ---------------------------------------------------------------------------
# Special (Drive) origin
# ---------------------------------------------------------------------------


class TestSpecialOrigin:
    @pytest.mark.asyncio
    async def test_resolves_drive_player(
        self,
        fake_fetcher: AsyncMock,
        fake_extractor: AsyncMock,
        encode_mirror: Callable[[str], str],
        episode_page: Callable[..., str],
        player_page: Callable[[str], str],
        drive_payload: str,
    ) -> None:
        fake_fetcher.pages[EPISODE_URL] = episode_page(encode_mirror(DRIVE_URL))
        fake_fetcher.pages[DRIVE_URL] = player_page(drive_payload)

        result = await _dispatcher(fake_fetcher, fake_extractor).resolve_episode(
            EPISODE_URL
        )

        assert result.success is True
        assert [link.url for link in result.links] == [
            "https://cdn.motonews.club/v/abc.mp4"
        ]
        assert result.links[0].provider == "Drive"
        assert result.subtitles == [
            ResolvedSubtitle(
                label="Indonesian", url="https://cdn.motonews.club/s/abc.vtt"
            )
        ]
        assert result.outcomes[0].status is CandidateStatus.RESOLVED
        assert result.outcomes[0].origin == SpecialOrigin(url=DRIVE_URL)
        fake_extractor.extract.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_missing_sources_keeps_tracks(
        self,
        fake_fetcher: AsyncMock,
        fake_extractor: AsyncMock,
        encode_mirror: Callable[[str], str],
        episode_page: Callable[..., str],
        player_page: Callable[[str], str],
    ) -> None:
        payload = 'tracks:[{file:"https://x/id.vtt",label:"Indonesia",kind:"captions"}],'
        fake_fetcher.pages[EPISODE_URL] = episode_page(encode_mirror(DRIVE_URL))
        fake_fetcher.pages[DRIVE_URL] = player_page(payload)

        result = await _dispatcher(fake_fetcher, fake_extractor).resolve_episode(
            EPISODE_URL
        )

        assert result.links == []
        assert [s.label for s in result.subtitles] == ["Indonesian"]

    @pytest.mark.asyncio
    async def test_missing_payload_is_empty(
        self,
        fake_fetcher: AsyncMock,
        fake_extractor: AsyncMock,
        encode_mirror: Callable[[str], str],
        episode_page: Callable[..., str],
    ) -> None:
        fake_fetcher.pages[EPISODE_URL] = episode_page(encode_mirror(DRIVE_URL))
        fake_fetcher.pages[DRIVE_URL] = "<html><body>gone</body></html>"

        result = await _dispatcher(fake_fetcher, fake_extractor).resolve_episode(
            EPISODE_URL
        )

        assert result.links == []
        assert result.outcomes[0].status is CandidateStatus.EMPTY

    @pytest.mark.asyncio
    async def test_unreachable_player_is_fetch_failed(
        self,
        fake_fetcher: AsyncMock,
        fake_extractor: AsyncMock,
        encode_mirror: Callable[[str], str],
        episode_page: Callable[..., str],
    ) -> None:
        # DRIVE_URL is not served -> TransportError
        fake_fetcher.pages[EPISODE_URL] = episode_page(encode_mirror(DRIVE_URL))

        result = await _dispatcher(fake_fetcher, fake_extractor).resolve_episode(
            EPISODE_URL
        )

        assert result.success is True
        assert result.outcomes[0].status is CandidateStatus.FETCH_FAILED


# ---------------------------------------------------------------------------
# External origin
# ---------------------------------------------------------------------------


class TestExternalOrigin:
    @pytest.mark.asyncio
    async def test_delegates_with_site_referer(
        self,
        fake_fetcher: AsyncMock,
        encode_mirror: Callable[[str], str],
        episode_page: Callable[..., str],
    ) -> None:
        async def _extract(url, referer, link_sink, subtitle_sink):
            link_sink(_external_link("https://cdn.streamtape.com/v.mp4"))
            return True

        extractor = AsyncMock()
        extractor.extract = AsyncMock(side_effect=_extract)
        fake_fetcher.pages[EPISODE_URL] = episode_page(encode_mirror(EXTERNAL_URL))

        result = await _dispatcher(fake_fetcher, extractor).resolve_episode(EPISODE_URL)

        assert [link.url for link in result.links] == ["https://cdn.streamtape.com/v.mp4"]
        args = extractor.extract.await_args.args
        assert args[0] == EXTERNAL_URL
        assert args[1] == f"{BASE}/"
        assert result.outcomes[0].origin == ExternalOrigin(
            url=EXTERNAL_URL, referer=f"{BASE}/"
        )

    @pytest.mark.asyncio
    async def test_legacy_host_rewritten_before_dispatch(
        self,
        fake_fetcher: AsyncMock,
        fake_extractor: AsyncMock,
        encode_mirror: Callable[[str], str],
        episode_page: Callable[..., str],
    ) -> None:
        fake_fetcher.pages[EPISODE_URL] = episode_page(
            encode_mirror("https://ndrama.xyz/v/abc123")
        )

        await _dispatcher(fake_fetcher, fake_extractor).resolve_episode(EPISODE_URL)

        url = fake_extractor.extract.await_args.args[0]
        assert url == "https://www.fembed.com/v/abc123"

    @pytest.mark.asyncio
    async def test_extractor_failure_recorded(
        self,
        fake_fetcher: AsyncMock,
        fake_extractor: AsyncMock,
        encode_mirror: Callable[[str], str],
        episode_page: Callable[..., str],
    ) -> None:
        fake_fetcher.pages[EPISODE_URL] = episode_page(encode_mirror(EXTERNAL_URL))

        result = await _dispatcher(fake_fetcher, fake_extractor).resolve_episode(
            EPISODE_URL
        )

        assert result.links == []
        assert result.outcomes[0].status is CandidateStatus.EXTRACTOR_FAILED


# ---------------------------------------------------------------------------
# Isolation and ordering
# ---------------------------------------------------------------------------


class TestIsolation:
    @pytest.mark.asyncio
    async def test_corrupt_candidate_does_not_block_others(
        self,
        fake_fetcher: AsyncMock,
        fake_extractor: AsyncMock,
        encode_mirror: Callable[[str], str],
        episode_page: Callable[..., str],
        player_page: Callable[[str], str],
        drive_payload: str,
    ) -> None:
        fake_fetcher.pages[EPISODE_URL] = episode_page(
            "@@corrupt@@", encode_mirror(DRIVE_URL)
        )
        fake_fetcher.pages[DRIVE_URL] = player_page(drive_payload)

        result = await _dispatcher(fake_fetcher, fake_extractor).resolve_episode(
            EPISODE_URL
        )

        assert len(result.links) == 1
        assert [o.status for o in result.outcomes] == [
            CandidateStatus.DECODE_FAILED,
            CandidateStatus.RESOLVED,
        ]
        assert result.outcomes[0].reference is None

    @pytest.mark.asyncio
    async def test_unexpected_exception_isolated(
        self,
        fake_fetcher: AsyncMock,
        encode_mirror: Callable[[str], str],
        episode_page: Callable[..., str],
        player_page: Callable[[str], str],
        drive_payload: str,
    ) -> None:
        extractor = AsyncMock()
        extractor.extract = AsyncMock(side_effect=RuntimeError("boom"))
        fake_fetcher.pages[EPISODE_URL] = episode_page(
            encode_mirror(EXTERNAL_URL), encode_mirror(DRIVE_URL)
        )
        fake_fetcher.pages[DRIVE_URL] = player_page(drive_payload)

        result = await _dispatcher(fake_fetcher, extractor).resolve_episode(EPISODE_URL)

        assert [o.status for o in result.outcomes] == [
            CandidateStatus.ERROR,
            CandidateStatus.RESOLVED,
        ]
        assert result.outcomes[0].error == "boom"
        assert len(result.links) == 1

    @pytest.mark.asyncio
    async def test_slow_candidate_times_out(
        self,
        fake_fetcher: AsyncMock,
        encode_mirror: Callable[[str], str],
        episode_page: Callable[..., str],
    ) -> None:
        async def _hang(url, referer, link_sink, subtitle_sink):
            await asyncio.sleep(10)
            return True

        extractor = AsyncMock()
        extractor.extract = AsyncMock(side_effect=_hang)
        fake_fetcher.pages[EPISODE_URL] = episode_page(encode_mirror(EXTERNAL_URL))

        dispatcher = _dispatcher(fake_fetcher, extractor, candidate_timeout=0.05)
        result = await dispatcher.resolve_episode(EPISODE_URL)

        assert result.outcomes[0].status is CandidateStatus.FETCH_FAILED
        assert result.outcomes[0].error == "timeout"

    @pytest.mark.asyncio
    async def test_episode_page_failure_propagates(
        self, fake_fetcher: AsyncMock, fake_extractor: AsyncMock
    ) -> None:
        with pytest.raises(TransportError):
            await _dispatcher(fake_fetcher, fake_extractor).resolve_episode(EPISODE_URL)

    @pytest.mark.asyncio
    async def test_no_mirrors_is_success(
        self,
        fake_fetcher: AsyncMock,
        fake_extractor: AsyncMock,
        episode_page: Callable[..., str],
    ) -> None:
        fake_fetcher.pages[EPISODE_URL] = episode_page()

        result = await _dispatcher(fake_fetcher, fake_extractor).resolve_episode(
            EPISODE_URL
        )

        assert result.success is True
        assert result.outcomes == []


class TestSinks:
    @pytest.mark.asyncio
    async def test_emits_in_discovery_order(
        self,
        fake_fetcher: AsyncMock,
        encode_mirror: Callable[[str], str],
        episode_page: Callable[..., str],
        player_page: Callable[[str], str],
        drive_payload: str,
    ) -> None:
        async def _extract(url, referer, link_sink, subtitle_sink):
            # Finishes after the Drive candidate
            await asyncio.sleep(0.01)
            link_sink(_external_link("https://cdn.streamtape.com/1.mp4"))
            link_sink(_external_link("https://cdn.streamtape.com/2.mp4"))
            return True

        extractor = AsyncMock()
        extractor.extract = AsyncMock(side_effect=_extract)
        fake_fetcher.pages[EPISODE_URL] = episode_page(
            encode_mirror(EXTERNAL_URL), encode_mirror(DRIVE_URL)
        )
        fake_fetcher.pages[DRIVE_URL] = player_page(drive_payload)

        links: list[ResolvedLink] = []
        subtitles: list[ResolvedSubtitle] = []
        ok = await _dispatcher(fake_fetcher, extractor).resolve(
            EPISODE_URL, links.append, subtitles.append
        )

        assert ok is True
        assert [link.url for link in links] == [
            "https://cdn.streamtape.com/1.mp4",
            "https://cdn.streamtape.com/2.mp4",
            "https://cdn.motonews.club/v/abc.mp4",
        ]
        assert len(subtitles) == 1

    @pytest.mark.asyncio
    async def test_repeated_resolution_is_stable(
        self,
        fake_fetcher: AsyncMock,
        fake_extractor: AsyncMock,
        encode_mirror: Callable[[str], str],
        episode_page: Callable[..., str],
        player_page: Callable[[str], str],
        drive_payload: str,
    ) -> None:
        fake_fetcher.pages[EPISODE_URL] = episode_page(
            encode_mirror(DRIVE_URL), encode_mirror(DRIVE_URL)
        )
        fake_fetcher.pages[DRIVE_URL] = player_page(drive_payload)
        dispatcher = _dispatcher(fake_fetcher, fake_extractor)

        first = await dispatcher.resolve_episode(EPISODE_URL)
        second = await dispatcher.resolve_episode(EPISODE_URL)

        assert Counter(first.links) == Counter(second.links)
        assert Counter(first.subtitles) == Counter(second.subtitles)
        # Duplicate candidates are not deduplicated
        assert len(first.links) == 2

"""Ports for resolving third-party player URLs into media links."""

from __future__ import annotations

from typing import Callable, Protocol, runtime_checkable

from dramarr.domain.entities.media import ResolvedLink, ResolvedSubtitle

LinkSink = Callable[[ResolvedLink], None]
SubtitleSink = Callable[[ResolvedSubtitle], None]


@runtime_checkable
class ExternalExtractorPort(Protocol):
    """Resolves any candidate whose origin is not handled in-house."""

    async def extract(
        self,
        url: str,
        referer: str,
        link_sink: LinkSink,
        subtitle_sink: SubtitleSink,
    ) -> bool:
        """Push resolved links/subtitles into the sinks.

        Returns ``False`` if nothing could be resolved.
        """
        ...


@runtime_checkable
class HosterExtractorPort(Protocol):
    """Extractor for a single third-party host (e.g. 'fembed')."""

    @property
    def name(self) -> str:
        """Hoster name this extractor handles."""
        ...

    async def extract(
        self,
        url: str,
        referer: str,
        link_sink: LinkSink,
        subtitle_sink: SubtitleSink,
    ) -> bool: ...

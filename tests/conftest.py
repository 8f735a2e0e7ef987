"""Shared test fixtures for the dramarr test suite."""

from __future__ import annotations

import base64
from typing import Callable
from unittest.mock import AsyncMock

import pytest

from dramarr.domain.exceptions import TransportError
from dramarr.infrastructure.common.html_selectors import parse_html

BASE_URL = "https://dramaid.nl"

DRIVE_PAYLOAD = (
    "var player = jwplayer('player');\n"
    "player.setup({\n"
    '  sources: [{"file":"https://cdn.motonews.club/v/abc.mp4",'
    '"label":"720p","type":"mp4"}],\n'
    '  tracks:[{file:"https://cdn.motonews.club/s/abc.vtt",label:"Indonesia",'
    'kind:"captions", //language\ndefault:true}],\n'
    "  width: '100%',\n"
    "});"
)


# ---------------------------------------------------------------------------
# Markup builders
# ---------------------------------------------------------------------------


@pytest.fixture()
def base_url() -> str:
    return BASE_URL


@pytest.fixture()
def drive_payload() -> str:
    return DRIVE_PAYLOAD


@pytest.fixture()
def encode_mirror() -> Callable[[str], str]:
    """Base64-encode an iframe fragment the way the site embeds mirrors."""

    def _encode(src: str) -> str:
        fragment = f'<iframe src="{src}" frameborder="0" allowfullscreen></iframe>'
        return base64.b64encode(fragment.encode("utf-8")).decode("ascii")

    return _encode


@pytest.fixture()
def episode_page() -> Callable[..., str]:
    """Build an episode page whose mirror selector holds the given values."""

    def _build(*values: str) -> str:
        options = "\n".join(f'<option value="{v}">Server</option>' for v in values)
        return (
            "<html><body>"
            '<div class="mobius"><select class="mirror">'
            '<option value="">Pilih Server Video</option>'
            f"{options}"
            "</select></div>"
            "</body></html>"
        )

    return _build


@pytest.fixture()
def player_page() -> Callable[[str], str]:
    """Build a Drive player page with the config script after ``.picasa``."""

    def _build(payload: str) -> str:
        return (
            "<html><body>"
            '<img class="picasa" src="/logo.png">'
            f'<script type="text/javascript">{payload}</script>'
            "</body></html>"
        )

    return _build


# ---------------------------------------------------------------------------
# Port doubles
# ---------------------------------------------------------------------------


@pytest.fixture()
def fake_fetcher() -> AsyncMock:
    """PageFetcherPort double serving HTML from ``fetcher.pages`` by URL.

    Unknown URLs raise ``TransportError`` like an HTTP 404 would.
    """
    pages: dict[str, str] = {}

    async def _fetch(url: str, *, referer: str | None = None):
        if url not in pages:
            raise TransportError(url, "HTTP 404")
        return parse_html(pages[url])

    fetcher = AsyncMock()
    fetcher.pages = pages
    fetcher.fetch_document = AsyncMock(side_effect=_fetch)
    return fetcher


@pytest.fixture()
def fake_extractor() -> AsyncMock:
    """ExternalExtractorPort double that reports failure by default."""
    extractor = AsyncMock()
    extractor.extract = AsyncMock(return_value=False)
    return extractor

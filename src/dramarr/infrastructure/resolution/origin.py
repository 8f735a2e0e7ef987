"""Classify candidate player URLs by origin."""

from __future__ import annotations

from urllib.parse import urlparse

from dramarr.domain.entities.media import ExternalOrigin, Origin, SpecialOrigin

# The site still embeds its retired fembed mirror under this host.
LEGACY_HOST = "https://ndrama.xyz"
CURRENT_HOST = "https://www.fembed.com"

# Host signature of the site's own "Drive" player.
SPECIAL_ORIGIN_SIGNATURE = "motonews"


def rewrite_legacy_host(url: str) -> str:
    """Replace the legacy mirror host with its current equivalent."""
    return url.replace(LEGACY_HOST, CURRENT_HOST)


def is_special_origin(url: str) -> bool:
    hostname = urlparse(url).hostname or ""
    return SPECIAL_ORIGIN_SIGNATURE in hostname


def classify(url: str, base_url: str) -> Origin:
    """Rewrite *url* and decide which resolution path handles it.

    External origins carry the site's base URL as referer hint.
    """
    url = rewrite_legacy_host(url)
    if is_special_origin(url):
        return SpecialOrigin(url=url)
    return ExternalOrigin(url=url, referer=f"{base_url}/")

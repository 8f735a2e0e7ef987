"""Quality-tier inference from free-text variant labels."""

from __future__ import annotations

import re

from guessit import guessit

from dramarr.domain.entities.media import StreamQuality

_TIERS: tuple[StreamQuality, ...] = tuple(
    q for q in StreamQuality if q is not StreamQuality.UNKNOWN
)

# "720p", "1080P", "480 p", "1080p60"
_RESOLUTION_RE = re.compile(r"(?<!\d)(\d{3,4})\s*[pP](?![A-Za-z])")
# A label that is only the height, e.g. "720"
_BARE_HEIGHT_RE = re.compile(r"\s*(\d{3,4})\s*")
# guessit screen_size values such as "720p", "1080i" or "2160p"
_SCREEN_SIZE_RE = re.compile(r"(\d{3,4})")

_BADGE_TO_QUALITY: dict[str, StreamQuality] = {
    "4K": StreamQuality.P2160,
    "UHD": StreamQuality.P2160,
    "2K": StreamQuality.P1440,
    "QHD": StreamQuality.P1440,
    "FHD": StreamQuality.P1080,
    "FULLHD": StreamQuality.P1080,
    "HD": StreamQuality.P720,
    "SD": StreamQuality.P480,
}


def nearest_tier(height: int) -> StreamQuality:
    """Map a pixel height to the closest known tier (ties go to the lower tier)."""
    if height <= 0:
        return StreamQuality.UNKNOWN
    return min(_TIERS, key=lambda q: (abs(int(q) - height), int(q)))


def _quality_from_badge(label: str) -> StreamQuality:
    for token in re.split(r"[\s_\-/|]+", label.upper()):
        quality = _BADGE_TO_QUALITY.get(token)
        if quality is not None:
            return quality
    return StreamQuality.UNKNOWN


def _quality_from_guessit(label: str) -> StreamQuality:
    screen_size = guessit(label).get("screen_size")
    if not screen_size:
        return StreamQuality.UNKNOWN
    match = _SCREEN_SIZE_RE.search(str(screen_size))
    if match is None:
        return StreamQuality.UNKNOWN
    return nearest_tier(int(match.group(1)))


def parse_quality(label: str | None) -> StreamQuality:
    """Infer a quality tier from a label like ``"720p"`` or ``"HD"``.

    Priority: 1) ``NNNp`` height or a label that is only the height,
    2) badge word, 3) guessit ``screen_size``. Returns UNKNOWN when nothing matches.
    """
    if not label or not label.strip():
        return StreamQuality.UNKNOWN

    match = _RESOLUTION_RE.search(label) or _BARE_HEIGHT_RE.fullmatch(label)
    if match:
        return nearest_tier(int(match.group(1)))

    quality = _quality_from_badge(label)
    if quality is not StreamQuality.UNKNOWN:
        return quality

    return _quality_from_guessit(label)

"""Map decoded player records to the uniform link/subtitle model."""

from __future__ import annotations

from dramarr.domain.entities.media import (
    ResolvedLink,
    ResolvedSubtitle,
    TrackRecord,
    VariantRecord,
)
from dramarr.infrastructure.common.parsers import fix_url
from dramarr.infrastructure.common.quality_parser import parse_quality

DRIVE_PROVIDER = "Drive"
# The Drive CDN rejects requests without this referer.
DRIVE_REFERER = "https://motonews.club/"


def normalize_variant(record: VariantRecord, name: str, base_url: str) -> ResolvedLink:
    return ResolvedLink(
        name=name,
        provider=DRIVE_PROVIDER,
        url=fix_url(record.file, base_url),
        referer=DRIVE_REFERER,
        quality=parse_quality(record.label),
        is_hls=record.type.lower() == "hls",
    )


def subtitle_label(label: str) -> str:
    """Return the display label for a subtitle track.

    Labels containing ``Indonesia`` get an ``n`` appended
    (``"Indonesia"`` -> ``"Indonesian"``); all others are kept verbatim.
    """
    if "Indonesia" in label:
        return f"{label}n"
    return label


def normalize_track(record: TrackRecord) -> ResolvedSubtitle:
    return ResolvedSubtitle(label=subtitle_label(record.label), url=record.file)


def normalize(
    variants: list[VariantRecord],
    tracks: list[TrackRecord],
    *,
    name: str,
    base_url: str,
) -> tuple[list[ResolvedLink], list[ResolvedSubtitle]]:
    """Normalize all records of one candidate, preserving decode order."""
    links = [normalize_variant(v, name, base_url) for v in variants]
    subtitles = [normalize_track(t) for t in tracks]
    return links, subtitles

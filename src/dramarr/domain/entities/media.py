"""Domain entities for media-link resolution.

Pure value objects without I/O.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Union


class StreamQuality(IntEnum):
    """Coarse quality tiers (value = vertical resolution, 0 = unknown)."""

    UNKNOWN = 0
    P144 = 144
    P240 = 240
    P360 = 360
    P480 = 480
    P720 = 720
    P1080 = 1080
    P1440 = 1440
    P2160 = 2160


@dataclass(frozen=True)
class CandidateReference:
    """An embedded-player URL decoded from one mirror selector entry."""

    url: str
    raw_value: str  # Base64 attribute value it was decoded from


@dataclass(frozen=True)
class VariantRecord:
    """One playable rendition decoded from a player payload."""

    file: str
    label: str
    type: str  # "mp4", "hls", ...
    default: bool | None = None


@dataclass(frozen=True)
class TrackRecord:
    """One subtitle track decoded from a player payload."""

    file: str
    label: str
    kind: str  # "captions", "subtitles", ...
    default: bool | None = None


@dataclass(frozen=True)
class ResolvedLink:
    """A directly playable media link."""

    name: str
    provider: str
    url: str
    referer: str
    quality: StreamQuality = StreamQuality.UNKNOWN
    is_hls: bool = False  # True for adaptive-streaming manifests (.m3u8)


@dataclass(frozen=True)
class ResolvedSubtitle:
    label: str
    url: str


@dataclass(frozen=True)
class SpecialOrigin:
    """Player hosted on the site's own "Drive" mirror; resolved in-house."""

    url: str


@dataclass(frozen=True)
class ExternalOrigin:
    """Player on a third-party host; resolved by an external extractor."""

    url: str
    referer: str


Origin = Union[SpecialOrigin, ExternalOrigin]


class CandidateStatus(str, Enum):
    """Outcome of resolving a single candidate reference."""

    RESOLVED = "resolved"
    EMPTY = "empty"  # Fetched fine, but nothing usable in the payload
    FETCH_FAILED = "fetch_failed"
    DECODE_FAILED = "decode_failed"
    EXTRACTOR_FAILED = "extractor_failed"
    ERROR = "error"  # Unexpected exception, isolated to this candidate


@dataclass(frozen=True)
class CandidateOutcome:
    """Per-candidate result; never surfaced as an error to the caller."""

    reference: CandidateReference | None
    status: CandidateStatus
    origin: Origin | None = None
    links: tuple[ResolvedLink, ...] = ()
    subtitles: tuple[ResolvedSubtitle, ...] = ()
    error: str | None = None


@dataclass(frozen=True)
class ResolutionResult:
    """Aggregate of all candidates for one episode page."""

    links: list[ResolvedLink] = field(default_factory=list)
    subtitles: list[ResolvedSubtitle] = field(default_factory=list)
    outcomes: list[CandidateOutcome] = field(default_factory=list)
    success: bool = True

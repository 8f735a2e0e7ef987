"""Repair the Drive player's JavaScript config into structured records.

The player page embeds a JWPlayer setup call whose ``sources`` and
``tracks`` arrays are JavaScript object literals, not JSON::

    sources: [{"file":"https://...","label":"720p","type":"mp4"}],
    tracks:[{file:"https://.../id.vtt",label:"Indonesia",kind:"captions", //language
             default:true}],

Instead of evaluating JavaScript, each array body is cut out by its marker
and parsed as JSON.  The ``sources`` body is already valid JSON; only the
``tracks`` body is repaired first (drop the stray ``//language`` comment
token, quote bare identifier keys).  Anything outside these irregularities
fails closed: the affected list is empty and the other list is unaffected.
"""

from __future__ import annotations

import json
import re
from typing import TypeVar

import structlog
from pydantic import TypeAdapter, ValidationError

from dramarr.domain.entities.media import TrackRecord, VariantRecord

log = structlog.get_logger(__name__)

SOURCES_MARKER = "sources: ["
TRACKS_MARKER = "tracks:["
SEGMENT_END = "],"

# Comment token the site leaves after the caption entry
STRAY_TOKENS: tuple[str, ...] = ("//language",)

_BARE_KEY_RE = re.compile(r"([A-Za-z_$][\w$]*)(\s*:)")

_VARIANTS_ADAPTER = TypeAdapter(list[VariantRecord])
_TRACKS_ADAPTER = TypeAdapter(list[TrackRecord])

_R = TypeVar("_R")


def extract_segment(
    text: str, start_marker: str, end_marker: str = SEGMENT_END
) -> str | None:
    """Return the text between *start_marker* and the next *end_marker*.

    Returns ``None`` when the start marker is absent.  A missing end marker
    yields the remainder of the text (which then usually fails to parse).
    """
    start = text.find(start_marker)
    if start == -1:
        return None
    start += len(start_marker)
    end = text.find(end_marker, start)
    if end == -1:
        return text[start:]
    return text[start:end]


def _string_end(text: str, start: int) -> int:
    """Return the index just past the string literal opened at *start*."""
    quote = text[start]
    i = start + 1
    while i < len(text):
        ch = text[i]
        if ch == "\\":
            i += 2
            continue
        if ch == quote:
            return i + 1
        i += 1
    return len(text)


def quote_bare_keys(text: str) -> str:
    """Quote unquoted object keys (``{file:"x"}`` -> ``{"file":"x"}``).

    Only identifiers in key position (after ``{`` or ``,``, followed by
    ``:``) are touched; string literals are copied verbatim, so values such
    as ``"profile.vtt"`` stay intact.  Already-quoted keys are unchanged.
    """
    out: list[str] = []
    expect_key = False
    i = 0
    while i < len(text):
        ch = text[i]
        if ch in "\"'":
            end = _string_end(text, i)
            out.append(text[i:end])
            i = end
            expect_key = False
            continue
        if ch in "{,":
            out.append(ch)
            expect_key = True
            i += 1
            continue
        if expect_key and not ch.isspace():
            match = _BARE_KEY_RE.match(text, i)
            if match:
                out.append(f'"{match.group(1)}"{match.group(2)}')
                i = match.end()
                expect_key = False
                continue
            expect_key = False
        out.append(ch)
        i += 1
    return "".join(out)


def repair_segment(segment: str) -> str:
    """Apply the text fixes and wrap the segment into a JSON array."""
    for token in STRAY_TOKENS:
        segment = segment.replace(token, "")
    return f"[{quote_bare_keys(segment)}]"


def _decode(text: str | None, adapter: TypeAdapter[list[_R]], kind: str) -> list[_R]:
    if text is None:
        log.debug("player_segment_missing", kind=kind)
        return []
    try:
        return adapter.validate_python(json.loads(text))
    except json.JSONDecodeError as exc:
        log.debug("player_segment_invalid_json", kind=kind, error=str(exc))
    except ValidationError as exc:
        log.debug("player_segment_invalid_records", kind=kind, errors=exc.error_count())
    return []


def parse_variants(payload: str) -> list[VariantRecord]:
    """Decode the ``sources`` array of a player payload (``[]`` on failure)."""
    segment = extract_segment(payload, SOURCES_MARKER)
    text = f"[{segment}]" if segment is not None else None
    return _decode(text, _VARIANTS_ADAPTER, "sources")


def parse_tracks(payload: str) -> list[TrackRecord]:
    """Decode the ``tracks`` array of a player payload (``[]`` on failure)."""
    segment = extract_segment(payload, TRACKS_MARKER)
    text = repair_segment(segment) if segment is not None else None
    return _decode(text, _TRACKS_ADAPTER, "tracks")

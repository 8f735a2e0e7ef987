"""Media-link resolution pipeline for episode pages."""

from __future__ import annotations

from .dispatcher import ResolutionDispatcher
from .origin import classify, rewrite_legacy_host
from .quasi_json import parse_tracks, parse_variants

__all__ = [
    "ResolutionDispatcher",
    "classify",
    "parse_tracks",
    "parse_variants",
    "rewrite_legacy_host",
]

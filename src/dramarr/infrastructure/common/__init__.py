"""Common infrastructure utilities."""

from __future__ import annotations

from .parsers import fix_url, parse_episode_number, series_url_for
from .quality_parser import parse_quality

__all__ = [
    "fix_url",
    "parse_episode_number",
    "parse_quality",
    "series_url_for",
]

"""Extractors for third-party player hosts."""

from __future__ import annotations

from .registry import ExtractorRegistry, extract_domain

__all__ = ["ExtractorRegistry", "extract_domain"]

"""Site plugins."""

from __future__ import annotations

from .dramaid import DramaidPlugin

__all__ = ["DramaidPlugin"]

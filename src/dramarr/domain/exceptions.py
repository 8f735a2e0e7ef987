"""Domain exceptions."""

from __future__ import annotations


class DramarrError(Exception):
    """Base class for all dramarr errors."""


class TransportError(DramarrError):
    """Raised when a page cannot be fetched (network error, timeout, HTTP >= 400)."""

    def __init__(self, url: str, reason: str) -> None:
        super().__init__(f"{url}: {reason}")
        self.url = url
        self.reason = reason


class ReferenceDecodeError(DramarrError):
    """Raised when a mirror entry cannot be decoded into a player URL."""

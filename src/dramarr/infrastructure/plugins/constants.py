"""Shared constants for site plugins."""

from __future__ import annotations

from dramarr.infrastructure.config.defaults import DEFAULT_USER_AGENT

DEFAULT_CLIENT_TIMEOUT = 15.0
DEFAULT_MAX_CONCURRENT = 4
DEFAULT_CANDIDATE_TIMEOUT = 30.0

__all__ = [
    "DEFAULT_CANDIDATE_TIMEOUT",
    "DEFAULT_CLIENT_TIMEOUT",
    "DEFAULT_MAX_CONCURRENT",
    "DEFAULT_USER_AGENT",
]

"""Hardcoded default configuration values."""

from __future__ import annotations

from typing import Any

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/131.0.0.0 Safari/537.36"
)

DEFAULT_CONFIG: dict[str, Any] = {
    "app_name": "dramarr",
    "environment": "dev",
    "site": {
        "base_url": "https://dramaid.nl",
    },
    "http": {
        "timeout_seconds": 15.0,
        "follow_redirects": True,
        "user_agent": DEFAULT_USER_AGENT,
    },
    "resolution": {
        "max_concurrent_candidates": 4,
        "candidate_timeout_seconds": 30.0,
    },
    "logging": {
        "level": "INFO",
        "format": None,  # Derived from environment in schema.py
    },
}

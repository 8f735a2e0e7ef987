from __future__ import annotations

from copy import deepcopy
from pathlib import Path
from typing import Any, Mapping

import yaml
from dotenv import load_dotenv

from .defaults import DEFAULT_CONFIG
from .schema import AppConfig, EnvOverrides

_SECTIONS: tuple[str, ...] = ("site", "http", "resolution", "logging")

# Flat keys (env vars, overrides) -> (section, key) in the YAML layout
_FLAT_KEYS: dict[str, tuple[str, str]] = {
    "site_base_url": ("site", "base_url"),
    "http_timeout_seconds": ("http", "timeout_seconds"),
    "http_follow_redirects": ("http", "follow_redirects"),
    "http_user_agent": ("http", "user_agent"),
    "max_concurrent_candidates": ("resolution", "max_concurrent_candidates"),
    "candidate_timeout_seconds": ("resolution", "candidate_timeout_seconds"),
    "log_level": ("logging", "level"),
    "log_format": ("logging", "format"),
}

_TOP_LEVEL_KEYS: tuple[str, ...] = ("app_name", "environment")


def _deep_merge(base: dict[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    """Merge *override* into *base* in place; nested mappings merge, rest wins."""
    for key, value in override.items():
        current = base.get(key)
        if isinstance(current, dict) and isinstance(value, Mapping):
            _deep_merge(current, value)
        else:
            base[key] = value
    return base


def _sectioned(layer: Mapping[str, Any]) -> dict[str, Any]:
    """
    Bring one layer (defaults/YAML/ENV/overrides) into the sectioned shape.

    Layers may mix both spellings, e.g. ``{"http": {"timeout_seconds": 5}}``
    and ``{"http_timeout_seconds": 5}``; the flat spelling wins.
    """
    out: dict[str, Any] = {
        section: dict(layer[section])
        for section in _SECTIONS
        if isinstance(layer.get(section), Mapping)
    }
    for key in _TOP_LEVEL_KEYS:
        if key in layer:
            out[key] = layer[key]
    for flat_key, (section, key) in _FLAT_KEYS.items():
        if flat_key in layer:
            out.setdefault(section, {})[key] = layer[flat_key]
    return out


def _read_yaml(path: Path) -> dict[str, Any]:
    parsed = yaml.safe_load(path.read_text(encoding="utf-8"))
    if parsed is None:
        return {}
    if not isinstance(parsed, dict):
        raise ValueError(f"Config YAML must be a mapping, got: {type(parsed)!r}")
    return parsed


def load_config(
    *,
    config_path: Path | None = None,
    dotenv_path: Path | None = None,
    overrides: dict[str, Any] | None = None,
) -> AppConfig:
    """
    Load configuration with strict precedence:
    defaults < YAML file < env vars (incl. .env) < explicit overrides

    Reads only the given files; never creates files or directories.
    """
    # .env feeds the environment, so it lands in the env layer below
    if dotenv_path is not None:
        if not dotenv_path.exists():
            raise FileNotFoundError(dotenv_path)
        load_dotenv(dotenv_path, override=False)

    merged = _sectioned(deepcopy(DEFAULT_CONFIG))

    if config_path is not None:
        if not config_path.exists():
            raise FileNotFoundError(config_path)
        _deep_merge(merged, _sectioned(_read_yaml(config_path)))

    _deep_merge(merged, _sectioned(EnvOverrides().to_update_dict()))
    _deep_merge(merged, _sectioned(overrides or {}))

    return AppConfig.model_validate(merged)

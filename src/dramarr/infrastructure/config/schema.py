"""Pydantic configuration models with validation."""

from __future__ import annotations

from typing import Any, Literal, Optional

from pydantic import (
    AliasChoices,
    AliasPath,
    BaseModel,
    Field,
    field_validator,
    model_validator,
)
from pydantic_settings import BaseSettings, SettingsConfigDict

from .defaults import DEFAULT_USER_AGENT

Environment = Literal["dev", "test", "prod"]
LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR"]
LogFormat = Literal["json", "console"]


class AppConfig(BaseModel):
    """
    Validated settings for the site plugin and its resolution pipeline.

    Fields accept both the flat name (``http_timeout_seconds``) and the
    sectioned YAML path (``http.timeout_seconds``).  Env vars are read
    separately by ``EnvOverrides`` so that load.py controls precedence.
    """

    # General
    app_name: str = Field(default="dramarr", description="Application name.")
    environment: Environment = Field(
        default="dev",
        description="Runtime environment (affects defaults like log format).",
    )

    # Site (YAML section: site.*)
    site_base_url: str = Field(
        default="https://dramaid.nl",
        validation_alias=AliasChoices(
            "site_base_url",
            AliasPath("site", "base_url"),
        ),
        description="Scheme + host of the drama site, without trailing slash.",
    )

    # HTTP (YAML section: http.*)
    http_timeout_seconds: float = Field(
        default=15.0,
        validation_alias=AliasChoices(
            "http_timeout_seconds",
            AliasPath("http", "timeout_seconds"),
        ),
        description="Timeout in seconds for every page fetch.",
    )
    http_follow_redirects: bool = Field(
        default=True,
        validation_alias=AliasChoices(
            "http_follow_redirects",
            AliasPath("http", "follow_redirects"),
        ),
        description="Whether HTTP client follows redirects.",
    )
    http_user_agent: str = Field(
        default=DEFAULT_USER_AGENT,
        validation_alias=AliasChoices(
            "http_user_agent",
            AliasPath("http", "user_agent"),
        ),
        description="User-Agent for outgoing HTTP requests.",
    )

    # Resolution (YAML section: resolution.*)
    max_concurrent_candidates: int = Field(
        default=4,
        validation_alias=AliasChoices(
            "max_concurrent_candidates",
            AliasPath("resolution", "max_concurrent_candidates"),
        ),
        description="Max player candidates resolved in parallel per episode.",
    )
    candidate_timeout_seconds: float = Field(
        default=30.0,
        validation_alias=AliasChoices(
            "candidate_timeout_seconds",
            AliasPath("resolution", "candidate_timeout_seconds"),
        ),
        description="Upper bound for resolving a single candidate.",
    )

    # Logging (YAML section: logging.*)
    log_level: LogLevel = Field(
        default="INFO",
        validation_alias=AliasChoices(
            "log_level",
            AliasPath("logging", "level"),
        ),
        description="Log level.",
    )
    log_format: Optional[LogFormat] = Field(
        default=None,
        validation_alias=AliasChoices(
            "log_format",
            AliasPath("logging", "format"),
        ),
        description=(
            "Log renderer format (console/json). If unset, derived from environment."
        ),
    )

    @field_validator("site_base_url")
    @classmethod
    def _validate_base_url(cls, v: str) -> str:
        if not v.startswith(("http://", "https://")):
            raise ValueError("site_base_url must start with http:// or https://")
        return v.rstrip("/")

    @field_validator("http_timeout_seconds", "candidate_timeout_seconds")
    @classmethod
    def _validate_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("timeouts must be > 0")
        return v

    @field_validator("max_concurrent_candidates")
    @classmethod
    def _validate_concurrency(cls, v: int) -> int:
        if v < 1:
            raise ValueError("max_concurrent_candidates must be >= 1")
        return v

    @model_validator(mode="after")
    def _derive_defaults(self) -> "AppConfig":
        # Default log format: console in dev/test, json in prod.
        if self.log_format is None:
            self.log_format = "json" if self.environment == "prod" else "console"
        return self

    def to_sectioned_dict(self) -> dict[str, Any]:
        """
        Dump configuration in the sectioned shape used by config.yaml.
        """
        return {
            "app_name": self.app_name,
            "environment": self.environment,
            "site": {"base_url": self.site_base_url},
            "http": {
                "timeout_seconds": self.http_timeout_seconds,
                "follow_redirects": self.http_follow_redirects,
                "user_agent": self.http_user_agent,
            },
            "resolution": {
                "max_concurrent_candidates": self.max_concurrent_candidates,
                "candidate_timeout_seconds": self.candidate_timeout_seconds,
            },
            "logging": {"level": self.log_level, "format": self.log_format},
        }


class EnvOverrides(BaseSettings):
    """
    Environment-variable overrides (all optional).

    load.py creates EnvOverrides() to read DRAMARR_* variables, converts
    them to a dict of set values and merges that into YAML/defaults before
    validating AppConfig.

    Supported env var examples (flat, explicit):
    - DRAMARR_SITE_BASE_URL
    - DRAMARR_HTTP_TIMEOUT_SECONDS
    - DRAMARR_MAX_CONCURRENT_CANDIDATES
    - DRAMARR_LOG_LEVEL
    """

    model_config = SettingsConfigDict(
        env_prefix="DRAMARR_",
        extra="ignore",
        case_sensitive=False,
    )

    app_name: Optional[str] = None
    environment: Optional[Environment] = None

    site_base_url: Optional[str] = None

    http_timeout_seconds: Optional[float] = None
    http_follow_redirects: Optional[bool] = None
    http_user_agent: Optional[str] = None

    max_concurrent_candidates: Optional[int] = None
    candidate_timeout_seconds: Optional[float] = None

    log_level: Optional[LogLevel] = None
    log_format: Optional[LogFormat] = None

    def to_update_dict(self) -> dict[str, Any]:
        """Return only the variables that were actually set."""
        return self.model_dump(exclude_none=True)

"""Pydantic configuration models with validation."""

from __future__ import annotations

from pathlib import Path
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

from wcoresolver.infrastructure.constants import (
    DEFAULT_BASE_DOMAIN,
    DEFAULT_USER_AGENT,
)

Environment = Literal["dev", "test", "prod"]
LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR"]
LogFormat = Literal["json", "console"]
Strategy = Literal["auto", "http", "browser"]


def _normalize_path(value: Any) -> Path:
    """
    Normalize a path-like value without causing filesystem side-effects.

    This function MUST NOT create directories or files.
    """
    if isinstance(value, Path):
        return value.expanduser()
    if isinstance(value, str):
        return Path(value).expanduser()
    raise TypeError(f"Expected path-like value, got: {type(value)!r}")


def _alias(flat: str, section: str, key: str) -> AliasChoices:
    return AliasChoices(flat, AliasPath(section, key))


class AppConfig(BaseModel):
    """
    Canonical application configuration (validated, final).

    Note:
    - YAML is expected to be sectioned
      (site/http/playwright/resolution/logging/cache).
    - Environment variables are read by EnvOverrides(BaseSettings) so load.py
      controls precedence (defaults < YAML < ENV < CLI).
    """

    # General
    app_name: str = Field(default="wcoresolver", description="Application name.")
    environment: Environment = Field(
        default="dev",
        description="Runtime environment (affects defaults like log format).",
    )

    # Site (YAML section: site.*)
    base_domain: str = Field(
        default=DEFAULT_BASE_DOMAIN,
        validation_alias=_alias("base_domain", "site", "base_domain"),
        description="Mirror that relative episode URLs are resolved against.",
    )

    # HTTP (YAML section: http.*)
    http_timeout_seconds: float = Field(
        default=10.0,
        validation_alias=_alias("http_timeout_seconds", "http", "timeout_seconds"),
        description="Read timeout in seconds for every HTTP call.",
    )
    http_connect_timeout_seconds: float = Field(
        default=5.0,
        validation_alias=_alias(
            "http_connect_timeout_seconds", "http", "connect_timeout_seconds"
        ),
        description="Connect timeout in seconds for every HTTP call.",
    )
    http_max_redirects: int = Field(
        default=5,
        validation_alias=_alias("http_max_redirects", "http", "max_redirects"),
        description="Redirect hops followed before a request fails.",
    )
    http_user_agent: str = Field(
        default=DEFAULT_USER_AGENT,
        validation_alias=_alias("http_user_agent", "http", "user_agent"),
        description="Browser identity sent with every request.",
    )

    # Playwright (YAML section: playwright.*)
    playwright_headless: bool = Field(
        default=True,
        validation_alias=_alias("playwright_headless", "playwright", "headless"),
        description="Run Chromium headless.",
    )
    playwright_timeout_ms: int = Field(
        default=30_000,
        validation_alias=_alias("playwright_timeout_ms", "playwright", "timeout_ms"),
        description="Navigation timeout in milliseconds.",
    )
    playwright_poll_interval_ms: int = Field(
        default=300,
        validation_alias=_alias(
            "playwright_poll_interval_ms", "playwright", "poll_interval_ms"
        ),
        description="Interval of the in-page readiness poller.",
    )
    playwright_poll_max_attempts: int = Field(
        default=100,
        validation_alias=_alias(
            "playwright_poll_max_attempts", "playwright", "poll_max_attempts"
        ),
        description="Poller attempts before a render is reported as timed out.",
    )
    playwright_iframe_settle_attempts: int = Field(
        default=15,
        validation_alias=_alias(
            "playwright_iframe_settle_attempts", "playwright", "iframe_settle_attempts"
        ),
        description="Poller attempts before an <iframe> alone settles the page.",
    )

    # Resolution (YAML section: resolution.*)
    resolution_strategy: Strategy = Field(
        default="auto",
        validation_alias=_alias("resolution_strategy", "resolution", "strategy"),
        description="Default strategy: auto (http, then browser), http or browser.",
    )
    browser_enabled: bool = Field(
        default=True,
        validation_alias=_alias("browser_enabled", "resolution", "browser_enabled"),
        description="Allow the browser strategy (requires Playwright browsers).",
    )
    max_iframe_depth: int = Field(
        default=2,
        validation_alias=_alias("max_iframe_depth", "resolution", "max_iframe_depth"),
        description="Nested player iframes followed by the browser strategy.",
    )

    # Logging (YAML section: logging.*)
    log_level: LogLevel = Field(
        default="INFO",
        validation_alias=_alias("log_level", "logging", "level"),
        description="Log level.",
    )
    log_format: Optional[LogFormat] = Field(
        default=None,
        validation_alias=_alias("log_format", "logging", "format"),
        description=(
            "Log renderer format (console/json). If unset, derived from environment."
        ),
    )

    # Cache (YAML section: cache.*)
    cache_dir: Path = Field(
        default=Path("./.cache/wcoresolver"),
        validation_alias=_alias("cache_dir", "cache", "dir"),
        description="Directory of the playback position store.",
    )
    cache_ttl_seconds: int = Field(
        default=30 * 24 * 3600,
        validation_alias=_alias("cache_ttl_seconds", "cache", "ttl_seconds"),
        description="Lifetime of stored playback positions. 0 = never expire.",
    )

    @field_validator("cache_dir", mode="before")
    @classmethod
    def _validate_paths(cls, v: Any) -> Path:
        return _normalize_path(v)

    @field_validator("base_domain")
    @classmethod
    def _validate_base_domain(cls, v: str) -> str:
        v = v.strip().rstrip("/")
        if not v:
            raise ValueError("base_domain must not be empty")
        return v

    @field_validator("http_timeout_seconds", "http_connect_timeout_seconds")
    @classmethod
    def _validate_http_timeouts(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("HTTP timeouts must be > 0")
        return v

    @field_validator("http_max_redirects", "max_iframe_depth")
    @classmethod
    def _validate_non_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError("must be >= 0")
        return v

    @field_validator(
        "playwright_timeout_ms",
        "playwright_poll_interval_ms",
        "playwright_poll_max_attempts",
    )
    @classmethod
    def _validate_playwright_positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("playwright timings must be > 0")
        return v

    @field_validator("cache_ttl_seconds")
    @classmethod
    def _validate_cache_ttl(cls, v: int) -> int:
        if v < 0:
            raise ValueError("cache_ttl_seconds must be >= 0")
        return v

    @model_validator(mode="after")
    def _derive_defaults(self) -> "AppConfig":
        # Default log format: console in dev/test, json in prod.
        if self.log_format is None:
            self.log_format = "json" if self.environment == "prod" else "console"
        return self

    @property
    def playback_ttl(self) -> int | None:
        return self.cache_ttl_seconds or None

    def to_sectioned_dict(self) -> dict[str, Any]:
        """
        Dump configuration in the sectioned shape used by config.yaml/docs.
        """
        return {
            "app_name": self.app_name,
            "environment": self.environment,
            "site": {"base_domain": self.base_domain},
            "http": {
                "timeout_seconds": self.http_timeout_seconds,
                "connect_timeout_seconds": self.http_connect_timeout_seconds,
                "max_redirects": self.http_max_redirects,
                "user_agent": self.http_user_agent,
            },
            "playwright": {
                "headless": self.playwright_headless,
                "timeout_ms": self.playwright_timeout_ms,
                "poll_interval_ms": self.playwright_poll_interval_ms,
                "poll_max_attempts": self.playwright_poll_max_attempts,
                "iframe_settle_attempts": self.playwright_iframe_settle_attempts,
            },
            "resolution": {
                "strategy": self.resolution_strategy,
                "browser_enabled": self.browser_enabled,
                "max_iframe_depth": self.max_iframe_depth,
            },
            "logging": {"level": self.log_level, "format": self.log_format},
            "cache": {
                "dir": str(self.cache_dir),
                "ttl_seconds": self.cache_ttl_seconds,
            },
        }


class EnvOverrides(BaseSettings):
    """
    Environment-variable overrides (all optional).

    load.py creates EnvOverrides() to read WCORESOLVER_* variables and merges
    the values that were set into YAML/defaults before validating AppConfig.

    Supported env var examples (flat, explicit):
    - WCORESOLVER_BASE_DOMAIN
    - WCORESOLVER_HTTP_TIMEOUT_SECONDS
    - WCORESOLVER_RESOLUTION_STRATEGY
    - WCORESOLVER_LOG_LEVEL
    """

    model_config = SettingsConfigDict(
        env_prefix="WCORESOLVER_",
        extra="ignore",
        case_sensitive=False,
    )

    app_name: Optional[str] = None
    environment: Optional[Environment] = None

    base_domain: Optional[str] = None

    http_timeout_seconds: Optional[float] = None
    http_connect_timeout_seconds: Optional[float] = None
    http_max_redirects: Optional[int] = None
    http_user_agent: Optional[str] = None

    playwright_headless: Optional[bool] = None
    playwright_timeout_ms: Optional[int] = None
    playwright_poll_interval_ms: Optional[int] = None
    playwright_poll_max_attempts: Optional[int] = None
    playwright_iframe_settle_attempts: Optional[int] = None

    resolution_strategy: Optional[Strategy] = None
    browser_enabled: Optional[bool] = None
    max_iframe_depth: Optional[int] = None

    log_level: Optional[LogLevel] = None
    log_format: Optional[LogFormat] = None

    cache_dir: Optional[Path] = None
    cache_ttl_seconds: Optional[int] = None

    @field_validator("cache_dir", mode="before")
    @classmethod
    def _validate_paths(cls, v: Any) -> Any:
        if v is None:
            return None
        return _normalize_path(v)

    def to_update_dict(self) -> dict[str, Any]:
        """
        Return only values that were actually provided (non-None), for merging.
        """
        return self.model_dump(exclude_none=True)

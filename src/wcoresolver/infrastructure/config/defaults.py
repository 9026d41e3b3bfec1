"""Hardcoded default configuration values."""

from __future__ import annotations

from typing import Any

from wcoresolver.infrastructure.constants import (
    DEFAULT_BASE_DOMAIN,
    DEFAULT_CONNECT_TIMEOUT,
    DEFAULT_IFRAME_SETTLE_ATTEMPTS,
    DEFAULT_MAX_REDIRECTS,
    DEFAULT_POLL_INTERVAL_MS,
    DEFAULT_POLL_MAX_ATTEMPTS,
    DEFAULT_READ_TIMEOUT,
    DEFAULT_USER_AGENT,
)

DEFAULT_CONFIG: dict[str, Any] = {
    "app_name": "wcoresolver",
    "environment": "dev",
    "site": {
        "base_domain": DEFAULT_BASE_DOMAIN,
    },
    "http": {
        "timeout_seconds": DEFAULT_READ_TIMEOUT,
        "connect_timeout_seconds": DEFAULT_CONNECT_TIMEOUT,
        "max_redirects": DEFAULT_MAX_REDIRECTS,
        "user_agent": DEFAULT_USER_AGENT,
    },
    "playwright": {
        "headless": True,
        "timeout_ms": 30_000,
        "poll_interval_ms": DEFAULT_POLL_INTERVAL_MS,
        "poll_max_attempts": DEFAULT_POLL_MAX_ATTEMPTS,
        "iframe_settle_attempts": DEFAULT_IFRAME_SETTLE_ATTEMPTS,
    },
    "resolution": {
        "strategy": "auto",
        "browser_enabled": True,
        "max_iframe_depth": 2,
    },
    "logging": {
        "level": "INFO",
        "format": None,  # Derived from environment in schema.py
    },
    "cache": {
        "dir": "./.cache/wcoresolver",
        "ttl_seconds": 30 * 24 * 3600,
    },
}

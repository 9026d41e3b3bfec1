"""Shared constants for talking to the origin site."""

from __future__ import annotations

# The origin's player endpoints are keyed to this exact client fingerprint.
DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (X11; Linux x86_64; rv:146.0) Gecko/20100101 Firefox/146.0"
)

DEFAULT_BASE_DOMAIN = "https://www.wcoflix.tv"

DEFAULT_READ_TIMEOUT = 10.0
DEFAULT_CONNECT_TIMEOUT = 5.0
DEFAULT_MAX_REDIRECTS = 5

# Browser poller: 100 attempts x 300 ms ~= 30 s hard cap.
DEFAULT_POLL_INTERVAL_MS = 300
DEFAULT_POLL_MAX_ATTEMPTS = 100
DEFAULT_IFRAME_SETTLE_ATTEMPTS = 15

XHR_HEADERS = {"X-Requested-With": "XMLHttpRequest"}

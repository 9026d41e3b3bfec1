"""httpx-backed page fetcher with a fixed browser identity.

Every request of the HTTP-only pipeline goes through ``HttpxPageFetcher``
so the origin always sees the same user-agent. Redirects are followed up
to the client's ``max_redirects``; anything that is not a 2xx response
becomes a ``NetworkError``. Retry policy belongs to the caller.
"""

from __future__ import annotations

from typing import Mapping

import httpx
import structlog

from wcoresolver.domain.exceptions import NetworkError
from wcoresolver.infrastructure.constants import (
    DEFAULT_CONNECT_TIMEOUT,
    DEFAULT_MAX_REDIRECTS,
    DEFAULT_READ_TIMEOUT,
    DEFAULT_USER_AGENT,
)

log = structlog.get_logger(__name__)

_BROWSER_HEADERS = {
    "Accept": (
        "text/html,application/xhtml+xml,application/xml;q=0.9,"
        "application/json;q=0.9,*/*;q=0.8"
    ),
    "Accept-Language": "en-US,en;q=0.5",
}


def create_http_client(
    *,
    user_agent: str = DEFAULT_USER_AGENT,
    read_timeout: float = DEFAULT_READ_TIMEOUT,
    connect_timeout: float = DEFAULT_CONNECT_TIMEOUT,
    max_redirects: int = DEFAULT_MAX_REDIRECTS,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """Build the shared ``httpx.AsyncClient`` used by the fetcher."""
    return httpx.AsyncClient(
        timeout=httpx.Timeout(read_timeout, connect=connect_timeout),
        follow_redirects=True,
        max_redirects=max_redirects,
        headers={"User-Agent": user_agent},
        transport=transport,
    )


class HttpxPageFetcher:
    """Implements ``PageFetcherPort`` on top of ``httpx.AsyncClient``."""

    def __init__(
        self,
        http_client: httpx.AsyncClient | None = None,
        *,
        user_agent: str = DEFAULT_USER_AGENT,
        read_timeout: float = DEFAULT_READ_TIMEOUT,
        connect_timeout: float = DEFAULT_CONNECT_TIMEOUT,
        max_redirects: int = DEFAULT_MAX_REDIRECTS,
    ) -> None:
        self._client = http_client
        self._owns_client = http_client is None
        self._user_agent = user_agent
        self._read_timeout = read_timeout
        self._connect_timeout = connect_timeout
        self._max_redirects = max_redirects

    def _ensure_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = create_http_client(
                user_agent=self._user_agent,
                read_timeout=self._read_timeout,
                connect_timeout=self._connect_timeout,
                max_redirects=self._max_redirects,
            )
        return self._client

    async def fetch(
        self,
        url: str,
        referer: str | None = None,
        extra_headers: Mapping[str, str] | None = None,
    ) -> str:
        """GET *url* and return the body text.

        Raises:
            NetworkError: unreachable host, timeout, redirect loop or non-2xx.
        """
        headers = {**_BROWSER_HEADERS, "User-Agent": self._user_agent}
        if referer:
            headers["Referer"] = referer
        if extra_headers:
            headers.update(extra_headers)

        client = self._ensure_client()
        try:
            resp = await client.get(url, headers=headers, follow_redirects=True)
        except httpx.TooManyRedirects as exc:
            log.warning("fetch_too_many_redirects", url=url)
            raise NetworkError(url, "too many redirects") from exc
        except httpx.TimeoutException as exc:
            log.warning("fetch_timeout", url=url)
            raise NetworkError(url, "request timed out", timed_out=True) from exc
        except httpx.HTTPError as exc:
            log.warning("fetch_failed", url=url, error=str(exc))
            raise NetworkError(url, f"request failed: {exc}") from exc

        if not resp.is_success:
            log.warning("fetch_http_error", url=url, status=resp.status_code)
            raise NetworkError(
                url, f"HTTP {resp.status_code}", status=resp.status_code
            )

        log.debug(
            "fetch_ok",
            url=url,
            final_url=str(resp.url),
            status=resp.status_code,
            body_len=len(resp.text),
        )
        return resp.text

    async def aclose(self) -> None:
        """Close the client if this fetcher created it."""
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None

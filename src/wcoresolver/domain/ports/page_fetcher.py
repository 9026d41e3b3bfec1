"""Port for the network I/O primitive used by the HTTP-only pipeline."""

from __future__ import annotations

from typing import Mapping, Protocol


class PageFetcherPort(Protocol):
    """Issues GET requests with a fixed client identity.

    Raises ``NetworkError`` for unreachable hosts, non-2xx responses,
    timeouts and redirect loops. Never retries.
    """

    async def fetch(
        self,
        url: str,
        referer: str | None = None,
        extra_headers: Mapping[str, str] | None = None,
    ) -> str: ...

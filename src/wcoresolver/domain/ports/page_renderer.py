"""Port for the JavaScript-capable browsing surface."""

from __future__ import annotations

from typing import Protocol

from wcoresolver.domain.entities.resolution import RenderedPage


class PageRendererPort(Protocol):
    """Loads a page in a browser engine and reports the settled DOM.

    Raises ``BrowserError`` when the page cannot be loaded and
    ``RenderSuperseded`` when a newer render took over the surface.
    """

    async def render(self, url: str, referer: str) -> RenderedPage: ...

    async def cleanup(self) -> None: ...

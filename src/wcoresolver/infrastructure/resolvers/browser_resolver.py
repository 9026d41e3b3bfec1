"""Browser-driven episode resolver.

Lets the origin's own JavaScript run and reads the result from the
rendered DOM. It never calls the token endpoints itself: a video the page
exposes is returned directly, and a discovered player iframe is handed to
``on_iframe`` (the orchestrator) or, without one, rendered in turn.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable

import structlog

from wcoresolver.domain.entities.resolution import (
    EpisodeRef,
    FailureCategory,
    RenderedPage,
    ResolutionFailure,
    ResolutionOutcome,
    ResolutionStage,
)
from wcoresolver.domain.exceptions import BrowserError
from wcoresolver.domain.ports.page_renderer import PageRendererPort
from wcoresolver.infrastructure.extractors import (
    find_iframe_src,
    find_video_source,
    normalize_url,
)

from .common import direct_success

log = structlog.get_logger(__name__)

IframeHandler = Callable[[str, EpisodeRef], Awaitable[ResolutionOutcome]]


class BrowserEpisodeResolver:
    """Resolves episodes through a ``PageRendererPort``."""

    def __init__(self, renderer: PageRendererPort) -> None:
        self._renderer = renderer

    @property
    def name(self) -> str:
        return "browser"

    async def resolve(
        self,
        ref: EpisodeRef,
        *,
        on_iframe: IframeHandler | None = None,
    ) -> ResolutionOutcome:
        page_url = ref.absolute_url
        log.info("browser_resolve_start", url=page_url)

        rendered = await self._render(page_url, ref)
        if isinstance(rendered, ResolutionFailure):
            return rendered

        found = self._video_in(rendered, page_url)
        if found:
            log.info("browser_resolve_direct_video", url=page_url)
            return direct_success(found, page_url)

        iframe_url = find_iframe_src(rendered.html, base_url=page_url)
        if iframe_url is None:
            return self._nothing_found(rendered, page_url)

        log.debug("browser_iframe_found", url=page_url, iframe_url=iframe_url)
        if on_iframe is not None:
            return await on_iframe(iframe_url, ref)
        return await self._resolve_iframe_page(iframe_url, ref)

    async def _resolve_iframe_page(
        self, iframe_url: str, ref: EpisodeRef
    ) -> ResolutionOutcome:
        rendered = await self._render(iframe_url, ref)
        if isinstance(rendered, ResolutionFailure):
            return rendered

        found = self._video_in(rendered, iframe_url)
        if found:
            log.info("browser_resolve_direct_video", url=iframe_url)
            return direct_success(found, iframe_url)
        return self._nothing_found(rendered, iframe_url)

    async def _render(
        self, url: str, ref: EpisodeRef
    ) -> RenderedPage | ResolutionFailure:
        try:
            return await self._renderer.render(url, ref.site_referer)
        except BrowserError as exc:
            # RenderSuperseded is a BrowserError but must reach the caller.
            if type(exc) is not BrowserError:
                raise
            return ResolutionFailure(
                stage=ResolutionStage.FETCH_EPISODE,
                detail=f"browser: {exc}",
                category=FailureCategory.NETWORK,
            )

    @staticmethod
    def _video_in(rendered: RenderedPage, page_url: str) -> str | None:
        if rendered.direct_video_url:
            return rendered.direct_video_url
        found = find_video_source(rendered.html, base_url=page_url)
        return normalize_url(found, page_url) if found else None

    @staticmethod
    def _nothing_found(rendered: RenderedPage, page_url: str) -> ResolutionFailure:
        if rendered.timed_out:
            return ResolutionFailure(
                stage=ResolutionStage.TIMEOUT,
                detail=f"rendered page never settled: {page_url}",
            )
        return ResolutionFailure(
            stage=ResolutionStage.FIND_IFRAME,
            detail=f"no iframe or video in rendered page {page_url}",
        )

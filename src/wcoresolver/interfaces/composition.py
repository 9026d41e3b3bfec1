"""Composition root shared by the HTTP API and the CLI."""

from __future__ import annotations

from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import AsyncIterator, cast

import structlog
from fastapi import FastAPI

from wcoresolver.application.use_cases import (
    PlaybackProgressUseCase,
    ResolutionStrategy,
    ResolveEpisodeUseCase,
)
from wcoresolver.infrastructure.browser import PlaywrightPageRenderer
from wcoresolver.infrastructure.cache import DiskcacheAdapter
from wcoresolver.infrastructure.config.schema import AppConfig
from wcoresolver.infrastructure.http import HttpxPageFetcher
from wcoresolver.infrastructure.persistence import CachePlaybackRepository
from wcoresolver.infrastructure.resolvers import (
    BrowserEpisodeResolver,
    HttpEpisodeResolver,
)
from wcoresolver.interfaces.app_state import AppState

log = structlog.get_logger(__name__)


@dataclass
class Components:
    """Everything a request needs, plus what must be closed afterwards."""

    fetcher: HttpxPageFetcher
    renderer: PlaywrightPageRenderer | None
    resolve_episode: ResolveEpisodeUseCase
    cache: DiskcacheAdapter | None = None
    playback: PlaybackProgressUseCase | None = None

    async def aclose(self) -> None:
        if self.renderer is not None:
            await self.renderer.cleanup()
        await self.fetcher.aclose()
        if self.cache is not None:
            await self.cache.aclose()


def build_resolver(config: AppConfig) -> tuple[
    HttpxPageFetcher, PlaywrightPageRenderer | None, ResolveEpisodeUseCase
]:
    """Wire fetcher, optional browser and the resolution use case.

    Nothing is launched here: the HTTP client opens on first request and
    Chromium on the first render.
    """
    fetcher = HttpxPageFetcher(
        user_agent=config.http_user_agent,
        read_timeout=config.http_timeout_seconds,
        connect_timeout=config.http_connect_timeout_seconds,
        max_redirects=config.http_max_redirects,
    )

    renderer: PlaywrightPageRenderer | None = None
    browser_resolver: BrowserEpisodeResolver | None = None
    if config.browser_enabled:
        renderer = PlaywrightPageRenderer(
            headless=config.playwright_headless,
            user_agent=config.http_user_agent,
            navigation_timeout_ms=config.playwright_timeout_ms,
            poll_interval_ms=config.playwright_poll_interval_ms,
            poll_max_attempts=config.playwright_poll_max_attempts,
            iframe_settle_attempts=config.playwright_iframe_settle_attempts,
        )
        browser_resolver = BrowserEpisodeResolver(renderer)

    use_case = ResolveEpisodeUseCase(
        HttpEpisodeResolver(fetcher),
        browser_resolver,
        default_strategy=ResolutionStrategy(config.resolution_strategy),
        max_iframe_depth=config.max_iframe_depth,
    )
    return fetcher, renderer, use_case


async def build_components(config: AppConfig, *, with_playback: bool = True) -> Components:
    log.debug("components_config", config=config.to_sectioned_dict())
    fetcher, renderer, use_case = build_resolver(config)
    components = Components(
        fetcher=fetcher, renderer=renderer, resolve_episode=use_case
    )
    if with_playback:
        cache = DiskcacheAdapter(
            directory=config.cache_dir, ttl_seconds=config.playback_ttl
        )
        await cache.open()
        components.cache = cache
        components.playback = PlaybackProgressUseCase(
            CachePlaybackRepository(cache, ttl_seconds=config.playback_ttl)
        )
    log.info(
        "components_initialized",
        browser_enabled=renderer is not None,
        strategy=config.resolution_strategy,
        playback=with_playback,
    )
    return components


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Build components on startup, release browser/client/cache on shutdown."""
    state = cast(AppState, app.state)
    state.components = await build_components(state.config)
    try:
        yield
    finally:
        await state.components.aclose()
        log.info("app_shutdown")

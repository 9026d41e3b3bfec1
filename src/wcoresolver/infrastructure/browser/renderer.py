"""Playwright implementation of the browsing surface.

A render goes through four states:

1. Loading: ``page.goto`` with the forced referer in a fresh context
   whose HTTP cache is disabled.
2. PageReady: the ``load`` event fired.
3. Polling: ``_POLLER_JS`` checks the live DOM every ``poll_interval_ms``
   for the show list, the episode/detail containers, an ``<iframe>`` (once
   the settle period passed) or a ``<video>`` with an absolute ``src``.
4. Settled: first match, or ``poll_max_attempts`` reached. On timeout the
   current markup is still reported, with no video URL.
"""

from __future__ import annotations

import asyncio
from typing import Any

import structlog
from playwright.async_api import BrowserContext, Page
from playwright.async_api import Error as PlaywrightError

from wcoresolver.domain.entities.resolution import RenderedPage
from wcoresolver.domain.exceptions import BrowserError
from wcoresolver.infrastructure.constants import (
    DEFAULT_IFRAME_SETTLE_ATTEMPTS,
    DEFAULT_POLL_INTERVAL_MS,
    DEFAULT_POLL_MAX_ATTEMPTS,
    DEFAULT_USER_AGENT,
)

from .render_slot import RenderSlot
from .shared_browser import SharedBrowserPool

log = structlog.get_logger(__name__)

_POLLER_JS = """
(opts) => new Promise((resolve) => {
    let attempts = 0;
    const settle = (videoSrc, timedOut) => resolve({
        html: document.documentElement.outerHTML,
        videoSrc: videoSrc || null,
        attempts: attempts,
        timedOut: timedOut,
    });
    const timer = setInterval(() => {
        const list = document.querySelector('div.ddmcc');
        const details = document.querySelector('div#episodeList')
            || document.querySelector('div#sidebar_cat');
        const iframe = document.querySelector('iframe');
        const video = document.querySelector('video');
        const videoSrc = (video && video.src && video.src.indexOf('http') === 0)
            ? video.src : '';
        if (list || details || videoSrc
                || (iframe && attempts > opts.iframeSettleAttempts)) {
            clearInterval(timer);
            settle(videoSrc, false);
            return;
        }
        attempts++;
        if (attempts >= opts.maxAttempts) {
            clearInterval(timer);
            settle(null, true);
        }
    }, opts.intervalMs);
})
"""

# Extra time granted to the poller beyond its own attempt budget.
_POLL_GRACE_SECONDS = 5.0


class PlaywrightPageRenderer:
    """Implements ``PageRendererPort`` with a shared Chromium instance."""

    def __init__(
        self,
        browser_pool: SharedBrowserPool | None = None,
        *,
        headless: bool = True,
        user_agent: str = DEFAULT_USER_AGENT,
        navigation_timeout_ms: int = 30_000,
        poll_interval_ms: int = DEFAULT_POLL_INTERVAL_MS,
        poll_max_attempts: int = DEFAULT_POLL_MAX_ATTEMPTS,
        iframe_settle_attempts: int = DEFAULT_IFRAME_SETTLE_ATTEMPTS,
    ) -> None:
        self._pool = browser_pool or SharedBrowserPool(headless=headless)
        self._owns_pool = browser_pool is None
        self._user_agent = user_agent
        self._navigation_timeout_ms = navigation_timeout_ms
        self._poll_options = {
            "intervalMs": poll_interval_ms,
            "maxAttempts": poll_max_attempts,
            "iframeSettleAttempts": iframe_settle_attempts,
        }
        self._poll_budget_s = (
            poll_interval_ms * poll_max_attempts / 1000.0 + _POLL_GRACE_SECONDS
        )
        self._slot = RenderSlot()
        # Serializes teardown of a superseded render with the next navigation.
        self._surface_lock = asyncio.Lock()

    async def render(self, url: str, referer: str) -> RenderedPage:
        """Load *url* and return the settled markup.

        Raises:
            BrowserError: the page failed to load.
            RenderSuperseded: a newer render took over the surface.
        """
        return await self._slot.run(lambda: self._render(url, referer), label=url)

    async def _render(self, url: str, referer: str) -> RenderedPage:
        async with self._surface_lock:
            context = await self._new_context()
            try:
                page = await context.new_page()
                await self._disable_cache(context, page)
                await self._load(page, url, referer)
                return await self._poll(page, url)
            finally:
                await context.close()

    async def _new_context(self) -> BrowserContext:
        try:
            browser = await self._pool.warmup()
            return await browser.new_context(user_agent=self._user_agent)
        except PlaywrightError as exc:
            log.warning("browser_launch_failed", error=str(exc))
            raise BrowserError(f"browser unavailable: {exc}") from exc

    async def _disable_cache(self, context: BrowserContext, page: Page) -> None:
        # The origin rejects stale cached player responses.
        cdp = await context.new_cdp_session(page)
        await cdp.send("Network.setCacheDisabled", {"cacheDisabled": True})

    async def _load(self, page: Page, url: str, referer: str) -> None:
        log.debug("browser_loading", url=url, referer=referer)
        try:
            resp = await page.goto(
                url,
                referer=referer,
                wait_until="load",
                timeout=self._navigation_timeout_ms,
            )
        except PlaywrightError as exc:
            log.warning("browser_load_failed", url=url, error=str(exc))
            raise BrowserError(f"failed to load {url}: {exc}") from exc

        if resp is not None and resp.status >= 400:
            log.warning("browser_load_http_error", url=url, status=resp.status)
            raise BrowserError(f"failed to load {url}: HTTP {resp.status}")
        log.debug("browser_page_ready", url=url)

    async def _poll(self, page: Page, url: str) -> RenderedPage:
        try:
            result: dict[str, Any] = await asyncio.wait_for(
                page.evaluate(_POLLER_JS, self._poll_options),
                timeout=self._poll_budget_s,
            )
        except asyncio.TimeoutError:
            log.warning("browser_poll_hung", url=url)
            return RenderedPage(html=await page.content(), timed_out=True)
        except PlaywrightError as exc:
            log.warning("browser_poll_failed", url=url, error=str(exc))
            raise BrowserError(f"page script failed on {url}: {exc}") from exc

        rendered = RenderedPage(
            html=result.get("html") or "",
            direct_video_url=result.get("videoSrc") or None,
            timed_out=bool(result.get("timedOut")),
        )
        log.info(
            "browser_settled",
            url=url,
            attempts=result.get("attempts"),
            timed_out=rendered.timed_out,
            video_detected=rendered.direct_video_url is not None,
        )
        return rendered

    async def cleanup(self) -> None:
        """Release the browser if this renderer launched it."""
        if self._owns_pool:
            await self._pool.cleanup()

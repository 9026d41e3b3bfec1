"""Shared Chromium browser for the rendering surface.

One Chromium process backs every render. Each render opens its own
short-lived ``BrowserContext`` so no cookies or cached responses leak
from one resolution into the next.

Concurrent ``warmup()`` calls are safe: the first caller launches
Chromium, concurrent callers wait on the lock and receive the same
instance.
"""

from __future__ import annotations

import asyncio

import structlog
from playwright.async_api import Browser, Playwright, async_playwright

log = structlog.get_logger(__name__)


class SharedBrowserPool:
    """Owns the single Chromium instance.

    Usage::

        pool = SharedBrowserPool(headless=True)
        browser = await pool.warmup()
        ...
        await pool.cleanup()
    """

    def __init__(self, *, headless: bool = True) -> None:
        self._headless = headless
        self._pw: Playwright | None = None
        self._browser: Browser | None = None
        self._lock = asyncio.Lock()

    @property
    def is_running(self) -> bool:
        """Whether the shared browser is currently connected."""
        return self._browser is not None and self._browser.is_connected()

    async def warmup(self) -> Browser:
        """Ensure Chromium is running, launching (or relaunching) it if needed."""
        if self.is_running:
            return self._browser

        async with self._lock:
            if self.is_running:
                return self._browser

            # Browser crashed or was closed underneath us.
            if self._pw is not None:
                try:
                    await self._pw.stop()
                except Exception:  # noqa: BLE001
                    log.debug("shared_browser_stale_pw_stop_error", exc_info=True)
                self._pw = None
                self._browser = None

            self._pw = await async_playwright().start()
            self._browser = await self._pw.chromium.launch(headless=self._headless)
            log.info("shared_browser_launched", headless=self._headless)
            return self._browser

    async def cleanup(self) -> None:
        """Close the shared browser and the Playwright driver."""
        if self._browser is not None:
            try:
                await self._browser.close()
            except Exception:  # noqa: BLE001
                log.warning("shared_browser_close_error", exc_info=True)
            self._browser = None
        if self._pw is not None:
            try:
                await self._pw.stop()
            except Exception:  # noqa: BLE001
                log.warning("shared_pw_stop_error", exc_info=True)
            self._pw = None
        log.info("shared_browser_cleaned_up")

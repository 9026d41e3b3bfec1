"""Episode resolution use case.

Sequences the HTTP-only resolver and the browser resolver:

    auto:    http -> (page lacked iframe / loader call) -> browser
    http:    http only
    browser: browser only

The browser strategy never runs the token protocol itself. A player
iframe it discovers is fed back through this use case, which continues
the HTTP pipeline from the iframe and renders the iframe in the browser
when that also comes up empty.
"""

from __future__ import annotations

from enum import Enum
from typing import Protocol

import structlog

from wcoresolver.domain.entities.resolution import (
    EpisodeRef,
    ResolutionFailure,
    ResolutionOutcome,
    ResolutionStage,
)
from wcoresolver.domain.ports.resolver import EpisodeResolverPort

log = structlog.get_logger(__name__)


class ResolutionStrategy(str, Enum):
    AUTO = "auto"
    HTTP = "http"
    BROWSER = "browser"


# ---------------------------------------------------------------------------
# Protocols for what this use case needs from its resolvers.
# ---------------------------------------------------------------------------


class _IframeAwareResolver(EpisodeResolverPort, Protocol):
    """Resolver that can also continue from an already found iframe."""

    async def resolve_iframe(
        self, iframe_url: str, ref: EpisodeRef
    ) -> ResolutionOutcome: ...


class _BrowserResolver(Protocol):
    @property
    def name(self) -> str: ...

    async def resolve(self, ref: EpisodeRef, *, on_iframe=None) -> ResolutionOutcome: ...


class ResolveEpisodeUseCase:
    """Resolves an ``EpisodeRef`` to ordered video qualities.

    Failures are returned as ``ResolutionFailure``; only
    ``RenderSuperseded`` propagates, to tell a caller that a newer
    browser render took its place.
    """

    def __init__(
        self,
        http_resolver: _IframeAwareResolver,
        browser_resolver: _BrowserResolver | None = None,
        *,
        default_strategy: ResolutionStrategy = ResolutionStrategy.AUTO,
        max_iframe_depth: int = 2,
    ) -> None:
        self._http = http_resolver
        self._browser = browser_resolver
        self._default_strategy = default_strategy
        self._max_iframe_depth = max_iframe_depth

    @property
    def browser_available(self) -> bool:
        return self._browser is not None

    async def execute(
        self,
        ref: EpisodeRef,
        strategy: ResolutionStrategy | None = None,
    ) -> ResolutionOutcome:
        strategy = strategy or self._default_strategy
        log.info("resolve_episode", url=ref.absolute_url, strategy=strategy.value)

        if strategy is ResolutionStrategy.BROWSER:
            if self._browser is None:
                return ResolutionFailure(
                    stage=ResolutionStage.FETCH_EPISODE,
                    detail="browser strategy requested but browser is disabled",
                )
            outcome = await self._via_browser(ref, depth=0)
        else:
            outcome = await self._http.resolve(ref)
            if (
                strategy is ResolutionStrategy.AUTO
                and isinstance(outcome, ResolutionFailure)
                and outcome.is_absence
                and self._browser is not None
            ):
                outcome = await self._browser_fallback(ref, outcome)

        self._log_outcome(ref, outcome)
        return outcome

    async def _browser_fallback(
        self, ref: EpisodeRef, http_failure: ResolutionFailure
    ) -> ResolutionOutcome:
        log.info(
            "browser_fallback",
            url=ref.absolute_url,
            http_stage=http_failure.stage.value,
        )
        outcome = await self._via_browser(ref, depth=0)
        if not isinstance(outcome, ResolutionFailure):
            return outcome

        # A later stage that failed outranks the page simply lacking an iframe.
        reported = http_failure if outcome.is_absence else outcome
        return ResolutionFailure(
            stage=reported.stage,
            detail=f"{http_failure.detail}; browser fallback: {outcome.detail}",
            category=reported.category,
        )

    async def _via_browser(self, ref: EpisodeRef, depth: int) -> ResolutionOutcome:
        assert self._browser is not None

        async def on_iframe(iframe_url: str, page_ref: EpisodeRef) -> ResolutionOutcome:
            return await self._resolve_iframe(iframe_url, page_ref, depth + 1)

        return await self._browser.resolve(ref, on_iframe=on_iframe)

    async def _resolve_iframe(
        self, iframe_url: str, ref: EpisodeRef, depth: int
    ) -> ResolutionOutcome:
        outcome = await self._http.resolve_iframe(iframe_url, ref)
        if not isinstance(outcome, ResolutionFailure) or not outcome.is_absence:
            return outcome
        if depth >= self._max_iframe_depth:
            log.info("iframe_depth_exhausted", iframe_url=iframe_url, depth=depth)
            return outcome

        log.debug("render_iframe", iframe_url=iframe_url, depth=depth)
        nested = EpisodeRef(page_url=iframe_url, base_domain=ref.base_domain)
        return await self._via_browser(nested, depth)

    @staticmethod
    def _log_outcome(ref: EpisodeRef, outcome: ResolutionOutcome) -> None:
        if isinstance(outcome, ResolutionFailure):
            log.warning(
                "resolve_episode_failed",
                url=ref.absolute_url,
                stage=outcome.stage.value,
                category=outcome.category.value,
                detail=outcome.detail,
            )
        else:
            log.info(
                "resolve_episode_ok",
                url=ref.absolute_url,
                qualities=outcome.labels,
                best=outcome.best.label,
            )

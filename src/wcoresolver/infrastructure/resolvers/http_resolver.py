"""HTTP-only episode resolver.

Re-implements the network calls the site's player makes::

    episode page -> player iframe -> $.getJSON(getvidlink) -> tokens
                 -> getvid?evid=<token>&json (per quality) -> media URLs

Pages that already carry a playable ``<video>`` or a player config with a
``file:`` entry short-circuit the token protocol.
"""

from __future__ import annotations

from urllib.parse import urljoin

import structlog

from wcoresolver.domain.entities.resolution import (
    EpisodeRef,
    FailureCategory,
    ResolutionFailure,
    ResolutionOutcome,
    ResolutionStage,
    ResolutionSuccess,
    VideoQuality,
)
from wcoresolver.domain.exceptions import NetworkError, ResolutionError
from wcoresolver.domain.ports.page_fetcher import PageFetcherPort
from wcoresolver.infrastructure.extractors import (
    find_api_call_path,
    find_direct_video_src,
    find_iframe_src,
    find_script_srcs,
    find_scripted_video_url,
    normalize_url,
)

from .common import direct_success, network_failure, referer_for
from .token_client import TokenResolutionClient

log = structlog.get_logger(__name__)

_MAX_SCRIPT_FETCHES = 5


class HttpEpisodeResolver:
    """Resolves episodes with plain HTTP requests (no JavaScript execution)."""

    def __init__(
        self,
        fetcher: PageFetcherPort,
        token_client: TokenResolutionClient | None = None,
        *,
        max_script_fetches: int = _MAX_SCRIPT_FETCHES,
    ) -> None:
        self._fetcher = fetcher
        self._tokens = token_client or TokenResolutionClient(fetcher)
        self._max_script_fetches = max_script_fetches

    @property
    def name(self) -> str:
        return "http"

    async def resolve(self, ref: EpisodeRef) -> ResolutionOutcome:
        page_url = ref.absolute_url
        log.info("http_resolve_start", url=page_url)

        try:
            html = await self._fetcher.fetch(page_url)
        except NetworkError as exc:
            return network_failure(ResolutionStage.FETCH_EPISODE, exc)

        iframe_url = find_iframe_src(html, base_url=page_url)
        if iframe_url is None:
            video_url = await self._find_video(html, page_url)
            if video_url:
                log.info("http_resolve_direct_video", url=page_url)
                return direct_success(video_url, page_url)
            log.info("http_iframe_not_found", url=page_url)
            return ResolutionFailure(
                stage=ResolutionStage.FIND_IFRAME,
                detail=f"no player iframe on {page_url}",
            )

        log.debug("http_iframe_found", url=page_url, iframe_url=iframe_url)
        return await self.resolve_iframe(iframe_url, ref)

    async def resolve_iframe(self, iframe_url: str, ref: EpisodeRef) -> ResolutionOutcome:
        """Continue the pipeline from an already discovered player iframe."""
        try:
            iframe_html = await self._fetcher.fetch(iframe_url, referer=ref.site_referer)
        except NetworkError as exc:
            return network_failure(ResolutionStage.FETCH_EPISODE, exc)

        api_path = find_api_call_path(iframe_html)
        if api_path is None:
            video_url = await self._find_video(iframe_html, iframe_url)
            if video_url:
                log.info("http_resolve_direct_video", url=iframe_url)
                return direct_success(video_url, iframe_url)
            log.info("http_api_path_not_found", iframe_url=iframe_url)
            return ResolutionFailure(
                stage=ResolutionStage.FIND_API_PATH,
                detail=f"no getJSON loader call in {iframe_url}",
            )

        api_url = urljoin(iframe_url, api_path)
        try:
            tokens = await self._tokens.resolve_tokens(api_url, iframe_url)
        except ResolutionError as exc:
            if exc.cause is not None:
                return network_failure(ResolutionStage.TOKEN_EXCHANGE, exc.cause)
            return ResolutionFailure(
                stage=ResolutionStage.TOKEN_EXCHANGE, detail=str(exc)
            )

        if not tokens:
            return ResolutionFailure(
                stage=ResolutionStage.TOKEN_EXCHANGE,
                detail=f"token response from {api_url} carried no quality tokens",
            )

        resolved, failed = await self._tokens.exchange_all(tokens, iframe_url)
        if not resolved:
            all_network = all(err.is_network for err in failed.values())
            if all_network and all(
                err.cause is not None and err.cause.timed_out for err in failed.values()
            ):
                stage = ResolutionStage.TIMEOUT
            else:
                stage = ResolutionStage.REDIRECT_RESOLVE
            return ResolutionFailure(
                stage=stage,
                detail="; ".join(
                    f"{tier.label}: {err.message}" for tier, err in failed.items()
                ),
                category=(
                    FailureCategory.NETWORK if all_network else FailureCategory.NOT_FOUND
                ),
            )

        headers = {"Referer": referer_for(iframe_url)}
        qualities = tuple(
            VideoQuality(label=tier.label, url=url, headers=headers, tier=tier)
            for tier, url in resolved.items()
        )
        outcome = ResolutionSuccess(qualities=qualities)
        log.info(
            "http_resolve_ok",
            url=ref.absolute_url,
            qualities=outcome.labels,
            failed=[tier.label for tier in failed],
        )
        return outcome

    async def _find_video(self, html: str, page_url: str) -> str | None:
        """Direct ``<video>``, then inline scripts, then referenced scripts."""
        video_url = find_direct_video_src(html, base_url=page_url)
        if video_url:
            return video_url

        found = find_scripted_video_url(html, base_url=page_url)
        if found is None:
            found = await self._scan_referenced_scripts(html, page_url)
        if found is None:
            return None
        return normalize_url(found, page_url)

    async def _scan_referenced_scripts(self, html: str, page_url: str) -> str | None:
        srcs = find_script_srcs(html, base_url=page_url)[: self._max_script_fetches]
        if not srcs:
            return None

        bodies: dict[str, str] = {}
        for src in srcs:
            try:
                bodies[src] = await self._fetcher.fetch(src, referer=page_url)
            except NetworkError as exc:
                log.debug("script_fetch_failed", src=src, error=exc.message)
        if not bodies:
            return None
        return find_scripted_video_url(html, bodies, base_url=page_url)

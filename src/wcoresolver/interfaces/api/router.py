"""Resolution and playback endpoints."""

from __future__ import annotations

from typing import Optional, cast

import structlog
from fastapi import APIRouter, Query, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from wcoresolver.application.use_cases import ResolutionStrategy
from wcoresolver.domain.entities.resolution import (
    EpisodeRef,
    FailureCategory,
    ResolutionFailure,
)
from wcoresolver.domain.exceptions import RenderSuperseded
from wcoresolver.interfaces.app_state import AppState

log = structlog.get_logger(__name__)

router = APIRouter(prefix="/api", tags=["resolve"])

_FAILURE_STATUS: dict[FailureCategory, int] = {
    FailureCategory.NOT_FOUND: 404,
    FailureCategory.NETWORK: 502,
}


class PlaybackUpdate(BaseModel):
    page_url: str = Field(min_length=1)
    position_ms: int = Field(ge=0)
    duration_ms: int = Field(default=0, ge=0)
    base_domain: Optional[str] = None


def _episode_ref(state: AppState, url: str, base_domain: str | None) -> EpisodeRef:
    return EpisodeRef(page_url=url, base_domain=base_domain or state.config.base_domain)


@router.get("/resolve")
async def resolve_episode(
    request: Request,
    url: str = Query(min_length=1, description="Episode page URL (absolute or relative)."),
    base_domain: Optional[str] = Query(default=None),
    strategy: Optional[ResolutionStrategy] = Query(default=None),
) -> JSONResponse:
    """Resolve an episode page to quality-labelled video URLs."""
    state = cast(AppState, request.app.state)
    ref = _episode_ref(state, url, base_domain)

    try:
        outcome = await state.components.resolve_episode.execute(ref, strategy)
    except RenderSuperseded:
        log.info("resolve_superseded", url=ref.absolute_url)
        return JSONResponse(
            status_code=409,
            content={"status": "superseded", "detail": "a newer render took over"},
        )

    if isinstance(outcome, ResolutionFailure):
        return JSONResponse(
            status_code=_FAILURE_STATUS[outcome.category],
            content=outcome.to_dict(),
        )
    return JSONResponse(content=outcome.to_dict())


@router.get("/playback")
async def get_playback(
    request: Request,
    page_url: str = Query(min_length=1),
    base_domain: Optional[str] = Query(default=None),
) -> JSONResponse:
    state = cast(AppState, request.app.state)
    playback = state.components.playback
    if playback is None:
        return JSONResponse(status_code=503, content={"detail": "playback store disabled"})

    ref = _episode_ref(state, page_url, base_domain)
    position = await playback.load(ref)
    if position is None:
        return JSONResponse(status_code=404, content={"detail": "no saved position"})
    return JSONResponse(
        content={
            "page_url": ref.absolute_url,
            "position_ms": position.position_ms,
            "duration_ms": position.duration_ms,
        }
    )


@router.put("/playback")
async def put_playback(request: Request, body: PlaybackUpdate) -> JSONResponse:
    state = cast(AppState, request.app.state)
    playback = state.components.playback
    if playback is None:
        return JSONResponse(status_code=503, content={"detail": "playback store disabled"})

    ref = _episode_ref(state, body.page_url, body.base_domain)
    position = await playback.save(ref, body.position_ms, body.duration_ms)
    return JSONResponse(
        content={
            "page_url": ref.absolute_url,
            "position_ms": position.position_ms,
            "duration_ms": position.duration_ms,
        }
    )

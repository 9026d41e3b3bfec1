from __future__ import annotations

import time

import structlog
from fastapi import FastAPI, Request

from wcoresolver import __version__
from wcoresolver.infrastructure.config import AppConfig
from wcoresolver.interfaces.app_state import AppState
from wcoresolver.interfaces.composition import lifespan

log = structlog.get_logger(__name__)


def build_app(config: AppConfig) -> FastAPI:
    """Build the FastAPI app from configuration only.

    Resources (HTTP client, browser, playback cache) are created in lifespan().
    """
    app = FastAPI(
        title="wcoresolver",
        description="Resolves episode pages to playable video URLs",
        version=__version__,
        lifespan=lifespan,
    )

    app.state = AppState()
    app.state.config = config

    from wcoresolver.interfaces.api.router import router as api_router

    app.include_router(api_router)

    @app.get("/healthz")
    async def healthz(request: Request) -> dict[str, object]:
        components = getattr(request.app.state, "components", None)
        return {
            "status": "ok",
            "version": __version__,
            "browser": bool(components and components.resolve_episode.browser_available),
        }

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start = time.perf_counter()
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
            return response
        finally:
            log.info(
                "http_request",
                method=request.method,
                path=request.url.path,
                status_code=status_code,
                duration_ms=round((time.perf_counter() - start) * 1000.0, 2),
                client_host=(request.client.host if request.client else None),
            )

    return app

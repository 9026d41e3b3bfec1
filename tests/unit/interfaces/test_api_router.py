"""Tests for the resolve and playback endpoints."""

from __future__ import annotations

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from wcoresolver.application.use_cases import ResolutionStrategy
from wcoresolver.domain.entities.resolution import (
    EpisodeRef,
    FailureCategory,
    PlaybackPosition,
    QualityTier,
    ResolutionFailure,
    ResolutionStage,
    ResolutionSuccess,
    VideoQuality,
)
from wcoresolver.domain.exceptions import RenderSuperseded
from wcoresolver.interfaces.api.router import router

_BASE = "https://www.wcoflix.tv"


def _make_app(
    resolve_uc: AsyncMock | None = None,
    playback: AsyncMock | None = None,
) -> FastAPI:
    """Minimal app with the API router and hand-wired state."""
    app = FastAPI()
    app.include_router(router)
    app.state.config = SimpleNamespace(base_domain=_BASE)
    app.state.components = SimpleNamespace(
        resolve_episode=resolve_uc or AsyncMock(),
        playback=playback,
    )
    return app


def _success() -> ResolutionSuccess:
    headers = {"Referer": "https://embed.example/"}
    return ResolutionSuccess(
        qualities=(
            VideoQuality("SD", "https://cdn.example/sd.mp4", headers, QualityTier.SD),
            VideoQuality(
                "1080p", "https://cdn.example/fhd.mp4", headers, QualityTier.FHD_1080P
            ),
        )
    )


class TestResolveEndpoint:
    def test_success_returns_ordered_qualities(self) -> None:
        uc = AsyncMock()
        uc.execute.return_value = _success()
        client = TestClient(_make_app(uc))

        resp = client.get("/api/resolve", params={"url": "/some-show-episode-1"})

        assert resp.status_code == 200
        body = resp.json()
        assert body["status"] == "ok"
        assert [q["label"] for q in body["qualities"]] == ["1080p", "SD"]
        assert body["qualities"][0]["headers"] == {"Referer": "https://embed.example/"}

    def test_relative_url_uses_configured_base_domain(self) -> None:
        uc = AsyncMock()
        uc.execute.return_value = _success()
        client = TestClient(_make_app(uc))

        client.get("/api/resolve", params={"url": "/some-show-episode-1"})

        ref, strategy = uc.execute.call_args[0]
        assert ref == EpisodeRef(page_url="/some-show-episode-1", base_domain=_BASE)
        assert strategy is None

    def test_base_domain_and_strategy_passed_through(self) -> None:
        uc = AsyncMock()
        uc.execute.return_value = _success()
        client = TestClient(_make_app(uc))

        client.get(
            "/api/resolve",
            params={
                "url": "/ep",
                "base_domain": "https://mirror.example",
                "strategy": "http",
            },
        )

        ref, strategy = uc.execute.call_args[0]
        assert ref.absolute_url == "https://mirror.example/ep"
        assert strategy is ResolutionStrategy.HTTP

    def test_unknown_strategy_rejected(self) -> None:
        uc = AsyncMock()
        client = TestClient(_make_app(uc))

        resp = client.get("/api/resolve", params={"url": "/ep", "strategy": "magic"})

        assert resp.status_code == 422
        uc.execute.assert_not_awaited()

    def test_missing_url_rejected(self) -> None:
        client = TestClient(_make_app())
        assert client.get("/api/resolve").status_code == 422

    @pytest.mark.parametrize(
        ("category", "status"),
        [(FailureCategory.NOT_FOUND, 404), (FailureCategory.NETWORK, 502)],
    )
    def test_failure_status_by_category(
        self, category: FailureCategory, status: int
    ) -> None:
        uc = AsyncMock()
        uc.execute.return_value = ResolutionFailure(
            stage=ResolutionStage.FIND_IFRAME, detail="nothing", category=category
        )
        client = TestClient(_make_app(uc))

        resp = client.get("/api/resolve", params={"url": "/ep"})

        assert resp.status_code == status
        body = resp.json()
        assert body["status"] == "failed"
        assert body["stage"] == "FindIframe"
        assert body["category"] == category.value
        assert body["message"]

    def test_superseded_render_returns_conflict(self) -> None:
        uc = AsyncMock()
        uc.execute.side_effect = RenderSuperseded("newer render")
        client = TestClient(_make_app(uc))

        resp = client.get("/api/resolve", params={"url": "/ep"})

        assert resp.status_code == 409
        assert resp.json()["status"] == "superseded"


class TestPlaybackEndpoints:
    def test_disabled_store(self) -> None:
        client = TestClient(_make_app(playback=None))

        assert client.get("/api/playback", params={"page_url": "/ep"}).status_code == 503
        resp = client.put("/api/playback", json={"page_url": "/ep", "position_ms": 1})
        assert resp.status_code == 503

    def test_get_missing_position(self) -> None:
        playback = AsyncMock()
        playback.load.return_value = None
        client = TestClient(_make_app(playback=playback))

        resp = client.get("/api/playback", params={"page_url": "/ep"})

        assert resp.status_code == 404

    def test_get_saved_position(self) -> None:
        playback = AsyncMock()
        playback.load.return_value = PlaybackPosition(position_ms=4200, duration_ms=60000)
        client = TestClient(_make_app(playback=playback))

        resp = client.get("/api/playback", params={"page_url": "/ep"})

        assert resp.status_code == 200
        assert resp.json() == {
            "page_url": f"{_BASE}/ep",
            "position_ms": 4200,
            "duration_ms": 60000,
        }

    def test_put_saves_position(self) -> None:
        playback = AsyncMock()
        playback.save.return_value = PlaybackPosition(position_ms=1500, duration_ms=0)
        client = TestClient(_make_app(playback=playback))

        resp = client.put(
            "/api/playback",
            json={"page_url": "/ep", "position_ms": 1500},
        )

        assert resp.status_code == 200
        ref, position_ms, duration_ms = playback.save.call_args[0]
        assert ref.absolute_url == f"{_BASE}/ep"
        assert (position_ms, duration_ms) == (1500, 0)

    def test_put_negative_position_rejected(self) -> None:
        playback = MagicMock()
        playback.save = AsyncMock()
        client = TestClient(_make_app(playback=playback))

        resp = client.put("/api/playback", json={"page_url": "/ep", "position_ms": -1})

        assert resp.status_code == 422
        playback.save.assert_not_awaited()

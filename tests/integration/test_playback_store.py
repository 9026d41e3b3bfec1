"""Playback positions persisted through a real DiskcacheAdapter."""

from __future__ import annotations

from pathlib import Path

import pytest

from wcoresolver.application.use_cases import PlaybackProgressUseCase
from wcoresolver.domain.entities.resolution import EpisodeRef, PlaybackPosition
from wcoresolver.infrastructure.cache import DiskcacheAdapter
from wcoresolver.infrastructure.persistence import CachePlaybackRepository

pytestmark = pytest.mark.integration


class TestDiskcacheAdapter:
    @pytest.mark.asyncio
    async def test_set_get_delete(self, diskcache: DiskcacheAdapter) -> None:
        await diskcache.set("k", "v")
        assert await diskcache.get("k") == "v"
        assert await diskcache.delete("k") is True
        assert await diskcache.get("k") is None
        assert await diskcache.delete("k") is False

    @pytest.mark.asyncio
    async def test_requires_open(self, tmp_path: Path) -> None:
        adapter = DiskcacheAdapter(directory=tmp_path / "closed")
        with pytest.raises(RuntimeError):
            await adapter.get("k")
        assert await adapter.delete("k") is False


class TestPlaybackPersistence:
    @pytest.mark.asyncio
    async def test_survives_reopen(self, tmp_path: Path) -> None:
        ref = EpisodeRef("/some-show-episode-1", "https://www.wcoflix.tv")
        directory = tmp_path / "playback"

        async with DiskcacheAdapter(directory=directory) as cache:
            uc = PlaybackProgressUseCase(CachePlaybackRepository(cache))
            await uc.save(ref, 120_000, 1_380_000)

        async with DiskcacheAdapter(directory=directory) as cache:
            uc = PlaybackProgressUseCase(CachePlaybackRepository(cache))
            position = await uc.load(ref)

        assert position == PlaybackPosition(position_ms=120_000, duration_ms=1_380_000)

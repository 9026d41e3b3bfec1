"""Remember where the player stopped, keyed by the episode page URL."""

from __future__ import annotations

import structlog

from wcoresolver.domain.entities.resolution import EpisodeRef, PlaybackPosition
from wcoresolver.domain.ports.playback_store import PlaybackStorePort

log = structlog.get_logger(__name__)


class PlaybackProgressUseCase:
    """Normalizes page URLs before reading or writing the playback store.

    Relative and absolute references to the same episode share one entry.
    """

    def __init__(self, store: PlaybackStorePort) -> None:
        self._store = store

    async def load(self, ref: EpisodeRef) -> PlaybackPosition | None:
        return await self._store.get(ref.absolute_url)

    async def save(
        self, ref: EpisodeRef, position_ms: int, duration_ms: int = 0
    ) -> PlaybackPosition:
        if position_ms < 0 or duration_ms < 0:
            raise ValueError("playback position and duration must be >= 0")
        if duration_ms and position_ms > duration_ms:
            position_ms = duration_ms
        position = PlaybackPosition(position_ms=position_ms, duration_ms=duration_ms)
        await self._store.save(ref.absolute_url, position)
        log.info(
            "playback_progress_saved",
            page_url=ref.absolute_url,
            position_ms=position_ms,
        )
        return position

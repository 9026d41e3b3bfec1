"""Port for the player's last-known playback position."""

from __future__ import annotations

from typing import Protocol

from wcoresolver.domain.entities.resolution import PlaybackPosition


class PlaybackStorePort(Protocol):
    """Stores playback positions keyed by the stable episode page URL.

    Resolved video URLs rotate and are never used as keys.
    """

    async def get(self, page_url: str) -> PlaybackPosition | None: ...

    async def save(self, page_url: str, position: PlaybackPosition) -> None: ...

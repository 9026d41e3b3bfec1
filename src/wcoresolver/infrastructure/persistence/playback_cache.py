"""Playback position repository backed by CachePort (diskcache)."""

from __future__ import annotations

import json

import structlog

from wcoresolver.domain.entities.resolution import PlaybackPosition
from wcoresolver.domain.ports.cache import CachePort

log = structlog.get_logger(__name__)

_KEY_PREFIX = "playback:"


def playback_key(page_url: str) -> str:
    return f"{_KEY_PREFIX}{page_url}"


def _serialize_position(position: PlaybackPosition) -> str:
    return json.dumps(
        {"position_ms": position.position_ms, "duration_ms": position.duration_ms}
    )


def _deserialize_position(data: str) -> PlaybackPosition:
    d = json.loads(data)
    return PlaybackPosition(
        position_ms=int(d["position_ms"]),
        duration_ms=int(d.get("duration_ms", 0)),
    )


class CachePlaybackRepository:
    """Stores playback positions keyed by the episode page URL.

    Resolved media URLs are signed and rotate between resolutions, so they
    never serve as keys here.
    """

    def __init__(self, cache: CachePort, ttl_seconds: int | None = None) -> None:
        self.cache = cache
        self.ttl = ttl_seconds

    async def save(self, page_url: str, position: PlaybackPosition) -> None:
        await self.cache.set(
            playback_key(page_url), _serialize_position(position), ttl=self.ttl
        )
        log.debug(
            "playback_position_saved",
            page_url=page_url,
            position_ms=position.position_ms,
            duration_ms=position.duration_ms,
        )

    async def get(self, page_url: str) -> PlaybackPosition | None:
        data = await self.cache.get(playback_key(page_url))
        if data is None:
            return None

        try:
            return _deserialize_position(data)
        except (json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
            log.error(
                "playback_position_deserialize_error",
                page_url=page_url,
                error=str(e),
            )
            return None

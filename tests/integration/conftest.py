"""Shared fixtures for integration tests (real diskcache in tmp_path)."""

from __future__ import annotations

from pathlib import Path

import pytest

from wcoresolver.infrastructure.cache import DiskcacheAdapter


@pytest.fixture()
async def diskcache(tmp_path: Path):
    adapter = DiskcacheAdapter(directory=tmp_path / "cache", ttl_seconds=3600)
    async with adapter:
        yield adapter

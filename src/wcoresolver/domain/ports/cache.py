"""Key-value store the playback repository persists into."""

from __future__ import annotations

from typing import Any, Protocol


class CachePort(Protocol):
    """Async key-value store with per-entry expiry.

    ``DiskcacheAdapter`` is the only implementation; it is opened by the
    composition root and used as an async context manager in tests.
    """

    async def get(self, key: str) -> Any:
        """Stored value, or None when missing or expired."""
        ...

    async def set(self, key: str, value: Any, *, ttl: int | None = None) -> None: ...

    async def delete(self, key: str) -> bool:
        """True if an entry was removed."""
        ...

    async def aclose(self) -> None: ...

    async def __aenter__(self) -> CachePort: ...

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None: ...

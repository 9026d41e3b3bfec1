"""Single-slot request queue for the shared browsing surface.

The surface has one DOM and one navigation state, so at most one render
owns it. Submitting a new render cancels the one in flight: the most
recent request reflects what the user wants now. The superseded caller
gets ``RenderSuperseded`` instead of a stale result.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

import structlog

from wcoresolver.domain.exceptions import RenderSuperseded

log = structlog.get_logger(__name__)

T = TypeVar("T")


class RenderSlot:
    """Runs one job at a time; a newer job supersedes the current one."""

    def __init__(self) -> None:
        self._current: asyncio.Task[Any] | None = None
        self._current_label = ""

    @property
    def busy(self) -> bool:
        return self._current is not None and not self._current.done()

    async def run(self, job: Callable[[], Awaitable[T]], *, label: str = "") -> T:
        """Run *job* in the slot and return its result.

        Raises:
            RenderSuperseded: a newer ``run()`` took the slot first.
        """
        if self.busy:
            log.info(
                "render_superseded",
                previous=self._current_label,
                current=label,
            )
            self._current.cancel()

        task: asyncio.Task[T] = asyncio.ensure_future(job())
        self._current = task
        self._current_label = label
        try:
            await asyncio.wait({task})
        except asyncio.CancelledError:
            # The caller walked away; stop the job as well.
            task.cancel()
            raise
        finally:
            if self._current is task:
                self._current = None
                self._current_label = ""

        if task.cancelled():
            raise RenderSuperseded(f"render of {label or 'page'} was superseded")
        return task.result()

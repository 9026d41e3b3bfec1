"""Port for resolving an episode reference to playable video qualities."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from wcoresolver.domain.entities.resolution import EpisodeRef, ResolutionOutcome


@runtime_checkable
class EpisodeResolverPort(Protocol):
    """Resolves an episode page to an ordered list of video qualities.

    Implementations differ in *how* they reach the video (re-implementing
    the site's network calls vs. executing its JavaScript in a browser)
    but share one outcome contract: failures are returned, never raised.
    """

    @property
    def name(self) -> str:
        """Strategy name (e.g. 'http', 'browser')."""
        ...

    async def resolve(self, ref: EpisodeRef) -> ResolutionOutcome:
        """Resolve *ref* into a ``ResolutionSuccess`` or ``ResolutionFailure``."""
        ...

"""Helpers shared by the HTTP and browser resolvers."""

from __future__ import annotations

import re
from urllib.parse import urlparse

from wcoresolver.domain.entities.resolution import (
    FailureCategory,
    QualityTier,
    ResolutionFailure,
    ResolutionStage,
    ResolutionSuccess,
    VideoQuality,
)
from wcoresolver.domain.exceptions import NetworkError

_TIER_HINT_RE = re.compile(r"(?<!\d)(1080|720)p?(?!\d)")

# Statuses meaning the page itself is gone.
_GONE_STATUSES = frozenset({404, 410})


def referer_for(page_url: str) -> str:
    """``https://<host>/`` of the page that hosts the player."""
    host = urlparse(page_url).netloc
    return f"https://{host}/"


def tier_from_url(url: str) -> QualityTier:
    """Best-effort tier for a directly observed source (defaults to SD)."""
    m = _TIER_HINT_RE.search(url)
    if m is None:
        return QualityTier.SD
    return QualityTier.FHD_1080P if m.group(1) == "1080" else QualityTier.HD_720P


def direct_success(video_url: str, player_page_url: str) -> ResolutionSuccess:
    """Wrap a single directly found video URL as a successful outcome."""
    tier = tier_from_url(video_url)
    return ResolutionSuccess(
        qualities=(
            VideoQuality(
                label=tier.label,
                url=video_url,
                headers={"Referer": referer_for(player_page_url)},
                tier=tier,
            ),
        )
    )


def network_failure(stage: ResolutionStage, exc: NetworkError) -> ResolutionFailure:
    """Map a transport error to a failure; timeouts get their own stage."""
    if exc.timed_out:
        return ResolutionFailure(
            stage=ResolutionStage.TIMEOUT,
            detail=f"{stage.value}: {exc}",
            category=FailureCategory.NETWORK,
        )
    category = (
        FailureCategory.NOT_FOUND
        if exc.status in _GONE_STATUSES
        else FailureCategory.NETWORK
    )
    return ResolutionFailure(stage=stage, detail=str(exc), category=category)

"""Domain entities for episode video resolution.

Pure value objects without framework dependencies or I/O.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from types import MappingProxyType
from typing import Mapping, Union
from urllib.parse import urljoin, urlparse


class QualityTier(IntEnum):
    """Quality tiers offered by the origin (higher value = preferred)."""

    SD = 10
    HD_720P = 20
    FHD_1080P = 30

    @property
    def label(self) -> str:
        return _TIER_LABELS[self]


_TIER_LABELS: dict[QualityTier, str] = {
    QualityTier.SD: "SD",
    QualityTier.HD_720P: "720p",
    QualityTier.FHD_1080P: "1080p",
}


class ResolutionStage(str, Enum):
    """Pipeline stage at which a resolution attempt stopped."""

    FETCH_EPISODE = "FetchEpisode"
    FIND_IFRAME = "FindIframe"
    FIND_API_PATH = "FindApiPath"
    TOKEN_EXCHANGE = "TokenExchange"
    REDIRECT_RESOLVE = "RedirectResolve"
    TIMEOUT = "Timeout"


class FailureCategory(str, Enum):
    """What the user can do about a failure: retry later vs. change mirror."""

    NOT_FOUND = "not_found"
    NETWORK = "network"


_USER_MESSAGES: dict[FailureCategory, str] = {
    FailureCategory.NOT_FOUND: "Could not find video source for this episode.",
    FailureCategory.NETWORK: (
        "Network error while contacting the site. "
        "Check your connection or switch to another mirror."
    ),
}


@dataclass(frozen=True)
class EpisodeRef:
    """Identifies the episode page to resolve."""

    page_url: str
    base_domain: str

    @property
    def absolute_url(self) -> str:
        """``page_url`` made absolute against ``base_domain``."""
        if urlparse(self.page_url).scheme in ("http", "https"):
            return self.page_url
        if self.page_url.startswith("//"):
            return f"https:{self.page_url}"
        return urljoin(self.base_url + "/", self.page_url.lstrip("/"))

    @property
    def base_url(self) -> str:
        """``base_domain`` with scheme and without trailing slash."""
        base = self.base_domain.strip().rstrip("/")
        if not urlparse(base).scheme:
            base = f"https://{base.lstrip('/')}"
        return base

    @property
    def site_referer(self) -> str:
        return f"{self.base_url}/"


@dataclass(frozen=True)
class VideoQuality:
    """A final playable URL and the headers the origin requires for it."""

    label: str
    url: str
    headers: Mapping[str, str] = field(default_factory=dict)
    tier: QualityTier = QualityTier.SD

    def __post_init__(self) -> None:
        # Freeze the header mapping so the value object stays immutable.
        object.__setattr__(self, "headers", MappingProxyType(dict(self.headers)))

    def to_dict(self) -> dict[str, object]:
        return {"label": self.label, "url": self.url, "headers": dict(self.headers)}


@dataclass(frozen=True)
class RawToken:
    """Opaque playback token for one quality tier (never persisted)."""

    server: str
    quality: QualityTier
    token: str


@dataclass(frozen=True)
class RenderedPage:
    """Result of rendering a page in the browser engine."""

    html: str
    direct_video_url: str | None = None
    timed_out: bool = False


@dataclass(frozen=True)
class ResolutionSuccess:
    """Non-empty list of qualities ordered by descending preference."""

    qualities: tuple[VideoQuality, ...]

    def __post_init__(self) -> None:
        if not self.qualities:
            raise ValueError("ResolutionSuccess requires at least one quality")
        ordered = tuple(sorted(self.qualities, key=lambda q: q.tier, reverse=True))
        object.__setattr__(self, "qualities", ordered)

    @property
    def ok(self) -> bool:
        return True

    @property
    def best(self) -> VideoQuality:
        return self.qualities[0]

    @property
    def labels(self) -> list[str]:
        return [q.label for q in self.qualities]

    def to_dict(self) -> dict[str, object]:
        return {"status": "ok", "qualities": [q.to_dict() for q in self.qualities]}


@dataclass(frozen=True)
class ResolutionFailure:
    """Terminal failure of one resolution attempt."""

    stage: ResolutionStage
    detail: str
    category: FailureCategory = FailureCategory.NOT_FOUND

    @property
    def ok(self) -> bool:
        return False

    @property
    def user_message(self) -> str:
        return _USER_MESSAGES[self.category]

    @property
    def is_absence(self) -> bool:
        """Whether the page simply did not contain what the stage looked for."""
        return self.category is FailureCategory.NOT_FOUND and self.stage in (
            ResolutionStage.FIND_IFRAME,
            ResolutionStage.FIND_API_PATH,
        )

    def to_dict(self) -> dict[str, object]:
        return {
            "status": "failed",
            "stage": self.stage.value,
            "category": self.category.value,
            "detail": self.detail,
            "message": self.user_message,
        }


ResolutionOutcome = Union[ResolutionSuccess, ResolutionFailure]


@dataclass(frozen=True)
class PlaybackPosition:
    """Last known playback position of an episode (milliseconds)."""

    position_ms: int
    duration_ms: int = 0

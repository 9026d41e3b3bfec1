from .resolution import (
    EpisodeRef,
    FailureCategory,
    PlaybackPosition,
    QualityTier,
    RawToken,
    RenderedPage,
    ResolutionFailure,
    ResolutionOutcome,
    ResolutionStage,
    ResolutionSuccess,
    VideoQuality,
)

__all__ = [
    "EpisodeRef",
    "FailureCategory",
    "PlaybackPosition",
    "QualityTier",
    "RawToken",
    "RenderedPage",
    "ResolutionFailure",
    "ResolutionOutcome",
    "ResolutionStage",
    "ResolutionSuccess",
    "VideoQuality",
]

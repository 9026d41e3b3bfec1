from .playback_progress import PlaybackProgressUseCase
from .resolve_episode import ResolutionStrategy, ResolveEpisodeUseCase

__all__ = ["PlaybackProgressUseCase", "ResolutionStrategy", "ResolveEpisodeUseCase"]

from .cache import CachePort
from .page_fetcher import PageFetcherPort
from .page_renderer import PageRendererPort
from .playback_store import PlaybackStorePort
from .resolver import EpisodeResolverPort

__all__ = [
    "CachePort",
    "EpisodeResolverPort",
    "PageFetcherPort",
    "PageRendererPort",
    "PlaybackStorePort",
]

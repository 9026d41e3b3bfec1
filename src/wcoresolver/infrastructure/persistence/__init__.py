from .playback_cache import CachePlaybackRepository

__all__ = ["CachePlaybackRepository"]

from .diskcache_adapter import DiskcacheAdapter

__all__ = ["DiskcacheAdapter"]

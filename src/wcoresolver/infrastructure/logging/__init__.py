from .setup import configure_logging

__all__ = ["configure_logging"]

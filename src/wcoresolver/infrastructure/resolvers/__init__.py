from .browser_resolver import BrowserEpisodeResolver
from .http_resolver import HttpEpisodeResolver
from .token_client import TokenResolutionClient

__all__ = [
    "BrowserEpisodeResolver",
    "HttpEpisodeResolver",
    "TokenResolutionClient",
]

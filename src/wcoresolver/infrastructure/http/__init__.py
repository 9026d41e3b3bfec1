from .page_fetcher import HttpxPageFetcher, create_http_client

__all__ = ["HttpxPageFetcher", "create_http_client"]

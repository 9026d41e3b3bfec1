"""Resolution pipeline exceptions."""

from __future__ import annotations

from enum import Enum


class ResolverError(Exception):
    """Base class for all resolution-related errors."""


class NetworkError(ResolverError):
    """Raised when an HTTP call fails (unreachable, non-2xx, timeout, redirects)."""

    def __init__(
        self,
        url: str,
        message: str,
        *,
        status: int | None = None,
        timed_out: bool = False,
    ) -> None:
        super().__init__(f"{message} ({url})")
        self.url = url
        self.status = status
        self.message = message
        self.timed_out = timed_out


class ResolutionErrorKind(str, Enum):
    API_UNREACHABLE = "ApiUnreachable"
    MALFORMED_PAYLOAD = "MalformedPayload"
    REDIRECT_UNRESOLVABLE = "RedirectUnresolvable"


class ResolutionError(ResolverError):
    """Raised by the token client when the token protocol cannot be completed."""

    def __init__(
        self,
        kind: ResolutionErrorKind,
        message: str,
        *,
        cause: NetworkError | None = None,
    ) -> None:
        super().__init__(f"{kind.value}: {message}")
        self.kind = kind
        self.message = message
        self.cause = cause

    @property
    def is_network(self) -> bool:
        return self.cause is not None


class BrowserError(ResolverError):
    """Raised when the browser engine fails to load a page."""


class RenderSuperseded(BrowserError):
    """Raised to a caller whose render was replaced by a newer request."""

"""Client for the origin's two-step token protocol.

Step 1 (``getvidlink``) returns a JSON object with a ``server`` base URL
and up to three opaque tokens keyed by quality::

    {"server": "https://t01.example.com", "enc": "...", "hd": "...", "fhd": "..."}

Some mirrors send that object JSON-encoded a second time (a JSON string
whose content is the object); both shapes are accepted.

Step 2 (``getvid``) exchanges one token for the signed media URL. Its body
is either a JSON string literal (``"https:\\/\\/t01..."``) or the bare
URL. Which one depends on the origin; both are unwrapped here.
"""

from __future__ import annotations

import asyncio
import json
from typing import Any

import structlog

from wcoresolver.domain.entities.resolution import QualityTier, RawToken
from wcoresolver.domain.exceptions import (
    NetworkError,
    ResolutionError,
    ResolutionErrorKind,
)
from wcoresolver.domain.ports.page_fetcher import PageFetcherPort
from wcoresolver.infrastructure.constants import XHR_HEADERS

log = structlog.get_logger(__name__)

# Payload field -> tier, in descending preference.
_TOKEN_FIELDS: tuple[tuple[str, QualityTier], ...] = (
    ("fhd", QualityTier.FHD_1080P),
    ("hd", QualityTier.HD_720P),
    ("enc", QualityTier.SD),
)


def parse_token_payload(body: str) -> list[RawToken]:
    """Parse the ``getvidlink`` body into one ``RawToken`` per present tier.

    Absent or empty token fields are skipped. A payload without a
    ``server`` string is malformed.
    """
    try:
        data: Any = json.loads(body)
        if isinstance(data, str):
            data = json.loads(data)
    except (json.JSONDecodeError, ValueError) as exc:
        raise ResolutionError(
            ResolutionErrorKind.MALFORMED_PAYLOAD, f"token response is not JSON: {exc}"
        ) from exc

    if not isinstance(data, dict):
        raise ResolutionError(
            ResolutionErrorKind.MALFORMED_PAYLOAD,
            f"token response is {type(data).__name__}, expected object",
        )

    server = data.get("server")
    if not isinstance(server, str) or not server.strip():
        raise ResolutionError(
            ResolutionErrorKind.MALFORMED_PAYLOAD, "token response has no server"
        )

    tokens: list[RawToken] = []
    for field_name, tier in _TOKEN_FIELDS:
        value = data.get(field_name)
        if isinstance(value, str) and value.strip():
            tokens.append(RawToken(server=server.strip(), quality=tier, token=value))
    return tokens


def unwrap_redirect_body(body: str) -> str:
    """Return the media URL carried by a ``getvid`` response body.

    A body starting with a double quote is a JSON string literal and is
    decoded; any other body is the URL itself.
    """
    text = body.strip()
    if text.startswith('"'):
        try:
            value = json.loads(text)
        except (json.JSONDecodeError, ValueError) as exc:
            raise ResolutionError(
                ResolutionErrorKind.REDIRECT_UNRESOLVABLE,
                f"quoted redirect body is not a JSON string: {exc}",
            ) from exc
        if not isinstance(value, str):
            raise ResolutionError(
                ResolutionErrorKind.REDIRECT_UNRESOLVABLE,
                "quoted redirect body did not decode to a string",
            )
        text = value.strip()
    if not text:
        raise ResolutionError(
            ResolutionErrorKind.REDIRECT_UNRESOLVABLE, "empty redirect body"
        )
    return text


def build_exchange_url(server: str, token: str) -> str:
    return f"{server.rstrip('/')}/getvid?evid={token}&json"


class TokenResolutionClient:
    """Talks to the token endpoints through a ``PageFetcherPort``."""

    def __init__(self, fetcher: PageFetcherPort) -> None:
        self._fetcher = fetcher

    async def resolve_tokens(self, api_url: str, referer_url: str) -> list[RawToken]:
        """Fetch and parse the token payload.

        Raises:
            ResolutionError: ``ApiUnreachable`` on transport failure,
                ``MalformedPayload`` when the body has no usable shape.
        """
        try:
            body = await self._fetcher.fetch(
                api_url, referer=referer_url, extra_headers=XHR_HEADERS
            )
        except NetworkError as exc:
            raise ResolutionError(
                ResolutionErrorKind.API_UNREACHABLE, exc.message, cause=exc
            ) from exc

        tokens = parse_token_payload(body)
        log.debug(
            "token_payload_parsed",
            api_url=api_url,
            tiers=[t.quality.label for t in tokens],
        )
        return tokens

    async def exchange_token(self, server: str, token: str, referer: str) -> str:
        """Exchange one token for its final media URL.

        Raises:
            ResolutionError: ``RedirectUnresolvable`` on transport failure or
                an unusable body.
        """
        url = build_exchange_url(server, token)
        try:
            body = await self._fetcher.fetch(
                url, referer=referer, extra_headers=XHR_HEADERS
            )
        except NetworkError as exc:
            raise ResolutionError(
                ResolutionErrorKind.REDIRECT_UNRESOLVABLE, exc.message, cause=exc
            ) from exc
        return unwrap_redirect_body(body)

    async def exchange_all(
        self, tokens: list[RawToken], referer: str
    ) -> tuple[dict[QualityTier, str], dict[QualityTier, ResolutionError]]:
        """Exchange every token concurrently.

        Returns ``(resolved, failed)`` keyed by tier; one tier failing never
        affects the others.
        """

        async def _one(raw: RawToken) -> str | ResolutionError:
            try:
                return await self.exchange_token(raw.server, raw.token, referer)
            except ResolutionError as exc:
                log.warning(
                    "token_exchange_failed",
                    quality=raw.quality.label,
                    error=exc.message,
                )
                return exc

        results = await asyncio.gather(*(_one(raw) for raw in tokens))

        resolved: dict[QualityTier, str] = {}
        failed: dict[QualityTier, ResolutionError] = {}
        for raw, result in zip(tokens, results):
            if isinstance(result, ResolutionError):
                failed[raw.quality] = result
            else:
                resolved[raw.quality] = result
        return resolved, failed

"""HTTP client for the remote now playing endpoint."""
from __future__ import annotations

import asyncio
import json
import logging
from typing import Optional

import aiohttp

from config import settings
from models import FetchError, FetchResult, ParseError, TrackPayload, ValidationError

logger = logging.getLogger(__name__)


class NowPlayingClient:
    """Fetches and decodes the track currently playing."""

    def __init__(self, session: Optional[aiohttp.ClientSession] = None) -> None:
        self.session = session
        self._owns_session = session is None
        self.request_count = 0

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create aiohttp session."""
        if self.session is None:
            # a zero timeout leaves the request unbounded
            timeout = aiohttp.ClientTimeout(total=settings.REQUEST_TIMEOUT or None)
            self.session = aiohttp.ClientSession(timeout=timeout)
        return self.session

    async def close(self) -> None:
        """Close the session if we own it."""
        if self._owns_session and self.session is not None:
            await self.session.close()
            self.session = None

    async def fetch(self, url: str) -> FetchResult:
        """Issue a single GET to ``url`` and decode the track payload."""
        self.request_count += 1
        session = await self._get_session()

        try:
            async with session.get(url) as response:
                response.raise_for_status()
                body = await response.read()
        except asyncio.TimeoutError:
            logger.warning("Timeout fetching now playing from %s", url)
            return FetchResult.failure(FetchError(f"Timeout fetching {url}"))
        except aiohttp.ClientResponseError as exc:
            logger.warning("HTTP error fetching now playing from %s (status %s)", url, exc.status)
            return FetchResult.failure(
                FetchError(f"HTTP {exc.status} from {url}", status=exc.status)
            )
        except aiohttp.ClientError as exc:
            logger.warning("Error fetching now playing from %s: %s", url, exc)
            logger.debug("Request error details", exc_info=True)
            return FetchResult.failure(FetchError(f"Error fetching {url}: {exc}"))

        return self.decode(body)

    @staticmethod
    def decode(body: bytes | str) -> FetchResult:
        """Parse a response body into a result."""
        if isinstance(body, bytes):
            try:
                body = body.decode("utf-8")
            except UnicodeDecodeError as exc:
                return FetchResult.failure(ParseError(f"Body is not valid UTF-8: {exc}"))

        if not body.strip():
            return FetchResult.failure(ParseError("Empty response body"))

        try:
            data = json.loads(body)
        except ValueError as exc:
            return FetchResult.failure(ParseError(f"Invalid JSON: {exc}"))
        except RecursionError:
            return FetchResult.failure(ParseError("JSON nested too deeply"))

        try:
            payload = TrackPayload.from_payload(data)
        except ValidationError as exc:
            return FetchResult.failure(exc)

        logger.debug("Decoded now playing payload: %s", payload.combined_truncated)
        return FetchResult.success(payload)


__all__ = ["NowPlayingClient"]

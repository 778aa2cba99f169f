"""
Outbound HTTP for provider clients.

Async aiohttp client that POSTs a JSON body and returns the decoded JSON
response. Every failure (non-2xx status, connection error, timeout, undecodable
body) is raised as TransportError so provider clients only handle one type.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, Optional, Protocol

import aiohttp

from ..config import DEFAULT_TIMEOUT_SECONDS
from ..errors import TransportError

logger = logging.getLogger(__name__)


class Transport(Protocol):
    async def post_json(self, url: str, payload: Dict[str, Any], headers: Dict[str, str]) -> Any:
        ...

    async def close(self) -> None:
        ...


class HttpTransport:
    """
    aiohttp-backed transport.

    One ClientSession per transport, created on first use and released by
    ``close()``. Every request carries a total timeout.
    """

    def __init__(self, timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS):
        self.timeout_seconds = timeout_seconds
        self._session: Optional[aiohttp.ClientSession] = None

    async def post_json(self, url: str, payload: Dict[str, Any], headers: Dict[str, str]) -> Any:
        session = await self._get_session()
        logger.debug("POST %s", url)
        try:
            async with session.post(
                url,
                json=payload,
                headers=headers,
                timeout=aiohttp.ClientTimeout(total=self.timeout_seconds),
            ) as response:
                if response.status < 200 or response.status >= 300:
                    raise TransportError(f"HTTP {response.status}", status_code=response.status)
                try:
                    return await response.json(content_type=None)
                except ValueError as exc:
                    raise TransportError(f"Invalid JSON in response: {exc}") from exc
        except asyncio.TimeoutError as exc:
            raise TransportError(f"Request timed out after {self.timeout_seconds:g}s") from exc
        except aiohttp.ClientError as exc:
            raise TransportError(f"Request failed: {exc}") from exc

    async def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession()
        return self._session

    async def close(self) -> None:
        if self._session and not self._session.closed:
            await self._session.close()
        self._session = None

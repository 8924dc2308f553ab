"""
Gateway HTTP client.

Stateless JSON-over-HTTP wrapper around a node gateway. Every gateway answer
is an envelope ``{"code": ..., "data": ..., "error": ...}``; ``fetch`` unwraps
successful envelopes and turns every other code into a GatewayError, while
``fetch_raw`` returns the parsed body untouched for services with custom
envelopes.
"""

from __future__ import annotations
import asyncio
import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Union

import aiohttp

from ..runtime.errors import GatewayError, NetworkError

SUCCESSFUL_CODE = "successful"


@dataclass
class ProxyConfig:
    """Configuration for a gateway client."""

    proxy_url: str
    headers: Dict[str, str] = field(default_factory=dict)
    explorer_url: str = ""
    timeout: float = 30.0
    poll_interval: float = 1.0
    debug: bool = False


class GatewayClient:
    """
    Low-level gateway client.

    The underlying aiohttp session is created on first use and released by
    ``close()`` or by leaving an ``async with`` block. A session passed in
    by the caller is never closed by the client.
    """

    def __init__(self, config: Union[str, ProxyConfig],
                 session: Optional[aiohttp.ClientSession] = None):
        """
        Initialize the gateway client.

        Args:
            config: Either a gateway URL string or a ProxyConfig object
            session: Optional aiohttp session to share between clients
        """
        if isinstance(config, str):
            config = ProxyConfig(proxy_url=config)
        self.config = config

        self.logger = logging.getLogger(__name__)
        if self.config.debug:
            self.logger.setLevel(logging.DEBUG)

        self._session = session
        self._owns_session = session is None

    @property
    def proxy_url(self) -> str:
        return self.config.proxy_url.rstrip("/")

    @property
    def explorer_url(self) -> str:
        return self.config.explorer_url.rstrip("/")

    @property
    def headers(self) -> Dict[str, str]:
        return self.config.headers

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.config.timeout)
            )
            self._owns_session = True
        return self._session

    async def close(self) -> None:
        """Close the HTTP session if this client created it."""
        if self._session is not None and self._owns_session and not self._session.closed:
            await self._session.close()
            self.logger.debug(f"Closed session for {self.proxy_url}")
        self._session = None

    async def fetch_raw(self, path: str, data: Any = None) -> Any:
        """
        Perform a request and return the parsed JSON body.

        GET when no data is given, POST with a JSON body otherwise.

        Raises:
            NetworkError: If the gateway cannot be reached or the body is not JSON
        """
        method = "GET" if data is None else "POST"
        url = f"{self.proxy_url}{path}"
        session = await self._get_session()
        self.logger.debug(f"{method} {url}")
        try:
            async with session.request(method, url, json=data, headers=self.headers) as response:
                text = await response.text()
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise NetworkError(f"Network error on {method} {path}: {e}", cause=e) from e
        try:
            return json.loads(text)
        except ValueError as e:
            raise NetworkError(
                f"Invalid JSON from {method} {path} (HTTP {response.status}): {text[:200]}",
                cause=e,
            ) from e

    async def fetch(self, path: str, data: Any = None) -> Any:
        """
        Perform a request and unwrap the gateway envelope.

        Returns:
            The envelope's ``data`` field

        Raises:
            GatewayError: If the envelope code is not 'successful'
            NetworkError: On transport failures
        """
        res = await self.fetch_raw(path, data)
        if isinstance(res, dict) and res.get("code") == SUCCESSFUL_CODE:
            return res.get("data")
        self.logger.warning(f"Unsuccessful proxy request {path}: {res!r:.300}")
        raise GatewayError(path, res)

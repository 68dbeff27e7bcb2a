"""HTTP transport adapter for the private API."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional

import httpx


@dataclass(frozen=True)
class TransportResponse:
    """Raw status code and body of one exchange."""
    status_code: int
    body: str

    @property
    def is_success(self) -> bool:
        return 200 <= self.status_code < 300


class HTTPTransport:
    """
    HTTP transport backed by ``httpx.AsyncClient``.

    Implements ITransport protocol. Sends exactly once: retries and
    backoff belong to the caller.
    """

    def __init__(
        self,
        timeout: int = 60,
        cookies: Optional[Dict[str, str]] = None,
        proxy: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._timeout = timeout
        self._cookies = cookies
        self._proxy = proxy
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self):
        self._client = httpx.AsyncClient(
            timeout=self._timeout,
            cookies=self._cookies,
            proxy=self._proxy,
            transport=self._transport,
        )
        return self

    async def __aexit__(self, *args):
        if self._client:
            await self._client.aclose()
            self._client = None

    async def send(self, request: httpx.Request) -> TransportResponse:
        if not self._client:
            raise RuntimeError("HTTPTransport not initialized. Use 'async with' context.")
        response = await self._client.send(request)
        return TransportResponse(status_code=response.status_code, body=response.text)

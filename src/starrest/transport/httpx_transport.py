"""
StarREST Transport Layer - httpx Backend

Runs each request as an asyncio task on a shared `httpx.AsyncClient`.
"""

import asyncio
import logging
from typing import Any, Dict, Optional, Set

import httpx

from ..config import TransportConfig
from ..core.adapter import RequestParams
from ..core.deferred import Deferred
from ..errors import StarRestError, TransportClosedError
from .base import Transport

logger = logging.getLogger(__name__)


class HttpxTransport(Transport):
    """
    Transport backed by httpx.

    Non-2xx responses fail the Deferred with the `httpx.HTTPStatusError`
    raised by `raise_for_status()`; network errors fail it with the
    `httpx.RequestError`; any other error raised while sending (such as a
    body that cannot be encoded as JSON) fails it as well. All are passed
    through unchanged. Requests must be started from inside a running event
    loop.
    """

    def __init__(self,
                 base_url: str = "",
                 timeout: float = 30.0,
                 headers: Optional[Dict[str, str]] = None,
                 client: Optional[httpx.AsyncClient] = None,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(base_url=base_url,
                                                   timeout=timeout,
                                                   headers=headers,
                                                   transport=transport)
        self._pending: Set[asyncio.Task] = set()
        self._closed = False

    @classmethod
    def from_config(cls, config: TransportConfig, **kwargs: Any) -> 'HttpxTransport':
        return cls(base_url=config.base_url,
                   timeout=config.timeout,
                   headers=dict(config.headers),
                   **kwargs)

    @property
    def client(self) -> httpx.AsyncClient:
        return self._client

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    def request(self, params: RequestParams) -> Deferred:
        if self._closed:
            return Deferred.rejected(TransportClosedError("Transport is closed"))
        if params.url is None:
            return Deferred.rejected(StarRestError(f"No URL resolved for {params.method} request"))

        deferred = Deferred()
        task = asyncio.get_running_loop().create_task(self._send(params, deferred))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return deferred

    async def _send(self, params: RequestParams, deferred: Deferred) -> None:
        try:
            response = await self._client.request(params.method,
                                                  params.url,
                                                  json=params.data,
                                                  headers=params.headers or None)
            response.raise_for_status()
            payload = self._decode(response, params.data_type)
        except Exception as e:
            logger.debug(f"{params.method} {params.url} failed: {e!r}")
            deferred.reject(e)
            return

        logger.debug(f"{params.method} {params.url} -> {response.status_code}")
        deferred.resolve(payload)

    def _decode(self, response: httpx.Response, data_type: str) -> Any:
        if not response.content:
            return None
        if data_type == "json":
            return response.json()
        return response.text

    async def wait_pending(self) -> None:
        # Callbacks may start follow-up requests, so drain until empty.
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    async def aclose(self) -> None:
        if self._closed:
            return
        await self.wait_pending()
        self._closed = True
        if self._owns_client:
            await self._client.aclose()
        logger.info(f"{self.__class__.__name__} closed")

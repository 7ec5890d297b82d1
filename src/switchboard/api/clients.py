"""Hands out per-request clients, pooled or fresh."""

from __future__ import annotations

from contextlib import AsyncExitStack, asynccontextmanager
from typing import Any, AsyncIterator, Mapping

import httpx
import structlog

from switchboard.config import settings
from switchboard.core import ApiClient, ClientPool, Integration

logger = structlog.get_logger()


class ClientProvider:
    """Builds the client a route talks to.

    HTTP integrations lease a pooled ``httpx.AsyncClient`` when pooling is
    on and hold the lease until the request is done; otherwise each request
    builds and closes its own. Integrations with a ``client_factory``
    (Redis) always get a fresh client per request.
    """

    def __init__(
        self,
        pooled: bool | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        pooled = settings.pool_clients if pooled is None else pooled
        self.pool = ClientPool(transport=transport) if pooled else None
        self._transport = transport

    @asynccontextmanager
    async def open(
        self,
        integration: Integration,
        credentials: Mapping[str, str],
    ) -> AsyncIterator[Any]:
        async with AsyncExitStack() as stack:
            if integration.client_factory is not None:
                client = integration.client_factory(credentials)
            elif self.pool is not None:
                http = await stack.enter_async_context(self.pool.lease(integration, credentials))
                client = ApiClient(integration, credentials, http=http)
            else:
                client = ApiClient(integration, credentials, transport=self._transport)
            stack.push_async_callback(client.aclose)
            yield client

    async def aclose(self) -> None:
        if self.pool is not None:
            await self.pool.aclose()
            logger.info("client_pool_closed")

"""Connection-pooled httpx clients keyed by integration + credential bundle.

One ``httpx.AsyncClient`` is kept per (slug, credential fingerprint) so
repeated requests with the same secrets reuse keep-alive connections.
Clients are borrowed through ``lease``. The pool is LRU-bounded; an evicted
or invalidated client leaves the map at once but is only closed when its
last lease is released.
"""

from __future__ import annotations

import asyncio
from collections import OrderedDict
from contextlib import asynccontextmanager
from typing import AsyncIterator, Mapping

import httpx
import structlog

from switchboard.config import settings
from switchboard.core.client import build_http_client
from switchboard.core.credentials import fingerprint
from switchboard.core.endpoints import Integration

logger = structlog.get_logger()

PoolKey = tuple[str, str]


class ClientPool:
    def __init__(
        self,
        max_clients: int | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.max_clients = max_clients or settings.pool_max_clients
        self._transport = transport
        self._clients: OrderedDict[PoolKey, httpx.AsyncClient] = OrderedDict()
        self._leases: dict[httpx.AsyncClient, int] = {}
        self._retired: set[httpx.AsyncClient] = set()
        self._lock = asyncio.Lock()

    def __len__(self) -> int:
        return len(self._clients)

    def __contains__(self, key: object) -> bool:
        return key in self._clients

    @staticmethod
    def key_for(integration: Integration, credentials: Mapping[str, str]) -> PoolKey:
        return (integration.slug, fingerprint(credentials))

    def leases(self, client: httpx.AsyncClient) -> int:
        return self._leases.get(client, 0)

    @asynccontextmanager
    async def lease(
        self,
        integration: Integration,
        credentials: Mapping[str, str],
    ) -> AsyncIterator[httpx.AsyncClient]:
        """Borrow the pooled client for this key, creating it if needed.

        The client stays open for the whole ``async with`` block even if it
        is evicted or invalidated meanwhile.
        """
        client = await self._acquire(integration, credentials)
        try:
            yield client
        finally:
            await self._release(client)

    async def _acquire(
        self,
        integration: Integration,
        credentials: Mapping[str, str],
    ) -> httpx.AsyncClient:
        key = self.key_for(integration, credentials)
        async with self._lock:
            client = self._clients.get(key)
            if client is not None and not client.is_closed:
                self._clients.move_to_end(key)
            else:
                client = build_http_client(integration, credentials, self._transport)
                self._clients[key] = client
                logger.debug("client_pool_created", integration=integration.slug, size=len(self._clients))
            self._leases[client] = self._leases.get(client, 0) + 1

            while len(self._clients) > self.max_clients:
                old_key, old_client = self._clients.popitem(last=False)
                await self._retire(old_client)
                logger.info("client_pool_evicted", integration=old_key[0], leased=self.leases(old_client))
            return client

    async def _release(self, client: httpx.AsyncClient) -> None:
        async with self._lock:
            remaining = self._leases.get(client, 1) - 1
            if remaining > 0:
                self._leases[client] = remaining
                return
            self._leases.pop(client, None)
            if client in self._retired:
                self._retired.discard(client)
                await client.aclose()

    async def _retire(self, client: httpx.AsyncClient) -> None:
        """Close *client* now, or once its last borrower is done with it."""
        if self.leases(client):
            self._retired.add(client)
        else:
            await client.aclose()

    async def invalidate(self, slug: str | None = None) -> int:
        """Drop pooled clients for *slug* (all when ``None``)."""
        async with self._lock:
            keys = [k for k in self._clients if slug is None or k[0] == slug]
            for key in keys:
                await self._retire(self._clients.pop(key))
        if keys:
            logger.info("client_pool_invalidated", integration=slug or "*", dropped=len(keys))
        return len(keys)

    async def aclose(self) -> None:
        await self.invalidate()

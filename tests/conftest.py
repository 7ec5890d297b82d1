"""Pytest configuration and shared fixtures.

Run with:
    pytest tests/                        # Run all tests
    pytest tests/test_client.py -v       # Run specific test file

No network or Redis server is needed: upstream HTTP goes through
``httpx.MockTransport`` and Redis through an in-memory double.
"""

from __future__ import annotations

import fnmatch
import json
from typing import Any, Callable

import httpx
import pytest

Responder = Callable[[httpx.Request], httpx.Response]


class FakeUpstream:
    """Routes mocked requests by (method, path) and records them."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self._routes: dict[tuple[str, str], Responder] = {}

    def on(
        self,
        method: str,
        path: str,
        status: int = 200,
        json: Any = None,
        text: str | None = None,
        handler: Responder | None = None,
    ) -> None:
        if handler is None:
            def handler(request: httpx.Request) -> httpx.Response:
                if text is not None:
                    return httpx.Response(status, text=text)
                return httpx.Response(status, json=json)
        self._routes[(method.upper(), path)] = handler

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        responder = self._routes.get((request.method, request.url.path))
        if responder is None:
            return httpx.Response(
                404, json={"message": f"no mock for {request.method} {request.url.path}"}
            )
        return responder(request)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]

    def last_json(self) -> Any:
        return json.loads(self.last.content)


@pytest.fixture
def upstream() -> FakeUpstream:
    return FakeUpstream()


def sse_body(*events: dict[str, Any], done: bool = False) -> bytes:
    lines = [f"data: {json.dumps(e)}\n\n" for e in events]
    if done:
        lines.append("data: [DONE]\n\n")
    return "".join(lines).encode()


@pytest.fixture
def sse() -> Callable[..., bytes]:
    return sse_body


# ─────────────────────────────────────────────────────────────────────────────
# Redis double
# ─────────────────────────────────────────────────────────────────────────────

class FakeRedis:
    """The subset of ``redis.asyncio.Redis`` the cache client uses."""

    def __init__(self, **kwargs: Any) -> None:
        self.kwargs = kwargs
        self.strings: dict[str, str] = {}
        self.lists: dict[str, list[str]] = {}
        self.sets: dict[str, set[str]] = {}
        self.hashes: dict[str, dict[str, str]] = {}
        self.ttls: dict[str, int] = {}
        self.closed = False

    def _all_keys(self) -> set[str]:
        return {*self.strings, *self.lists, *self.sets, *self.hashes}

    async def set(self, key: str, value: str) -> bool:
        self.strings[key] = value
        self.ttls.pop(key, None)
        return True

    async def setex(self, key: str, seconds: int, value: str) -> bool:
        self.strings[key] = value
        self.ttls[key] = seconds
        return True

    async def get(self, key: str) -> str | None:
        return self.strings.get(key)

    async def delete(self, *keys: str) -> int:
        removed = 0
        for key in keys:
            for store in (self.strings, self.lists, self.sets, self.hashes):
                if key in store:
                    del store[key]
                    removed += 1
        return removed

    async def exists(self, *keys: str) -> int:
        return sum(1 for k in keys if k in self._all_keys())

    async def expire(self, key: str, seconds: int) -> bool:
        if key not in self._all_keys():
            return False
        self.ttls[key] = seconds
        return True

    async def ttl(self, key: str) -> int:
        if key not in self._all_keys():
            return -2
        return self.ttls.get(key, -1)

    async def incrby(self, key: str, amount: int) -> int:
        value = int(self.strings.get(key, "0")) + amount
        self.strings[key] = str(value)
        return value

    async def decrby(self, key: str, amount: int) -> int:
        return await self.incrby(key, -amount)

    async def lpush(self, key: str, *values: str) -> int:
        items = self.lists.setdefault(key, [])
        for value in values:
            items.insert(0, value)
        return len(items)

    async def lpop(self, key: str) -> str | None:
        items = self.lists.get(key)
        return items.pop(0) if items else None

    async def lrange(self, key: str, start: int, stop: int) -> list[str]:
        items = self.lists.get(key, [])
        stop = len(items) if stop == -1 else stop + 1
        return items[start:stop]

    async def sadd(self, key: str, *members: str) -> int:
        existing = self.sets.setdefault(key, set())
        before = len(existing)
        existing.update(members)
        return len(existing) - before

    async def smembers(self, key: str) -> set[str]:
        return set(self.sets.get(key, set()))

    async def hset(self, key: str, field: str, value: str) -> int:
        fields = self.hashes.setdefault(key, {})
        created = field not in fields
        fields[field] = value
        return int(created)

    async def hget(self, key: str, field: str) -> str | None:
        return self.hashes.get(key, {}).get(field)

    async def hgetall(self, key: str) -> dict[str, str]:
        return dict(self.hashes.get(key, {}))

    async def keys(self, pattern: str = "*") -> list[str]:
        return [k for k in self._all_keys() if fnmatch.fnmatchcase(k, pattern)]

    async def aclose(self) -> None:
        self.closed = True


@pytest.fixture
def fake_redis() -> FakeRedis:
    return FakeRedis()


@pytest.fixture
def patched_redis(monkeypatch, fake_redis) -> FakeRedis:
    """Every ``RedisCacheClient`` built from credentials shares *fake_redis*."""
    created: list[dict[str, Any]] = []

    def _factory(**kwargs: Any) -> FakeRedis:
        created.append(kwargs)
        fake_redis.kwargs = kwargs
        fake_redis.closed = False
        return fake_redis

    monkeypatch.setattr("switchboard.integrations.redis_cache.Redis", _factory)
    fake_redis.created = created  # type: ignore[attr-defined]
    return fake_redis


@pytest.fixture(autouse=True)
def _isolated_credentials(monkeypatch) -> None:
    """Keep real keys in the environment or keys.json out of the tests."""
    from switchboard.config import settings
    from switchboard.integrations import INTEGRATIONS

    monkeypatch.setattr(settings, "_keys", {})
    monkeypatch.setattr(settings, "gateway_token", "")
    monkeypatch.setattr(settings, "retry_attempts", 1)
    for integration in INTEGRATIONS.values():
        for field in integration.credentials:
            if field.env:
                monkeypatch.delenv(field.env, raising=False)

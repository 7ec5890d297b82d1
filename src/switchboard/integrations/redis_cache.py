"""Redis cache behind the same envelope contract as the HTTP integrations.

Values are JSON-encoded on write (plain strings are stored as-is) and
JSON-decoded on read, falling back to the raw string. A missing key is not
an error: ``get`` answers ``{"success": True, "value": None}``.
"""

from __future__ import annotations

import json
from types import TracebackType
from typing import Any, Awaitable, Callable, Mapping, Self

import structlog
from redis.asyncio import Redis

from switchboard.config import settings
from switchboard.core import (
    CredentialField,
    Endpoint,
    Integration,
    MissingParameterError,
    Param,
    Route,
    UnknownOperationError,
    describe_error,
    fail,
    ok,
)

logger = structlog.get_logger()


def encode(value: Any) -> str:
    if isinstance(value, str):
        return value
    return json.dumps(value)


def decode(value: str | None) -> Any:
    if value is None:
        return None
    try:
        return json.loads(value)
    except ValueError:
        return value


class RedisCacheClient:
    """Async Redis wrapper; one instance per credential bundle."""

    def __init__(self, credentials: Mapping[str, str], redis: Redis | None = None) -> None:
        self.credentials = dict(credentials)
        self._redis = redis if redis is not None else Redis(
            host=self.credentials.get("host", "localhost"),
            port=int(self.credentials.get("port", 6379)),
            password=self.credentials.get("password") or None,
            db=int(self.credentials.get("db", 0)),
            decode_responses=True,
            socket_timeout=settings.http_timeout_s,
            socket_connect_timeout=settings.http_connect_timeout_s,
        )
        self._ops: dict[str, Callable[..., Awaitable[dict[str, Any]]]] = {
            "set": self.set,
            "get": self.get,
            "delete": self.delete,
            "exists": self.exists,
            "expire": self.expire,
            "ttl": self.ttl,
            "increment": self.increment,
            "decrement": self.decrement,
            "list_push": self.list_push,
            "list_pop": self.list_pop,
            "list_range": self.list_range,
            "set_add": self.set_add,
            "set_members": self.set_members,
            "hash_set": self.hash_set,
            "hash_get": self.hash_get,
            "hash_get_all": self.hash_get_all,
            "keys": self.keys,
        }

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._redis.aclose()

    async def call(
        self,
        operation: str,
        args: Mapping[str, Any] | None = None,
        **kwargs: Any,
    ) -> dict[str, Any]:
        merged = {**(args or {}), **kwargs}
        try:
            endpoint = REDIS_CACHE.endpoint(operation)
            handler = self._ops.get(operation)
            if endpoint is None or handler is None:
                raise UnknownOperationError(REDIS_CACHE.slug, operation)
            missing = endpoint.missing(merged)
            if missing:
                raise MissingParameterError(missing)
            accepted = {p.name for p in endpoint.params}
            return await handler(**{k: v for k, v in merged.items() if k in accepted and v is not None})
        except Exception as e:
            logger.warning("redis_call_failed", operation=operation, error=describe_error(e))
            return fail(describe_error(e))

    # ── Strings ──────────────────────────────────────────────────────

    async def set(self, key: str, value: Any, expiry_seconds: int | None = None) -> dict[str, Any]:
        if expiry_seconds:
            await self._redis.setex(key, int(expiry_seconds), encode(value))
        else:
            await self._redis.set(key, encode(value))
        return ok(key=key, stored=True)

    async def get(self, key: str) -> dict[str, Any]:
        return ok(value=decode(await self._redis.get(key)))

    async def delete(self, key: str) -> dict[str, Any]:
        removed = await self._redis.delete(key)
        return ok(deleted=removed > 0)

    async def exists(self, key: str) -> dict[str, Any]:
        return ok(exists=await self._redis.exists(key) == 1)

    async def expire(self, key: str, seconds: int) -> dict[str, Any]:
        return ok(updated=bool(await self._redis.expire(key, int(seconds))))

    async def ttl(self, key: str) -> dict[str, Any]:
        return ok(ttl=await self._redis.ttl(key))

    async def increment(self, key: str, amount: int = 1) -> dict[str, Any]:
        return ok(value=await self._redis.incrby(key, int(amount)))

    async def decrement(self, key: str, amount: int = 1) -> dict[str, Any]:
        return ok(value=await self._redis.decrby(key, int(amount)))

    # ── Lists / sets / hashes ────────────────────────────────────────

    async def list_push(self, key: str, values: list[Any]) -> dict[str, Any]:
        if not isinstance(values, list):
            values = [values]
        length = await self._redis.lpush(key, *(encode(v) for v in values))
        return ok(length=length)

    async def list_pop(self, key: str) -> dict[str, Any]:
        return ok(value=decode(await self._redis.lpop(key)))

    async def list_range(self, key: str, start: int = 0, stop: int = -1) -> dict[str, Any]:
        values = await self._redis.lrange(key, int(start), int(stop))
        return ok(values=[decode(v) for v in values])

    async def set_add(self, key: str, members: list[Any]) -> dict[str, Any]:
        if not isinstance(members, list):
            members = [members]
        added = await self._redis.sadd(key, *(encode(m) for m in members))
        return ok(added=added)

    async def set_members(self, key: str) -> dict[str, Any]:
        members = await self._redis.smembers(key)
        return ok(members=[decode(m) for m in sorted(members)])

    async def hash_set(self, key: str, field: str, value: Any) -> dict[str, Any]:
        await self._redis.hset(key, field, encode(value))
        return ok(key=key, field=field)

    async def hash_get(self, key: str, field: str) -> dict[str, Any]:
        return ok(value=decode(await self._redis.hget(key, field)))

    async def hash_get_all(self, key: str) -> dict[str, Any]:
        raw = await self._redis.hgetall(key)
        return ok(hash={f: decode(v) for f, v in raw.items()})

    async def keys(self, pattern: str = "*") -> dict[str, Any]:
        return ok(keys=sorted(await self._redis.keys(pattern)))


def _redis_client(credentials: Mapping[str, str]) -> RedisCacheClient:
    return RedisCacheClient(credentials)


def _op(name: str, route: Route, *params: Param) -> Endpoint:
    return Endpoint(name, "REDIS", "", params=params, route=route)


_KEY = Param("key", required=True)

REDIS_CACHE = Integration(
    slug="redis-cache",
    title="Redis cache",
    base_url="",
    credentials=(
        CredentialField("host", env="REDIS_HOST", required=False, default="localhost"),
        CredentialField("port", env="REDIS_PORT", required=False, default="6379"),
        CredentialField("password", env="REDIS_PASSWORD", required=False),
        CredentialField("db", env="REDIS_DB", required=False, default="0"),
    ),
    client_factory=_redis_client,
    endpoints=(
        _op("set", Route("POST", "/set"), _KEY, Param("value", required=True), Param("expiry_seconds")),
        _op("get", Route("GET", "/get/{key}"), _KEY),
        _op("delete", Route("DELETE", "/delete/{key}"), _KEY),
        _op("exists", Route("GET", "/exists/{key}"), _KEY),
        _op("expire", Route("POST", "/expire"), _KEY, Param("seconds", required=True)),
        _op("ttl", Route("GET", "/ttl/{key}"), _KEY),
        _op("increment", Route("POST", "/increment"), _KEY, Param("amount")),
        _op("decrement", Route("POST", "/decrement"), _KEY, Param("amount")),
        _op("list_push", Route("POST", "/list/push"), _KEY, Param("values", required=True)),
        _op("list_pop", Route("POST", "/list/pop"), _KEY),
        _op("list_range", Route("GET", "/list/range/{key}"), _KEY, Param("start"), Param("stop")),
        _op("set_add", Route("POST", "/set/add"), _KEY, Param("members", required=True)),
        _op("set_members", Route("GET", "/set/members/{key}"), _KEY),
        _op("hash_set", Route("POST", "/hash/set"), _KEY, Param("field", required=True), Param("value", required=True)),
        _op("hash_get", Route("GET", "/hash/get/{key}/{field}"), _KEY, Param("field", required=True)),
        _op("hash_get_all", Route("GET", "/hash/getall/{key}"), _KEY),
        _op("keys", Route("GET", "/keys"), Param("pattern")),
    ),
)

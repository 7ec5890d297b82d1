"""Tests for the Redis cache client (in-memory Redis double)."""

from __future__ import annotations

import pytest

from switchboard.integrations.redis_cache import RedisCacheClient, decode, encode


class TestCodec:
    def test_strings_stored_raw(self):
        assert encode("hello") == "hello"
        assert decode("hello") == "hello"

    def test_json_values(self):
        assert encode({"a": 1}) == '{"a": 1}'
        assert decode('{"a": 1}') == {"a": 1}
        assert decode("42") == 42

    def test_missing(self):
        assert decode(None) is None


class TestRedisCacheClient:
    @pytest.mark.asyncio
    async def test_set_and_get(self, fake_redis):
        client = RedisCacheClient({}, redis=fake_redis)
        assert await client.call("set", key="user:1", value={"name": "Ada"}) == {
            "success": True, "key": "user:1", "stored": True,
        }
        assert await client.call("get", key="user:1") == {"success": True, "value": {"name": "Ada"}}

    @pytest.mark.asyncio
    async def test_missing_key_is_success_with_null(self, fake_redis):
        client = RedisCacheClient({}, redis=fake_redis)
        assert await client.call("get", key="nope") == {"success": True, "value": None}

    @pytest.mark.asyncio
    async def test_set_with_expiry(self, fake_redis):
        client = RedisCacheClient({}, redis=fake_redis)
        await client.call("set", key="session", value="abc", expiry_seconds=60)
        assert await client.call("ttl", key="session") == {"success": True, "ttl": 60}

    @pytest.mark.asyncio
    async def test_counters(self, fake_redis):
        client = RedisCacheClient({}, redis=fake_redis)
        await client.call("increment", key="hits")
        await client.call("increment", key="hits", amount=4)
        assert await client.call("decrement", key="hits", amount="2") == {"success": True, "value": 3}

    @pytest.mark.asyncio
    async def test_lists_sets_hashes(self, fake_redis):
        client = RedisCacheClient({}, redis=fake_redis)
        await client.call("list_push", key="queue", values=["a", {"b": 2}])
        assert (await client.call("list_range", key="queue"))["values"] == [{"b": 2}, "a"]
        assert (await client.call("list_pop", key="queue"))["value"] == {"b": 2}

        await client.call("set_add", key="tags", members=["x", "y", "x"])
        assert (await client.call("set_members", key="tags"))["members"] == ["x", "y"]

        await client.call("hash_set", key="h", field="f", value=[1, 2])
        assert (await client.call("hash_get", key="h", field="f"))["value"] == [1, 2]
        assert (await client.call("hash_get_all", key="h"))["hash"] == {"f": [1, 2]}

    @pytest.mark.asyncio
    async def test_delete_exists_keys(self, fake_redis):
        client = RedisCacheClient({}, redis=fake_redis)
        await client.call("set", key="a:1", value="1")
        await client.call("set", key="b:1", value="1")
        assert await client.call("exists", key="a:1") == {"success": True, "exists": True}
        assert (await client.call("keys", pattern="a:*"))["keys"] == ["a:1"]
        assert await client.call("delete", key="a:1") == {"success": True, "deleted": True}
        assert await client.call("exists", key="a:1") == {"success": True, "exists": False}

    @pytest.mark.asyncio
    async def test_missing_parameter(self, fake_redis):
        client = RedisCacheClient({}, redis=fake_redis)
        assert await client.call("set", key="k") == {
            "success": False, "error": "Missing required parameter(s): value",
        }

    @pytest.mark.asyncio
    async def test_unknown_operation(self, fake_redis):
        client = RedisCacheClient({}, redis=fake_redis)
        result = await client.call("flush_all")
        assert result["success"] is False

    @pytest.mark.asyncio
    async def test_backend_errors_become_envelopes(self, fake_redis):
        async def broken(key):
            raise ConnectionError("Connection refused")

        fake_redis.get = broken
        client = RedisCacheClient({}, redis=fake_redis)
        assert await client.call("get", key="k") == {"success": False, "error": "Connection refused"}

    @pytest.mark.asyncio
    async def test_connection_settings_from_credentials(self, patched_redis):
        async with RedisCacheClient({"host": "cache", "port": "6380", "db": "2", "password": "pw"}) as client:
            await client.call("get", key="k")
        assert patched_redis.kwargs["host"] == "cache"
        assert patched_redis.kwargs["port"] == 6380
        assert patched_redis.kwargs["db"] == 2
        assert patched_redis.kwargs["password"] == "pw"
        assert patched_redis.kwargs["decode_responses"] is True
        assert patched_redis.closed

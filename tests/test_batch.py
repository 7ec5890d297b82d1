"""Tests for concurrent batch helpers."""

from __future__ import annotations

import asyncio

import pytest

from switchboard.core import fail, ok
from switchboard.core.batch import run_batch


async def _ok(value: int, delay: float = 0.0) -> dict:
    await asyncio.sleep(delay)
    return ok(value=value)


async def _fail(message: str, delay: float = 0.0) -> dict:
    await asyncio.sleep(delay)
    return fail(message)


async def _raise(delay: float = 0.0) -> dict:
    await asyncio.sleep(delay)
    raise RuntimeError("exploded")


class TestFailFast:
    @pytest.mark.asyncio
    async def test_all_succeed_in_order(self):
        result = await run_batch([_ok(1, 0.03), _ok(2, 0.01), _ok(3)])
        assert result["success"] is True
        assert [r["value"] for r in result["results"]] == [1, 2, 3]
        assert result["failed"] == 0

    @pytest.mark.asyncio
    async def test_first_failure_wins_with_no_partial_results(self):
        result = await run_batch([_ok(1), _fail("rate limited", 0.01), _ok(3, 0.05)])
        assert result == {"success": False, "error": "item 1: rate limited"}

    @pytest.mark.asyncio
    async def test_exception_becomes_failure(self):
        result = await run_batch([_ok(1), _raise()])
        assert result["success"] is False
        assert "exploded" in result["error"]

    @pytest.mark.asyncio
    async def test_remaining_items_are_cancelled(self):
        finished: list[int] = []

        async def slow() -> dict:
            await asyncio.sleep(1)
            finished.append(1)
            return ok(value=1)

        result = await run_batch([_fail("nope"), slow()])
        assert result["success"] is False
        assert finished == []

    @pytest.mark.asyncio
    async def test_empty(self):
        assert await run_batch([]) == {"success": True, "results": [], "failed": 0}


class TestSettle:
    @pytest.mark.asyncio
    async def test_collects_every_outcome(self):
        result = await run_batch([_ok(1), _fail("bad"), _raise()], fail_fast=False)
        assert result["success"] is True
        assert result["failed"] == 2
        assert result["results"][0] == {"success": True, "value": 1}
        assert result["results"][1] == {"success": False, "error": "bad"}
        assert result["results"][2] == {"success": False, "error": "exploded"}

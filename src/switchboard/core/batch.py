"""Concurrent fan-out over envelope-returning operations.

Two strategies:

  fail_fast=True   First failing item (exception or ``success: False``
                   envelope) cancels the rest. No partial results.
  fail_fast=False  Settle all items; return every envelope plus a failure
                   count.
"""

from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Sequence

import structlog

from switchboard.core.envelope import fail, is_success, ok
from switchboard.core.errors import BatchItemError, describe_error

logger = structlog.get_logger()


async def _checked(index: int, call: Awaitable[dict[str, Any]]) -> dict[str, Any]:
    try:
        result = await call
    except asyncio.CancelledError:
        raise
    except Exception as e:
        raise BatchItemError(index, describe_error(e)) from e
    if not is_success(result):
        error = result.get("error") if isinstance(result, dict) else None
        raise BatchItemError(index, str(error or "failed"))
    return result


def _first_item_error(group: BaseExceptionGroup) -> BatchItemError | None:
    for exc in group.exceptions:
        if isinstance(exc, BatchItemError):
            return exc
        if isinstance(exc, BaseExceptionGroup):
            found = _first_item_error(exc)
            if found is not None:
                return found
    return None


async def _settle(index: int, call: Awaitable[dict[str, Any]]) -> dict[str, Any]:
    try:
        result = await call
    except Exception as e:
        return fail(describe_error(e))
    if not isinstance(result, dict):
        return fail(f"item {index} returned {type(result).__name__}")
    return result


async def run_batch(
    calls: Sequence[Awaitable[dict[str, Any]]],
    fail_fast: bool = True,
) -> dict[str, Any]:
    """Run *calls* concurrently and fold them into one envelope.

    Results keep the order of *calls*.
    """
    if not calls:
        return ok(results=[], failed=0)

    if not fail_fast:
        results = await asyncio.gather(*(_settle(i, c) for i, c in enumerate(calls)))
        failed = sum(1 for r in results if not is_success(r))
        if failed:
            logger.warning("batch_partial_failure", total=len(results), failed=failed)
        return ok(results=list(results), failed=failed)

    tasks: list[asyncio.Task[dict[str, Any]]] = []
    item_error: BatchItemError | None = None
    try:
        async with asyncio.TaskGroup() as tg:
            for i, call in enumerate(calls):
                tasks.append(tg.create_task(_checked(i, call)))
    except* BatchItemError as group:
        item_error = _first_item_error(group) or BatchItemError(-1, "batch failed")

    if item_error is not None:
        logger.warning("batch_failed_fast", total=len(calls), index=item_error.index)
        return fail(str(item_error))
    return ok(results=[t.result() for t in tasks], failed=0)

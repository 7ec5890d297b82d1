"""SSE-style stream consumption for incremental completion APIs.

Upstreams such as Anthropic and OpenAI answer ``stream: true`` requests with
newline-delimited ``data: <json>`` lines. ``consume_sse`` reads those lines,
pulls one text delta per event, hands each delta to a callback, and returns
the full text once the stream ends. Errors raised by the line source
propagate to the caller.
"""

from __future__ import annotations

import inspect
import json
from typing import Any, AsyncIterable, Awaitable, Callable

import structlog

logger = structlog.get_logger()

ChunkCallback = Callable[[str], Awaitable[None] | None]

_DONE = "[DONE]"


def parse_sse_line(line: str) -> dict[str, Any] | None:
    """Decode one ``data: <json>`` line; ``None`` for anything else."""
    line = line.strip()
    if not line.startswith("data:"):
        return None
    payload = line[len("data:"):].strip()
    if not payload or payload == _DONE:
        return None
    try:
        event = json.loads(payload)
    except json.JSONDecodeError:
        logger.debug("sse_line_skipped", line=payload[:200])
        return None
    return event if isinstance(event, dict) else None


async def consume_sse(
    lines: AsyncIterable[str],
    extract: Callable[[dict[str, Any]], str | None],
    on_chunk: ChunkCallback | None = None,
) -> str:
    """Feed SSE lines through *extract* and return the concatenated deltas.

    *on_chunk* is called once per non-empty delta, in stream order. It may
    be a plain function or a coroutine function.
    """
    parts: list[str] = []
    async for raw in lines:
        # A transport chunk may carry several events.
        for line in raw.splitlines() or [raw]:
            event = parse_sse_line(line)
            if event is None:
                continue
            delta = extract(event)
            if not delta:
                continue
            parts.append(delta)
            if on_chunk is not None:
                result = on_chunk(delta)
                if inspect.isawaitable(result):
                    await result
    return "".join(parts)


# ── Delta extractors ─────────────────────────────────────────────────


def anthropic_delta(event: dict[str, Any]) -> str | None:
    if event.get("type") != "content_block_delta":
        return None
    delta = event.get("delta") or {}
    return delta.get("text")


def openai_delta(event: dict[str, Any]) -> str | None:
    choices = event.get("choices") or []
    if not choices:
        return None
    delta = choices[0].get("delta") or {}
    return delta.get("content")


def plain_delta(event: dict[str, Any]) -> str | None:
    """``{"delta": "x"}`` events."""
    value = event.get("delta")
    return value if isinstance(value, str) else None

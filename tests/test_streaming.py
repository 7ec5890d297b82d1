"""Tests for SSE consumption and ApiClient.stream."""

from __future__ import annotations

import httpx
import pytest

from switchboard.core import ApiClient
from switchboard.core.streaming import (
    anthropic_delta,
    consume_sse,
    openai_delta,
    parse_sse_line,
    plain_delta,
)
from switchboard.integrations.anthropic import ANTHROPIC
from switchboard.integrations.openai import OPENAI


async def _lines(*items: str):
    for item in items:
        yield item


class TestParseLine:
    def test_data_line(self):
        assert parse_sse_line('data: {"delta": "hi"}') == {"delta": "hi"}

    @pytest.mark.parametrize("line", ["", "event: ping", "data: [DONE]", "data: {oops", ": comment"])
    def test_ignored(self, line):
        assert parse_sse_line(line) is None


class TestConsume:
    @pytest.mark.asyncio
    async def test_chunks_in_order(self):
        seen: list[str] = []
        text = await consume_sse(
            _lines('data: {"delta": "Hel"}', 'data: {"delta": "lo"}', 'data: {"delta": "!"}'),
            plain_delta,
            seen.append,
        )
        assert seen == ["Hel", "lo", "!"]
        assert text == "Hello!"

    @pytest.mark.asyncio
    async def test_async_callback(self):
        seen: list[str] = []

        async def on_chunk(delta: str) -> None:
            seen.append(delta)

        await consume_sse(_lines('data: {"delta": "a"}', 'data: {"delta": "b"}'), plain_delta, on_chunk)
        assert seen == ["a", "b"]

    @pytest.mark.asyncio
    async def test_several_events_in_one_chunk(self):
        text = await consume_sse(_lines('data: {"delta": "x"}\ndata: {"delta": "y"}'), plain_delta)
        assert text == "xy"

    @pytest.mark.asyncio
    async def test_source_errors_propagate(self):
        async def broken():
            yield 'data: {"delta": "x"}'
            raise httpx.ReadError("connection reset")

        with pytest.raises(httpx.ReadError):
            await consume_sse(broken(), plain_delta)


class TestExtractors:
    def test_anthropic(self):
        assert anthropic_delta({"type": "content_block_delta", "delta": {"type": "text_delta", "text": "Hi"}}) == "Hi"
        assert anthropic_delta({"type": "message_start", "message": {}}) is None

    def test_openai(self):
        assert openai_delta({"choices": [{"delta": {"content": "Hi"}}]}) == "Hi"
        assert openai_delta({"choices": [{"delta": {"role": "assistant"}}]}) is None
        assert openai_delta({"choices": []}) is None


# ─────────────────────────────────────────────────────────────────────────────
# ApiClient.stream
# ─────────────────────────────────────────────────────────────────────────────

class TestClientStream:
    @pytest.mark.asyncio
    async def test_anthropic_stream(self, upstream, sse):
        body = sse(
            {"type": "message_start", "message": {"id": "msg_1"}},
            {"type": "content_block_delta", "delta": {"type": "text_delta", "text": "Hello"}},
            {"type": "content_block_delta", "delta": {"type": "text_delta", "text": " world"}},
            {"type": "message_stop"},
        )
        upstream.on("POST", "/v1/messages", handler=lambda r: httpx.Response(
            200, content=body, headers={"content-type": "text/event-stream"},
        ))
        chunks: list[str] = []
        async with ApiClient(ANTHROPIC, {"api_key": "k"}, transport=upstream.transport) as client:
            result = await client.stream(
                "stream_message",
                {"messages": [{"role": "user", "content": "hi"}]},
                on_chunk=chunks.append,
            )

        assert result == {"success": True, "content": "Hello world"}
        assert chunks == ["Hello", " world"]
        sent = upstream.last_json()
        assert sent["stream"] is True
        assert sent["max_tokens"] == 1024
        assert upstream.last.headers["x-api-key"] == "k"
        assert upstream.last.headers["anthropic-version"] == "2023-06-01"

    @pytest.mark.asyncio
    async def test_openai_stream_with_done(self, upstream, sse):
        body = sse(
            {"choices": [{"delta": {"role": "assistant"}}]},
            {"choices": [{"delta": {"content": "4"}}]},
            done=True,
        )
        upstream.on("POST", "/v1/chat/completions", handler=lambda r: httpx.Response(200, content=body))
        async with ApiClient(OPENAI, {"api_key": "k"}, transport=upstream.transport) as client:
            result = await client.stream(
                "stream_chat_completion", {"messages": [{"role": "user", "content": "2+2"}]},
            )
        assert result == {"success": True, "content": "4"}

    @pytest.mark.asyncio
    async def test_stream_upstream_error(self, upstream):
        upstream.on("POST", "/v1/messages", status=401,
                    json={"type": "error", "error": {"type": "authentication_error", "message": "invalid x-api-key"}})
        async with ApiClient(ANTHROPIC, {"api_key": "bad"}, transport=upstream.transport) as client:
            result = await client.stream("stream_message", {"messages": []})

        assert result == {"success": False, "error": "invalid x-api-key"}

    @pytest.mark.asyncio
    async def test_non_streaming_endpoint_refused(self, upstream):
        async with ApiClient(ANTHROPIC, {"api_key": "k"}, transport=upstream.transport) as client:
            result = await client.stream("list_models")
        assert result["success"] is False
        assert upstream.requests == []

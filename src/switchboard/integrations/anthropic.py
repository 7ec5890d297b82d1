"""Anthropic Messages API, plain and streamed."""

from __future__ import annotations

from typing import Any, Mapping

from switchboard.core import CredentialField, Endpoint, Integration, Param, Route, StreamSpec
from switchboard.core.endpoints import header
from switchboard.core.streaming import anthropic_delta

DEFAULT_MODEL = "claude-3-5-sonnet-latest"


def _text_blocks(data: Any, args: Mapping[str, Any]) -> dict[str, Any]:
    content = data.get("content") if isinstance(data, dict) else None
    text = "".join(
        block.get("text", "")
        for block in content or []
        if isinstance(block, dict) and block.get("type") == "text"
    )
    return {"message": data, "text": text}


_MESSAGE_PARAMS = (
    Param("messages", required=True),
    Param("model", default=DEFAULT_MODEL),
    Param("max_tokens", default=1024),
    Param("system"),
    Param("temperature"),
    Param("top_p"),
    Param("top_k"),
    Param("stop_sequences"),
    Param("metadata"),
    Param("tools"),
    Param("tool_choice"),
)

ANTHROPIC = Integration(
    slug="anthropic",
    title="Anthropic",
    base_url="https://api.anthropic.com/v1",
    credentials=(CredentialField("api_key", env="ANTHROPIC_API_KEY"),),
    auth=header("x-api-key", "api_key"),
    headers={"anthropic-version": "2023-06-01"},
    endpoints=(
        Endpoint(
            "create_message", "POST", "/messages",
            params=_MESSAGE_PARAMS,
            transform=_text_blocks,
            route=Route("POST", "/messages"),
        ),
        Endpoint(
            "stream_message", "POST", "/messages",
            params=_MESSAGE_PARAMS,
            stream=StreamSpec(extract=anthropic_delta),
            route=Route("POST", "/messages/stream"),
        ),
        Endpoint(
            "count_tokens", "POST", "/messages/count_tokens",
            params=(
                Param("messages", required=True),
                Param("model", default=DEFAULT_MODEL),
                Param("system"),
                Param("tools"),
            ),
            fields={"input_tokens": "input_tokens"},
            route=Route("POST", "/messages/count-tokens"),
        ),
        Endpoint(
            "list_models", "GET", "/models",
            params=(Param("limit", "query"), Param("after_id", "query")),
            fields={"models": "data", "has_more": "has_more"},
            route=Route("GET", "/models"),
        ),
    ),
)

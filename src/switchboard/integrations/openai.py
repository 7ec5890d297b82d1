"""OpenAI: chat completions (plain and streamed), embeddings, images, models."""

from __future__ import annotations

from typing import Mapping

from switchboard.core import CredentialField, Endpoint, Integration, Param, Route, StreamSpec
from switchboard.core.endpoints import Auth
from switchboard.core.streaming import openai_delta


def _auth(creds: Mapping[str, str]) -> Auth:
    headers = {"Authorization": f"Bearer {creds['api_key']}"}
    if creds.get("organization"):
        headers["OpenAI-Organization"] = creds["organization"]
    return Auth(headers=headers)


_CHAT_PARAMS = (
    Param("messages", required=True),
    Param("model", default="gpt-4o-mini"),
    Param("temperature"),
    Param("max_tokens"),
    Param("top_p"),
    Param("n"),
    Param("stop"),
    Param("presence_penalty"),
    Param("frequency_penalty"),
    Param("user"),
    Param("tools"),
    Param("tool_choice"),
    Param("response_format"),
)

OPENAI = Integration(
    slug="openai",
    title="OpenAI",
    base_url="https://api.openai.com/v1",
    credentials=(
        CredentialField("api_key", env="OPENAI_API_KEY"),
        CredentialField("organization", env="OPENAI_ORGANIZATION", required=False),
    ),
    auth=_auth,
    endpoints=(
        Endpoint(
            "create_chat_completion", "POST", "/chat/completions",
            params=_CHAT_PARAMS,
            fields={"completion": None},
            route=Route("POST", "/chat/completions"),
        ),
        Endpoint(
            "stream_chat_completion", "POST", "/chat/completions",
            params=_CHAT_PARAMS,
            stream=StreamSpec(extract=openai_delta),
            route=Route("POST", "/chat/completions/stream"),
        ),
        Endpoint(
            "create_embedding", "POST", "/embeddings",
            params=(
                Param("input", required=True),
                Param("model", default="text-embedding-3-small"),
                Param("dimensions"),
                Param("encoding_format"),
            ),
            fields={"embeddings": "data", "usage": "usage"},
            route=Route("POST", "/embeddings"),
        ),
        Endpoint(
            "create_image", "POST", "/images/generations",
            params=(
                Param("prompt", required=True),
                Param("model", default="dall-e-3"),
                Param("n"),
                Param("size"),
                Param("quality"),
                Param("response_format"),
            ),
            fields={"images": "data"},
            route=Route("POST", "/images"),
        ),
        Endpoint(
            "create_moderation", "POST", "/moderations",
            params=(Param("input", required=True), Param("model")),
            fields={"results": "results"},
            route=Route("POST", "/moderations"),
        ),
        Endpoint(
            "list_models", "GET", "/models",
            fields={"models": "data"},
            route=Route("GET", "/models"),
        ),
        Endpoint(
            "get_model", "GET", "/models/{model_id}",
            fields={"model": None},
            route=Route("GET", "/models/{model_id}"),
        ),
    ),
)

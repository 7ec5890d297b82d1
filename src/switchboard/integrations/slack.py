"""Slack Web API.

Slack answers HTTP 200 even for failed calls and signals the failure with
``{"ok": false, "error": "<code>"}``; ``_checked`` turns that into an
``UpstreamError`` so the envelope reports it.
"""

from __future__ import annotations

from typing import Any, Callable, Mapping

from switchboard.core import CredentialField, Endpoint, Integration, Param, Route, UpstreamError
from switchboard.core.endpoints import bearer, comma_join


def _checked(*keys: str, rename: Mapping[str, str] | None = None) -> Callable[[Any, Mapping[str, Any]], dict[str, Any]]:
    rename = rename or {}

    def transform(data: Any, args: Mapping[str, Any]) -> dict[str, Any]:
        if not isinstance(data, dict) or not data.get("ok"):
            error = data.get("error") if isinstance(data, dict) else None
            raise UpstreamError(f"Slack API error: {error or 'unknown_error'}", status_code=200, body=data)
        return {rename.get(k, k): data.get(k) for k in keys}

    return transform


SLACK = Integration(
    slug="slack",
    title="Slack",
    base_url="https://slack.com/api",
    credentials=(CredentialField("bot_token", env="SLACK_BOT_TOKEN"),),
    auth=bearer("bot_token"),
    headers={"Content-Type": "application/json; charset=utf-8"},
    endpoints=(
        Endpoint(
            "post_message", "POST", "/chat.postMessage",
            params=(
                Param("channel", required=True),
                Param("text"),
                Param("blocks"),
                Param("thread_ts"),
                Param("unfurl_links"),
            ),
            transform=_checked("channel", "ts", "message"),
            route=Route("POST", "/messages"),
        ),
        Endpoint(
            "update_message", "POST", "/chat.update",
            params=(
                Param("channel", required=True),
                Param("ts", required=True),
                Param("text"),
                Param("blocks"),
            ),
            transform=_checked("channel", "ts", "text"),
            route=Route("PUT", "/messages"),
        ),
        Endpoint(
            "delete_message", "POST", "/chat.delete",
            params=(Param("channel", required=True), Param("ts", required=True)),
            transform=_checked("channel", "ts"),
            route=Route("DELETE", "/messages"),
        ),
        Endpoint(
            "list_channels", "GET", "/conversations.list",
            params=(
                Param("types", "query", default="public_channel", serialize=comma_join),
                Param("limit", "query", default=100),
                Param("cursor", "query"),
                Param("exclude_archived", "query"),
            ),
            transform=_checked("channels", "response_metadata"),
            route=Route("GET", "/channels"),
        ),
        Endpoint(
            "channel_history", "GET", "/conversations.history",
            params=(
                Param("channel", "query", required=True),
                Param("limit", "query", default=50),
                Param("oldest", "query"),
                Param("latest", "query"),
                Param("cursor", "query"),
            ),
            transform=_checked("messages", "has_more"),
            route=Route("GET", "/channels/{channel}/history"),
        ),
        Endpoint(
            "create_channel", "POST", "/conversations.create",
            params=(Param("name", required=True), Param("is_private")),
            transform=_checked("channel"),
            route=Route("POST", "/channels"),
        ),
        Endpoint(
            "get_user", "GET", "/users.info",
            params=(Param("user", "query", required=True),),
            transform=_checked("user"),
            route=Route("GET", "/users/{user}"),
        ),
        Endpoint(
            "list_users", "GET", "/users.list",
            params=(Param("limit", "query", default=100), Param("cursor", "query")),
            transform=_checked("members", "response_metadata", rename={"members": "users"}),
            route=Route("GET", "/users"),
        ),
        Endpoint(
            "add_reaction", "POST", "/reactions.add",
            params=(
                Param("channel", required=True),
                Param("timestamp", required=True),
                Param("name", required=True),
            ),
            transform=_checked("ok", rename={"ok": "added"}),
            route=Route("POST", "/reactions"),
        ),
    ),
)

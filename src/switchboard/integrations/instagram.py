"""Instagram Graph API: profile, media, insights, product tags, comments.

Also carries the composite helpers: concurrent insight fetches, bulk
comment deletion, and engagement arithmetic over like/comment counts.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from switchboard.core import (
    CompositeOperation,
    CredentialField,
    Endpoint,
    Integration,
    Param,
    Route,
    fail,
    ok,
)
from switchboard.core.endpoints import comma_join, json_dumps, query

if TYPE_CHECKING:
    from switchboard.core.client import ApiClient

_MEDIA_FIELDS = ["id", "caption", "media_type", "media_url", "permalink", "timestamp", "like_count", "comments_count"]
_DEFAULT_METRICS = ["impressions", "reach", "saved"]


async def _total_engagement(client: ApiClient, args: dict[str, Any]) -> dict[str, Any]:
    media = await client.fetch(
        "get_media", {"media_id": args["media_id"], "fields": ["like_count", "comments_count"]},
    )
    likes = int(media.get("like_count") or 0)
    comments = int(media.get("comments_count") or 0)
    return ok(likes=likes, comments=comments, total=likes + comments)


async def _engagement_rate(client: ApiClient, args: dict[str, Any]) -> dict[str, Any]:
    followers = int(args["follower_count"])
    if followers <= 0:
        return fail("follower_count must be a positive integer")
    engagement = await _total_engagement(client, args)
    total = engagement["total"]
    return ok(
        engagement=total,
        followers=followers,
        rate=f"{total / followers * 100:.2f}%",
    )


async def _batch_media_insights(client: ApiClient, args: dict[str, Any]) -> dict[str, Any]:
    metrics = args.get("metrics") or _DEFAULT_METRICS
    items = [{"media_id": media_id, "metric": metrics} for media_id in args["media_ids"]]
    return await client.batch("get_media_insights", items, fail_fast=args.get("fail_fast"))


async def _bulk_delete_comments(client: ApiClient, args: dict[str, Any]) -> dict[str, Any]:
    items = [{"comment_id": comment_id} for comment_id in args["comment_ids"]]
    return await client.batch("delete_comment", items, fail_fast=args.get("fail_fast"))


INSTAGRAM = Integration(
    slug="instagram",
    title="Instagram",
    base_url="https://graph.facebook.com/v19.0",
    credentials=(CredentialField("access_token", env="INSTAGRAM_ACCESS_TOKEN"),),
    auth=query(access_token="access_token"),
    endpoints=(
        Endpoint(
            "get_profile", "GET", "/{user_id}",
            params=(
                Param(
                    "fields", "query", serialize=comma_join,
                    default=["id", "username", "followers_count", "follows_count", "media_count"],
                ),
            ),
            fields={"profile": None},
            route=Route("GET", "/users/{user_id}"),
        ),
        Endpoint(
            "get_user_media", "GET", "/{user_id}/media",
            params=(
                Param("fields", "query", serialize=comma_join, default=_MEDIA_FIELDS[:5]),
                Param("limit", "query", default=25),
                Param("after", "query"),
            ),
            fields={"media": "data", "paging": "paging"},
            route=Route("GET", "/users/{user_id}/media"),
        ),
        Endpoint(
            "get_media", "GET", "/{media_id}",
            params=(Param("fields", "query", serialize=comma_join, default=_MEDIA_FIELDS),),
            fields={"media": None},
            route=Route("GET", "/media/{media_id}"),
        ),
        Endpoint(
            "get_media_insights", "GET", "/{media_id}/insights",
            params=(Param("metric", "query", serialize=comma_join, default=_DEFAULT_METRICS),),
            fields={"insights": "data"},
            route=Route("GET", "/media/{media_id}/insights"),
        ),
        Endpoint(
            "create_media_container", "POST", "/{user_id}/media",
            params=(
                Param("image_url", "query", required=True),
                Param("caption", "query"),
                Param("location_id", "query"),
                Param("user_tags", "query", serialize=json_dumps),
            ),
            fields={"creation_id": "id"},
            route=Route("POST", "/users/{user_id}/media"),
        ),
        Endpoint(
            "publish_media", "POST", "/{user_id}/media_publish",
            params=(Param("creation_id", "query", required=True),),
            fields={"media_id": "id"},
            route=Route("POST", "/users/{user_id}/media/publish"),
        ),
        Endpoint(
            "tag_products", "POST", "/{media_id}/product_tags",
            params=(Param("product_tags", "query", required=True, serialize=json_dumps),),
            fields={"tagged": "success"},
            route=Route("POST", "/media/{media_id}/product-tags"),
        ),
        Endpoint(
            "get_comments", "GET", "/{media_id}/comments",
            params=(Param("fields", "query", serialize=comma_join, default=["id", "text", "username", "timestamp"]),),
            fields={"comments": "data"},
            route=Route("GET", "/media/{media_id}/comments"),
        ),
        Endpoint(
            "reply_to_comment", "POST", "/{comment_id}/replies",
            params=(Param("message", "query", required=True),),
            fields={"reply_id": "id"},
            route=Route("POST", "/comments/{comment_id}/replies"),
        ),
        Endpoint(
            "delete_comment", "DELETE", "/{comment_id}",
            fields={"deleted": "success"},
            route=Route("DELETE", "/comments/{comment_id}"),
        ),
    ),
    composites=(
        CompositeOperation(
            "total_engagement", _total_engagement,
            required=("media_id",),
            route=Route("GET", "/media/{media_id}/engagement"),
        ),
        CompositeOperation(
            "engagement_rate", _engagement_rate,
            required=("media_id", "follower_count"),
            route=Route("GET", "/media/{media_id}/engagement-rate"),
        ),
        CompositeOperation(
            "batch_media_insights", _batch_media_insights,
            required=("media_ids",),
            route=Route("POST", "/media/insights/batch"),
        ),
        CompositeOperation(
            "bulk_delete_comments", _bulk_delete_comments,
            required=("comment_ids",),
            route=Route("POST", "/comments/bulk-delete"),
        ),
    ),
)

"""LinkedIn profile and UGC posts.

Posting needs the member's person URN, resolved once per client instance
from ``/userinfo`` and memoized.
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
    SwitchboardError,
    ok,
)
from switchboard.core.endpoints import bearer

if TYPE_CHECKING:
    from switchboard.core.client import ApiClient


async def person_urn(client: ApiClient) -> str:
    async def _lookup() -> str:
        info = await client.fetch("get_userinfo")
        sub = info.get("sub") if isinstance(info, dict) else None
        if not sub:
            raise SwitchboardError("LinkedIn userinfo did not include a member id")
        return f"urn:li:person:{sub}"

    return await client.memoize("person_urn", _lookup)


def _share_body(author: str, text: str, visibility: str, link: str | None) -> dict[str, Any]:
    content: dict[str, Any] = {
        "shareCommentary": {"text": text},
        "shareMediaCategory": "ARTICLE" if link else "NONE",
    }
    if link:
        content["media"] = [{"status": "READY", "originalUrl": link}]
    return {
        "author": author,
        "lifecycleState": "PUBLISHED",
        "specificContent": {"com.linkedin.ugc.ShareContent": content},
        "visibility": {"com.linkedin.ugc.MemberNetworkVisibility": visibility},
    }


async def _share(client: ApiClient, args: dict[str, Any]) -> dict[str, Any]:
    author = await person_urn(client)
    body = _share_body(
        author,
        args["text"],
        args.get("visibility") or "PUBLIC",
        args.get("link"),
    )
    post = await client.fetch("create_ugc_post", {"post": body})
    post_id = post.get("id") if isinstance(post, dict) else None
    return ok(post_id=post_id, author=author)


LINKEDIN = Integration(
    slug="linkedin",
    title="LinkedIn",
    base_url="https://api.linkedin.com/v2",
    credentials=(CredentialField("access_token", env="LINKEDIN_ACCESS_TOKEN"),),
    auth=bearer("access_token"),
    headers={"X-Restli-Protocol-Version": "2.0.0"},
    endpoints=(
        Endpoint(
            "get_userinfo", "GET", "/userinfo",
            fields={"profile": None},
            route=Route("GET", "/me"),
        ),
        Endpoint(
            "create_ugc_post", "POST", "/ugcPosts",
            params=(Param("post", required=True, spread=True),),
            fields={"post_id": "id"},
            route=Route("POST", "/ugc-posts"),
        ),
        Endpoint(
            "delete_ugc_post", "DELETE", "/ugcPosts/{post_urn}",
            transform=lambda data, args: {"deleted": True, "post_urn": args["post_urn"]},
            route=Route("DELETE", "/ugc-posts/{post_urn}"),
        ),
    ),
    composites=(
        CompositeOperation(
            "share", _share,
            required=("text",),
            route=Route("POST", "/share"),
        ),
    ),
)

"""Notion: pages, databases, blocks and search."""

from __future__ import annotations

from switchboard.core import CredentialField, Endpoint, Integration, Param, Route
from switchboard.core.endpoints import bearer

NOTION = Integration(
    slug="notion",
    title="Notion",
    base_url="https://api.notion.com/v1",
    credentials=(CredentialField("token", env="NOTION_TOKEN"),),
    auth=bearer("token"),
    headers={"Notion-Version": "2022-06-28"},
    endpoints=(
        Endpoint(
            "search", "POST", "/search",
            params=(
                Param("query"),
                Param("filter"),
                Param("sort"),
                Param("start_cursor"),
                Param("page_size"),
            ),
            fields={"results": "results", "next_cursor": "next_cursor", "has_more": "has_more"},
            route=Route("POST", "/search"),
        ),
        Endpoint(
            "get_page", "GET", "/pages/{page_id}",
            fields={"page": None},
            route=Route("GET", "/pages/{page_id}"),
        ),
        Endpoint(
            "create_page", "POST", "/pages",
            params=(
                Param("parent", required=True),
                Param("properties", required=True),
                Param("children"),
                Param("icon"),
                Param("cover"),
            ),
            fields={"page": None},
            route=Route("POST", "/pages"),
        ),
        Endpoint(
            "update_page", "PATCH", "/pages/{page_id}",
            params=(Param("properties"), Param("archived"), Param("icon"), Param("cover")),
            fields={"page": None},
            route=Route("PATCH", "/pages/{page_id}"),
        ),
        Endpoint(
            "get_database", "GET", "/databases/{database_id}",
            fields={"database": None},
            route=Route("GET", "/databases/{database_id}"),
        ),
        Endpoint(
            "query_database", "POST", "/databases/{database_id}/query",
            params=(
                Param("filter"),
                Param("sorts"),
                Param("start_cursor"),
                Param("page_size"),
            ),
            fields={"results": "results", "next_cursor": "next_cursor", "has_more": "has_more"},
            route=Route("POST", "/databases/{database_id}/query"),
        ),
        Endpoint(
            "get_block_children", "GET", "/blocks/{block_id}/children",
            params=(Param("start_cursor", "query"), Param("page_size", "query")),
            fields={"blocks": "results", "next_cursor": "next_cursor", "has_more": "has_more"},
            route=Route("GET", "/blocks/{block_id}/children"),
        ),
        Endpoint(
            "append_block_children", "PATCH", "/blocks/{block_id}/children",
            params=(Param("children", required=True),),
            fields={"blocks": "results"},
            route=Route("PATCH", "/blocks/{block_id}/children"),
        ),
    ),
)

"""Trello boards, lists and cards.

Trello authenticates with ``key`` and ``token`` query parameters. Its routes
are gateway-protected.
"""

from __future__ import annotations

from switchboard.core import CredentialField, Endpoint, Integration, Param, Route
from switchboard.core.endpoints import comma_join, query

TRELLO = Integration(
    slug="trello",
    title="Trello",
    base_url="https://api.trello.com/1",
    credentials=(
        CredentialField("api_key", env="TRELLO_API_KEY"),
        CredentialField("token", env="TRELLO_TOKEN"),
    ),
    auth=query(key="api_key", token="token"),
    protected=True,
    endpoints=(
        Endpoint(
            "list_boards", "GET", "/members/me/boards",
            params=(Param("filter", "query", default="open"),),
            fields={"boards": None},
            route=Route("GET", "/boards/list"),
        ),
        Endpoint(
            "create_board", "POST", "/boards",
            params=(
                Param("name", "query", required=True),
                Param("desc", "query"),
                Param("default_lists", "query", alias="defaultLists"),
                Param("id_organization", "query", alias="idOrganization"),
            ),
            fields={"board": None},
            route=Route("POST", "/boards/create"),
        ),
        Endpoint(
            "get_board", "GET", "/boards/{board_id}",
            params=(Param("fields", "query", serialize=comma_join),),
            fields={"board": None},
            route=Route("GET", "/boards/{board_id}"),
        ),
        Endpoint(
            "update_board", "PUT", "/boards/{board_id}",
            params=(
                Param("name", "query"),
                Param("desc", "query"),
                Param("closed", "query"),
            ),
            fields={"board": None},
            route=Route("PUT", "/boards/{board_id}"),
        ),
        Endpoint(
            "delete_board", "DELETE", "/boards/{board_id}",
            transform=lambda data, args: {"deleted": True, "board_id": args["board_id"]},
            route=Route("DELETE", "/boards/{board_id}"),
        ),
        Endpoint(
            "get_lists", "GET", "/boards/{board_id}/lists",
            params=(Param("filter", "query", default="open"),),
            fields={"lists": None},
            route=Route("GET", "/boards/{board_id}/lists"),
        ),
        Endpoint(
            "create_list", "POST", "/lists",
            params=(
                Param("name", "query", required=True),
                Param("board_id", "query", required=True, alias="idBoard"),
                Param("pos", "query"),
            ),
            fields={"list": None},
            route=Route("POST", "/lists/create"),
        ),
        Endpoint(
            "get_cards", "GET", "/lists/{list_id}/cards",
            fields={"cards": None},
            route=Route("GET", "/lists/{list_id}/cards"),
        ),
        Endpoint(
            "create_card", "POST", "/cards",
            params=(
                Param("list_id", "query", required=True, alias="idList"),
                Param("name", "query"),
                Param("desc", "query"),
                Param("due", "query"),
                Param("pos", "query"),
                Param("member_ids", "query", alias="idMembers", serialize=comma_join),
                Param("label_ids", "query", alias="idLabels", serialize=comma_join),
            ),
            fields={"card": None},
            route=Route("POST", "/cards/create"),
        ),
        Endpoint(
            "update_card", "PUT", "/cards/{card_id}",
            params=(
                Param("name", "query"),
                Param("desc", "query"),
                Param("due", "query"),
                Param("closed", "query"),
                Param("list_id", "query", alias="idList"),
            ),
            fields={"card": None},
            route=Route("PUT", "/cards/{card_id}"),
        ),
        Endpoint(
            "delete_card", "DELETE", "/cards/{card_id}",
            transform=lambda data, args: {"deleted": True, "card_id": args["card_id"]},
            route=Route("DELETE", "/cards/{card_id}"),
        ),
        Endpoint(
            "add_comment", "POST", "/cards/{card_id}/actions/comments",
            params=(Param("text", "query", required=True),),
            fields={"comment": None},
            route=Route("POST", "/cards/{card_id}/comments"),
        ),
        Endpoint(
            "search", "GET", "/search",
            params=(
                Param("query", "query", required=True),
                Param("model_types", "query", alias="modelTypes", serialize=comma_join),
                Param("board_ids", "query", alias="idBoards", serialize=comma_join),
            ),
            fields={"boards": "boards", "cards": "cards"},
            route=Route("GET", "/search"),
        ),
    ),
)

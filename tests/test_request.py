"""Tests for turning endpoint rows into outbound requests."""

from __future__ import annotations

import pytest

from switchboard.core import Endpoint, MissingParameterError, Param
from switchboard.core.endpoints import comma_join, json_dumps
from switchboard.core.request import build_request, flatten_form
from switchboard.integrations.instagram import INSTAGRAM
from switchboard.integrations.stripe import STRIPE
from switchboard.integrations.twilio import TWILIO

LIST_ISSUES = Endpoint(
    "list_issues", "GET", "/repos/{owner}/{repo}/issues",
    params=(
        Param("state", "query", default="open"),
        Param("labels", "query", serialize=comma_join),
        Param("per_page", "query"),
    ),
)

CREATE = Endpoint(
    "create_thing", "POST", "/things",
    params=(Param("name", required=True), Param("note"), Param("extra", spread=True)),
)


class TestBuildRequest:
    def test_path_and_query(self):
        req = build_request(LIST_ISSUES, {"owner": "octo", "repo": "hello world", "labels": ["bug", "ui"]})
        assert req.method == "GET"
        assert req.path == "/repos/octo/hello%20world/issues"
        assert req.query == {"state": "open", "labels": "bug,ui"}
        assert req.body is None

    def test_absent_optionals_are_omitted(self):
        req = build_request(CREATE, {"name": "x", "note": None})
        assert req.body == {"name": "x"}
        assert None not in req.body.values()

    def test_spread_merges_into_body(self):
        req = build_request(CREATE, {"name": "x", "extra": {"color": "red", "size": None}})
        assert req.body == {"name": "x", "color": "red"}

    def test_missing_required(self):
        with pytest.raises(MissingParameterError) as exc_info:
            build_request(CREATE, {})
        assert exc_info.value.names == ["name"]

    def test_missing_path_param(self):
        with pytest.raises(MissingParameterError) as exc_info:
            build_request(LIST_ISSUES, {"owner": "octo"})
        assert exc_info.value.names == ["repo"]

    def test_alias_and_form_encoding(self):
        send_sms = TWILIO.endpoint("send_sms")
        req = build_request(
            send_sms,
            {"account_sid": "AC1", "to": "+1555", "from_number": "+1444", "body": "hi"},
        )
        assert req.path == "/Accounts/AC1/Messages.json"
        assert req.body == {"To": "+1555", "From": "+1444", "Body": "hi"}
        assert "data" in req.httpx_kwargs()

    def test_post_without_args_sends_empty_body(self):
        endpoint = Endpoint("ping", "POST", "/ping", params=(Param("note"),))
        assert build_request(endpoint, {}).body == {}


class TestFlattenForm:
    def test_nested_metadata(self):
        flat = flatten_form({"email": "a@b.c", "metadata": {"plan": "pro", "seats": 3}})
        assert flat == {"email": "a@b.c", "metadata[plan]": "pro", "metadata[seats]": "3"}

    def test_lists_and_bools(self):
        flat = flatten_form({"items": [{"price": "p_1"}], "expand": ["latest_invoice"], "off": False})
        assert flat == {
            "items[0][price]": "p_1",
            "expand[0]": "latest_invoice",
            "off": "false",
        }

    def test_stripe_create_customer_is_form(self):
        req = build_request(STRIPE.endpoint("create_customer"), {"email": "a@b.c", "metadata": {"k": "v"}})
        assert req.httpx_kwargs()["data"] == {"email": "a@b.c", "metadata[k]": "v"}


class TestSerializers:
    def test_json_dumps(self):
        assert json_dumps({"a": [1, 2]}) == '{"a":[1,2]}'
        assert json_dumps([{"x": 0.5}]) == '[{"x":0.5}]'
        assert json_dumps("already-a-string") == "already-a-string"
        assert json_dumps(7) == 7

    def test_comma_join(self):
        assert comma_join(("a", "b")) == "a,b"
        assert comma_join("a,b") == "a,b"

    def test_structured_query_value_is_json_encoded(self):
        tags = [{"product_id": "p1", "x": 0.5, "y": 0.25}]
        req = build_request(INSTAGRAM.endpoint("tag_products"), {"media_id": "m1", "product_tags": tags})
        assert req.path == "/m1/product_tags"
        assert req.query == {"product_tags": '[{"product_id":"p1","x":0.5,"y":0.25}]'}
        assert req.body is None

    def test_optional_structured_value_omitted_when_absent(self):
        create = INSTAGRAM.endpoint("create_media_container")
        req = build_request(create, {"user_id": "u1", "image_url": "https://img"})
        assert "user_tags" not in req.query
        req = build_request(
            create,
            {"user_id": "u1", "image_url": "https://img", "user_tags": [{"username": "ada", "x": 0, "y": 1}]},
        )
        assert req.query["user_tags"] == '[{"username":"ada","x":0,"y":1}]'

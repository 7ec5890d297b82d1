"""Twilio messaging and voice (2010-04-01 API)."""

from __future__ import annotations

from switchboard.core import CredentialField, Endpoint, Integration, Param, Route
from switchboard.core.endpoints import basic

_ACCOUNT = "/Accounts/{account_sid}"

TWILIO = Integration(
    slug="twilio",
    title="Twilio",
    base_url="https://api.twilio.com/2010-04-01",
    credentials=(
        CredentialField("account_sid", env="TWILIO_ACCOUNT_SID"),
        CredentialField("auth_token", env="TWILIO_AUTH_TOKEN"),
    ),
    auth=basic("account_sid", "auth_token"),
    endpoints=(
        Endpoint(
            "send_sms", "POST", _ACCOUNT + "/Messages.json",
            params=(
                Param("to", required=True, alias="To"),
                Param("from_number", required=True, alias="From"),
                Param("body", required=True, alias="Body"),
                Param("media_url", alias="MediaUrl"),
                Param("status_callback", alias="StatusCallback"),
            ),
            fields={"message": None},
            encoding="form",
            route=Route("POST", "/sms/send"),
        ),
        Endpoint(
            "get_message", "GET", _ACCOUNT + "/Messages/{message_sid}.json",
            fields={"message": None},
            route=Route("GET", "/messages/{message_sid}"),
        ),
        Endpoint(
            "list_messages", "GET", _ACCOUNT + "/Messages.json",
            params=(
                Param("to", "query", alias="To"),
                Param("from_number", "query", alias="From"),
                Param("page_size", "query", alias="PageSize", default=20),
            ),
            fields={"messages": "messages", "next_page_uri": "next_page_uri"},
            route=Route("GET", "/messages"),
        ),
        Endpoint(
            "make_call", "POST", _ACCOUNT + "/Calls.json",
            params=(
                Param("to", required=True, alias="To"),
                Param("from_number", required=True, alias="From"),
                Param("url", alias="Url"),
                Param("twiml", alias="Twiml"),
                Param("status_callback", alias="StatusCallback"),
            ),
            fields={"call": None},
            encoding="form",
            route=Route("POST", "/calls"),
        ),
        Endpoint(
            "get_call", "GET", _ACCOUNT + "/Calls/{call_sid}.json",
            fields={"call": None},
            route=Route("GET", "/calls/{call_sid}"),
        ),
        Endpoint(
            "get_account", "GET", _ACCOUNT + ".json",
            fields={"account": None},
            route=Route("GET", "/account"),
        ),
    ),
)

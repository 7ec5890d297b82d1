"""SendGrid v3 mail send, templates and marketing contacts."""

from __future__ import annotations

from typing import Any, Mapping

from switchboard.core import CredentialField, Endpoint, Integration, Param, Route
from switchboard.core.endpoints import bearer


def _as_recipients(value: Any) -> list[dict[str, str]]:
    if isinstance(value, str):
        return [{"email": value}]
    return [{"email": v} if isinstance(v, str) else v for v in value]


def _as_sender(value: Any) -> Any:
    return {"email": value} if isinstance(value, str) else value


def _personalizations(value: Any) -> list[dict[str, Any]]:
    return [{"to": _as_recipients(value)}]


def _content(value: Any) -> Any:
    """A bare string is sent as a single text/html part."""
    if isinstance(value, str):
        return [{"type": "text/html", "value": value}]
    return value


def _accepted(data: Any, args: Mapping[str, Any]) -> dict[str, Any]:
    # Mail send answers 202 with an empty body.
    return {"sent": True, "to": args["to"]}


SENDGRID = Integration(
    slug="sendgrid",
    title="SendGrid",
    base_url="https://api.sendgrid.com/v3",
    credentials=(CredentialField("api_key", env="SENDGRID_API_KEY"),),
    auth=bearer("api_key"),
    endpoints=(
        Endpoint(
            "send_email", "POST", "/mail/send",
            params=(
                Param("to", required=True, alias="personalizations", serialize=_personalizations),
                Param("from_email", required=True, alias="from", serialize=_as_sender),
                Param("subject", required=True),
                Param("content", required=True, serialize=_content),
                Param("reply_to", serialize=_as_sender),
                Param("template_id"),
                Param("categories"),
                Param("send_at"),
            ),
            transform=_accepted,
            route=Route("POST", "/send"),
        ),
        Endpoint(
            "list_templates", "GET", "/templates",
            params=(
                Param("generations", "query", default="dynamic"),
                Param("page_size", "query", default=50),
            ),
            fields={"templates": "result"},
            route=Route("GET", "/templates"),
        ),
        Endpoint(
            "get_template", "GET", "/templates/{template_id}",
            fields={"template": None},
            route=Route("GET", "/templates/{template_id}"),
        ),
        Endpoint(
            "add_contacts", "PUT", "/marketing/contacts",
            params=(Param("contacts", required=True), Param("list_ids")),
            fields={"job_id": "job_id"},
            route=Route("PUT", "/contacts"),
        ),
        Endpoint(
            "search_contacts", "POST", "/marketing/contacts/search",
            params=(Param("query", required=True),),
            fields={"contacts": "result", "contact_count": "contact_count"},
            route=Route("POST", "/contacts/search"),
        ),
        Endpoint(
            "get_stats", "GET", "/stats",
            params=(
                Param("start_date", "query", required=True),
                Param("end_date", "query"),
                Param("aggregated_by", "query"),
            ),
            fields={"stats": None},
            route=Route("GET", "/stats"),
        ),
    ),
)

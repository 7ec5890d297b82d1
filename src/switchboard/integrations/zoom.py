"""Zoom meetings, users and recordings (API v2)."""

from __future__ import annotations

from switchboard.core import CredentialField, Endpoint, Integration, Param, Route
from switchboard.core.endpoints import bearer

ZOOM = Integration(
    slug="zoom",
    title="Zoom",
    base_url="https://api.zoom.us/v2",
    credentials=(CredentialField("access_token", env="ZOOM_ACCESS_TOKEN"),),
    auth=bearer("access_token"),
    endpoints=(
        Endpoint(
            "get_user", "GET", "/users/{user_id}",
            fields={"user": None},
            route=Route("GET", "/users/{user_id}"),
        ),
        Endpoint(
            "list_meetings", "GET", "/users/{user_id}/meetings",
            params=(
                Param("type", "query", default="scheduled"),
                Param("page_size", "query", default=30),
                Param("next_page_token", "query"),
            ),
            fields={"meetings": "meetings", "next_page_token": "next_page_token"},
            route=Route("GET", "/users/{user_id}/meetings"),
        ),
        Endpoint(
            "create_meeting", "POST", "/users/{user_id}/meetings",
            params=(
                Param("topic", required=True),
                Param("type", default=2),
                Param("start_time"),
                Param("duration"),
                Param("timezone"),
                Param("password"),
                Param("agenda"),
                Param("settings"),
            ),
            fields={"meeting": None},
            route=Route("POST", "/users/{user_id}/meetings"),
        ),
        Endpoint(
            "get_meeting", "GET", "/meetings/{meeting_id}",
            fields={"meeting": None},
            route=Route("GET", "/meetings/{meeting_id}"),
        ),
        Endpoint(
            "update_meeting", "PATCH", "/meetings/{meeting_id}",
            params=(
                Param("topic"),
                Param("start_time"),
                Param("duration"),
                Param("timezone"),
                Param("agenda"),
                Param("settings"),
            ),
            transform=lambda data, args: {"updated": True, "meeting_id": args["meeting_id"]},
            route=Route("PATCH", "/meetings/{meeting_id}"),
        ),
        Endpoint(
            "delete_meeting", "DELETE", "/meetings/{meeting_id}",
            params=(Param("schedule_for_reminder", "query"),),
            transform=lambda data, args: {"deleted": True, "meeting_id": args["meeting_id"]},
            route=Route("DELETE", "/meetings/{meeting_id}"),
        ),
        Endpoint(
            "list_recordings", "GET", "/users/{user_id}/recordings",
            params=(
                Param("from_date", "query", alias="from"),
                Param("to_date", "query", alias="to"),
                Param("page_size", "query", default=30),
            ),
            fields={"recordings": "meetings", "total_records": "total_records"},
            route=Route("GET", "/users/{user_id}/recordings"),
        ),
    ),
)

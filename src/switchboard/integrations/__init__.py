"""Integration catalog: one declarative table per upstream service."""

from __future__ import annotations

from switchboard.core import Integration
from switchboard.integrations.anthropic import ANTHROPIC
from switchboard.integrations.github import GITHUB
from switchboard.integrations.instagram import INSTAGRAM
from switchboard.integrations.linkedin import LINKEDIN
from switchboard.integrations.notion import NOTION
from switchboard.integrations.openai import OPENAI
from switchboard.integrations.redis_cache import REDIS_CACHE, RedisCacheClient
from switchboard.integrations.sendgrid import SENDGRID
from switchboard.integrations.slack import SLACK
from switchboard.integrations.stripe import STRIPE
from switchboard.integrations.trello import TRELLO
from switchboard.integrations.twilio import TWILIO
from switchboard.integrations.zoom import ZOOM

INTEGRATIONS: dict[str, Integration] = {
    i.slug: i
    for i in (
        ANTHROPIC,
        GITHUB,
        INSTAGRAM,
        LINKEDIN,
        NOTION,
        OPENAI,
        REDIS_CACHE,
        SENDGRID,
        SLACK,
        STRIPE,
        TRELLO,
        TWILIO,
        ZOOM,
    )
}


def get_integration(slug: str) -> Integration | None:
    return INTEGRATIONS.get(slug)


def list_integrations() -> list[Integration]:
    return [INTEGRATIONS[slug] for slug in sorted(INTEGRATIONS)]


__all__ = [
    "INTEGRATIONS",
    "RedisCacheClient",
    "get_integration",
    "list_integrations",
]

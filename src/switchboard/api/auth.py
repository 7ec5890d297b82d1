"""Gateway bearer-token check for protected integrations."""

from __future__ import annotations

import secrets

import structlog
from fastapi import Header, HTTPException

from switchboard.config import settings

logger = structlog.get_logger()


async def require_gateway_token(authorization: str | None = Header(default=None)) -> None:
    if not settings.gateway_token:
        raise HTTPException(status_code=503, detail="Gateway token not configured")

    scheme, _, token = (authorization or "").partition(" ")
    if scheme.lower() != "bearer" or not secrets.compare_digest(
        token.strip().encode(), settings.gateway_token.encode()
    ):
        logger.warning("gateway_auth_rejected", has_header=authorization is not None)
        raise HTTPException(status_code=401, detail="Invalid or missing gateway token")

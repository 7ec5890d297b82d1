"""Switchboard application entrypoint.

Mounts one router per integration under ``/api/<slug>``, plus ``/health``
and the ``/api/integrations`` catalog. Run with::

    uvicorn switchboard.app:api
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any

import httpx
import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from switchboard import __version__
from switchboard.api import ClientProvider, build_router, error_response
from switchboard.config import settings
from switchboard.core import (
    MissingCredentialError,
    MissingParameterError,
    SwitchboardError,
    UnknownOperationError,
)
from switchboard.integrations import list_integrations

logger = structlog.get_logger()


def configure_logging() -> None:
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.JSONRenderer()
            if settings.env == "production"
            else structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.getLevelNamesMapping().get(settings.log_level.upper(), logging.INFO)
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
    )


def describe_catalog() -> list[dict[str, Any]]:
    """Slug, title and inbound routes of every integration."""
    catalog = []
    for integration in list_integrations():
        operations = []
        for op in integration.operations():
            route = op.inbound_route()
            operations.append({
                "name": op.name,
                "method": route.method,
                "path": f"/api/{integration.slug}{route.path}",
                "streaming": getattr(op, "stream", None) is not None,
            })
        catalog.append({
            "slug": integration.slug,
            "title": integration.title,
            "protected": integration.protected,
            "credentials": [c.name for c in integration.credentials],
            "operations": operations,
        })
    return catalog


def create_app(
    transport: httpx.AsyncBaseTransport | None = None,
    pooled: bool | None = None,
) -> FastAPI:
    """Build the gateway. *transport* replaces the network (tests)."""
    configure_logging()
    clients = ClientProvider(pooled=pooled, transport=transport)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan manager."""
        logger.info("app_starting", env=settings.env, integrations=len(list_integrations()))
        yield
        logger.info("app_shutting_down")
        await clients.aclose()

    app = FastAPI(
        title="Switchboard",
        version=__version__,
        description="Uniform REST gateway over third-party SaaS APIs",
        lifespan=lifespan,
    )
    app.state.clients = clients

    @app.get("/health")
    async def health() -> dict[str, Any]:
        """Health check endpoint."""
        return {"status": "ok", "integrations": len(list_integrations())}

    @app.get("/api/integrations")
    async def integrations() -> dict[str, Any]:
        return {"success": True, "integrations": describe_catalog()}

    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return error_response(exc.status_code, str(exc.detail))

    @app.exception_handler(SwitchboardError)
    async def switchboard_error(request: Request, exc: SwitchboardError) -> JSONResponse:
        if isinstance(exc, MissingCredentialError | MissingParameterError):
            status = 400
        elif isinstance(exc, UnknownOperationError):
            status = 404
        else:
            status = 500
        logger.warning("request_failed", path=request.url.path, status=status, error=str(exc))
        return error_response(status, str(exc))

    for integration in list_integrations():
        app.include_router(build_router(integration, clients))

    return app


api = create_app()


def main() -> None:
    """Serve the gateway with uvicorn."""
    import uvicorn

    logger.info("starting_switchboard", host=settings.host, port=settings.port)
    uvicorn.run(
        "switchboard.app:api",
        host=settings.host,
        port=settings.port,
        reload=(settings.env == "development"),
    )


if __name__ == "__main__":
    main()

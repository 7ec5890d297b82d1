"""Route factory: one FastAPI router per integration.

Every operation in an integration's table becomes one route. A handler
gathers arguments (query string, then the JSON body, then path params),
resolves credentials, checks required parameters, and answers with the
client's envelope. Streaming endpoints answer with Server-Sent Events: one
``{"delta": ...}`` event per chunk, then the final envelope.
"""

from __future__ import annotations

import asyncio
import json
import os
from typing import Any, AsyncIterator, Mapping

import structlog
from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse, Response, StreamingResponse

from switchboard.api.auth import require_gateway_token
from switchboard.api.clients import ClientProvider
from switchboard.config import settings
from switchboard.core import (
    CompositeOperation,
    Endpoint,
    Envelope,
    Integration,
    MissingCredentialError,
    MissingParameterError,
    describe_error,
    fail,
    resolve_credentials,
)

logger = structlog.get_logger()

Operation = Endpoint | CompositeOperation


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(fail(message), status_code=status_code)


async def _read_body(request: Request) -> dict[str, Any] | None:
    """JSON object body, ``{}`` when empty, ``None`` when not an object."""
    raw = await request.body()
    if not raw.strip():
        return {}
    try:
        body = json.loads(raw)
    except ValueError:
        return None
    return body if isinstance(body, dict) else None


def _sse_event(payload: Mapping[str, Any]) -> str:
    return f"data: {json.dumps(payload)}\n\n"


def collect_arguments(
    integration: Integration,
    query: Mapping[str, Any],
    path: Mapping[str, Any],
    body: Mapping[str, Any],
) -> tuple[dict[str, Any], dict[str, str]]:
    """Split a request into (operation args, explicit credentials).

    Later sources win: query < body < path, so the resource named in the URL
    is the one acted on. Credential names found in the query string or body
    are pulled out so they never reach the upstream request; path params are
    left alone since some paths embed an account id.
    """
    credential_names = integration.credential_names()
    explicit: dict[str, str] = {}
    args: dict[str, Any] = {}
    for source, may_carry_secrets in ((query, True), (body, True), (path, False)):
        for key, value in source.items():
            if may_carry_secrets and key in credential_names:
                if value not in (None, ""):
                    explicit[key] = str(value)
                continue
            args[key] = value
    return args, explicit


def build_router(integration: Integration, clients: ClientProvider) -> APIRouter:
    """Mount every operation of *integration* under ``/api/<slug>``."""
    dependencies = [Depends(require_gateway_token)] if integration.protected else []
    router = APIRouter(
        prefix=f"/api/{integration.slug}",
        tags=[integration.slug],
        dependencies=dependencies,
    )
    for operation in integration.operations():
        route = operation.inbound_route()
        router.add_api_route(
            route.path,
            _make_handler(integration, operation, clients),
            methods=[route.method],
            name=f"{integration.slug}.{operation.name}",
            summary=operation.description or operation.name.replace("_", " "),
            response_model=None,
            responses={200: {"model": Envelope}, 400: {"model": Envelope}},
        )
    return router


def _make_handler(integration: Integration, operation: Operation, clients: ClientProvider):
    streams = isinstance(operation, Endpoint) and operation.stream is not None

    async def handler(request: Request) -> Response:
        body = await _read_body(request)
        if body is None:
            return error_response(400, "Request body must be a JSON object")

        args, explicit = collect_arguments(
            integration, dict(request.query_params), request.path_params, body,
        )
        try:
            credentials = resolve_credentials(
                integration.slug,
                integration.credentials,
                explicit=explicit,
                headers=request.headers,
                environ=os.environ,
                stored=settings.stored_credentials(integration.slug),
            )
        except MissingCredentialError as e:
            return error_response(400, str(e))

        args = operation.bind_credentials(args, credentials)
        missing = operation.missing(args)
        if missing:
            return error_response(400, str(MissingParameterError(missing)))

        if streams:
            return StreamingResponse(
                _stream_events(integration, operation, clients, credentials, args),
                media_type="text/event-stream",
                headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"},
            )

        try:
            async with clients.open(integration, credentials) as client:
                result = await client.call(operation.name, args)
        except Exception as e:
            logger.error(
                "route_failed",
                integration=integration.slug,
                operation=operation.name,
                error=describe_error(e),
            )
            return error_response(500, describe_error(e))
        return JSONResponse(result)

    handler.__name__ = f"{integration.slug.replace('-', '_')}_{operation.name}"
    return handler


async def _stream_events(
    integration: Integration,
    operation: Operation,
    clients: ClientProvider,
    credentials: Mapping[str, str],
    args: dict[str, Any],
) -> AsyncIterator[str]:
    queue: asyncio.Queue[str | None] = asyncio.Queue()

    async def _run() -> None:
        try:
            async with clients.open(integration, credentials) as client:
                result = await client.stream(
                    operation.name,
                    args,
                    on_chunk=lambda delta: queue.put_nowait(_sse_event({"delta": delta})),
                )
        except Exception as e:
            logger.error(
                "route_stream_failed",
                integration=integration.slug,
                operation=operation.name,
                error=describe_error(e),
            )
            result = fail(describe_error(e))
        queue.put_nowait(_sse_event(result))
        queue.put_nowait(None)

    task = asyncio.create_task(_run())
    try:
        while True:
            event = await queue.get()
            if event is None:
                break
            yield event
    finally:
        if not task.done():
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                logger.info(
                    "route_stream_cancelled",
                    integration=integration.slug,
                    operation=operation.name,
                )

"""Generic, table-driven API client.

``ApiClient`` interprets an ``Integration``'s endpoint table. Every public
operation goes through ``call`` (or ``stream`` for SSE endpoints), and both
return a result envelope: failures of any kind come back as
``{"success": False, "error": ...}``, never as raised exceptions.
"""

from __future__ import annotations

import time
from types import TracebackType
from typing import Any, Awaitable, Callable, Mapping, Self, Sequence

import certifi
import httpx
import structlog
from tenacity import (
    retry,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from switchboard.config import settings
from switchboard.core.batch import run_batch
from switchboard.core.endpoints import Endpoint, Integration
from switchboard.core.envelope import fail, ok
from switchboard.core.errors import (
    MissingParameterError,
    SwitchboardError,
    UnknownOperationError,
    UpstreamError,
    describe_error,
)
from switchboard.core.request import RequestDescriptor, build_request
from switchboard.core.streaming import ChunkCallback, consume_sse

logger = structlog.get_logger()

_RETRYABLE_STATUS_CODES = frozenset({429, 500, 502, 503, 504})


def _is_retryable(exc: BaseException) -> bool:
    if isinstance(exc, UpstreamError) and exc.status_code in _RETRYABLE_STATUS_CODES:
        return True
    if isinstance(exc, httpx.ReadTimeout | httpx.ConnectTimeout | httpx.PoolTimeout):
        return True
    return False


def build_timeout() -> httpx.Timeout:
    return httpx.Timeout(settings.http_timeout_s, connect=settings.http_connect_timeout_s)


def build_http_client(
    integration: Integration,
    credentials: Mapping[str, str],
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """Pre-configured client: base URL, static headers and auth."""
    auth = integration.auth(credentials)
    kwargs: dict[str, Any] = {
        "base_url": integration.base_url,
        "headers": {
            "User-Agent": "switchboard/0.1",
            **integration.headers,
            **auth.headers,
        },
        "params": auth.params,
        "timeout": build_timeout(),
        "limits": httpx.Limits(
            max_connections=settings.http_max_connections,
            max_keepalive_connections=settings.http_max_keepalive,
        ),
        "follow_redirects": True,
    }
    if auth.basic is not None:
        kwargs["auth"] = httpx.BasicAuth(*auth.basic)
    if transport is not None:
        kwargs["transport"] = transport
    else:
        kwargs["verify"] = certifi.where()
    return httpx.AsyncClient(**kwargs)


def pick(data: Any, path: str | None) -> Any:
    """Follow a dotted path (``"data.0.id"``) into decoded JSON."""
    if path is None or path == "":
        return data
    current = data
    for part in path.split("."):
        if isinstance(current, Mapping):
            current = current.get(part)
        elif isinstance(current, list) and part.lstrip("-").isdigit():
            index = int(part)
            current = current[index] if -len(current) <= index < len(current) else None
        else:
            return None
        if current is None:
            return None
    return current


def _decode(response: httpx.Response) -> Any:
    if response.status_code == 204 or not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text


class ApiClient:
    """Async client for one integration and one credential bundle.

    When *http* is given the client borrows it (pooled connection reuse) and
    ``aclose`` leaves it open; otherwise it builds and owns its own.
    """

    def __init__(
        self,
        integration: Integration,
        credentials: Mapping[str, str],
        http: httpx.AsyncClient | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        retry_attempts: int | None = None,
        batch_fail_fast: bool | None = None,
    ) -> None:
        self.integration = integration
        self.credentials = dict(credentials)
        self._owns_http = http is None
        self._http = http or build_http_client(integration, self.credentials, transport)
        self._retry_attempts = max(1, retry_attempts or settings.retry_attempts)
        self._batch_fail_fast = (
            settings.batch_fail_fast if batch_fail_fast is None else batch_fail_fast
        )
        self._memo: dict[str, Any] = {}

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_http:
            await self._http.aclose()

    # ── Public operations ────────────────────────────────────────────

    async def call(
        self,
        operation: str,
        args: Mapping[str, Any] | None = None,
        **kwargs: Any,
    ) -> dict[str, Any]:
        """Run one operation and return its envelope."""
        merged = {**(args or {}), **kwargs}
        try:
            composite = self.integration.composite(operation)
            if composite is not None:
                missing = composite.missing(merged)
                if missing:
                    raise MissingParameterError(missing)
                return await composite.handler(self, merged)

            endpoint = self._endpoint(operation)
            bound = endpoint.bind_credentials(merged, self.credentials)
            data = await self._send(endpoint, build_request(endpoint, bound))
            return self._shape(endpoint, data, bound)
        except Exception as e:
            logger.warning(
                "upstream_call_failed",
                integration=self.integration.slug,
                operation=operation,
                status=getattr(e, "status_code", None),
                error=describe_error(e),
            )
            return fail(describe_error(e))

    async def stream(
        self,
        operation: str,
        args: Mapping[str, Any] | None = None,
        on_chunk: ChunkCallback | None = None,
        **kwargs: Any,
    ) -> dict[str, Any]:
        """Run a streaming operation; resolves to ``{"success", "content"}``."""
        merged = {**(args or {}), **kwargs}
        try:
            endpoint = self._endpoint(operation)
            if endpoint.stream is None:
                raise SwitchboardError(
                    f"{self.integration.slug} operation {operation} does not stream"
                )
            descriptor = build_request(endpoint, endpoint.bind_credentials(merged, self.credentials))
            descriptor.body = {**(descriptor.body or {}), "stream": True}

            started = time.monotonic()
            async with self._http.stream(
                descriptor.method, descriptor.path, **descriptor.httpx_kwargs()
            ) as response:
                if response.is_error:
                    await response.aread()
                    raise UpstreamError.from_response(response)
                content = await consume_sse(
                    response.aiter_lines(), endpoint.stream.extract, on_chunk,
                )
            logger.info(
                "upstream_stream_complete",
                integration=self.integration.slug,
                operation=operation,
                chars=len(content),
                elapsed_ms=round((time.monotonic() - started) * 1000),
            )
            return ok(content=content)
        except Exception as e:
            logger.warning(
                "upstream_stream_failed",
                integration=self.integration.slug,
                operation=operation,
                error=describe_error(e),
            )
            return fail(describe_error(e))

    # ── Helpers for composite operations ─────────────────────────────

    async def fetch(self, operation: str, args: Mapping[str, Any] | None = None) -> Any:
        """Run an endpoint and return the raw upstream JSON. Raises on failure."""
        endpoint = self._endpoint(operation)
        bound = endpoint.bind_credentials(args or {}, self.credentials)
        return await self._send(endpoint, build_request(endpoint, bound))

    async def memoize(self, key: str, factory: Callable[[], Awaitable[Any]]) -> Any:
        """Instance-scoped lazy value; computed on first use only."""
        if key not in self._memo:
            self._memo[key] = await factory()
        return self._memo[key]

    async def batch(
        self,
        operation: str,
        items: Sequence[Mapping[str, Any]],
        fail_fast: bool | None = None,
    ) -> dict[str, Any]:
        """Run *operation* once per argument set, concurrently."""
        strategy = self._batch_fail_fast if fail_fast is None else fail_fast
        return await run_batch([self.call(operation, item) for item in items], fail_fast=strategy)

    # ── Internals ────────────────────────────────────────────────────

    def _endpoint(self, operation: str) -> Endpoint:
        endpoint = self.integration.endpoint(operation)
        if endpoint is None:
            raise UnknownOperationError(self.integration.slug, operation)
        return endpoint

    async def _send(self, endpoint: Endpoint, descriptor: RequestDescriptor) -> Any:
        @retry(
            retry=retry_if_exception(_is_retryable),
            stop=stop_after_attempt(self._retry_attempts),
            wait=wait_exponential(multiplier=0.5, min=0.5, max=8),
            reraise=True,
        )
        async def _do_request() -> Any:
            started = time.monotonic()
            response = await self._http.request(
                descriptor.method, descriptor.path, **descriptor.httpx_kwargs()
            )
            logger.debug(
                "upstream_call",
                integration=self.integration.slug,
                operation=endpoint.name,
                method=descriptor.method,
                path=descriptor.path,
                status=response.status_code,
                elapsed_ms=round((time.monotonic() - started) * 1000),
            )
            if response.is_error:
                raise UpstreamError.from_response(response)
            return _decode(response)

        return await _do_request()

    def _shape(self, endpoint: Endpoint, data: Any, args: Mapping[str, Any]) -> dict[str, Any]:
        if endpoint.transform is not None:
            return ok(**endpoint.transform(data, args))
        fields = endpoint.fields or {"data": None}
        return ok(**{name: pick(data, path) for name, path in fields.items()})

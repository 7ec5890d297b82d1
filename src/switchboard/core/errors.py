"""Exception types for the gateway and the single exception -> message helper.

Client methods never raise these to callers: ``ApiClient`` converts every
failure into a ``{"success": False, "error": ...}`` envelope via
``describe_error``. The route layer raises and maps them to HTTP statuses.
"""

from __future__ import annotations

import json
from typing import Any, Iterable

import httpx


class SwitchboardError(Exception):
    """Base class for all gateway errors."""


class UpstreamError(SwitchboardError):
    """Upstream API answered with a non-2xx status."""

    def __init__(self, message: str, status_code: int, body: Any = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body

    @classmethod
    def from_response(cls, response: httpx.Response) -> UpstreamError:
        body = _decode_body(response)
        message = upstream_message(body) or f"HTTP {response.status_code}"
        return cls(message, status_code=response.status_code, body=body)


class MissingParameterError(SwitchboardError):
    """Required call arguments were not supplied."""

    def __init__(self, names: Iterable[str]) -> None:
        self.names = sorted(names)
        super().__init__(f"Missing required parameter(s): {', '.join(self.names)}")


class MissingCredentialError(SwitchboardError):
    """Required secrets for an integration could not be resolved."""

    def __init__(self, integration: str, names: Iterable[str]) -> None:
        self.integration = integration
        self.names = sorted(names)
        super().__init__(
            f"Missing {integration} credential(s): {', '.join(self.names)}"
        )


class UnknownOperationError(SwitchboardError):
    def __init__(self, integration: str, operation: str) -> None:
        self.integration = integration
        self.operation = operation
        super().__init__(f"Unknown {integration} operation: {operation}")


class BatchItemError(SwitchboardError):
    """One item of a fail-fast batch failed."""

    def __init__(self, index: int, error: str) -> None:
        self.index = index
        self.error = error
        super().__init__(f"item {index}: {error}")


def _decode_body(response: httpx.Response) -> Any:
    try:
        return response.json()
    except (ValueError, json.JSONDecodeError):
        text = response.text
        return text[:1000] if text else None


def upstream_message(body: Any) -> str | None:
    """Pull a human-readable message out of an upstream error body.

    Checks, in order: ``error.message``, ``message``, ``error`` (string),
    ``errors[0].message``, ``detail``. Plain-text bodies are returned as-is.
    """
    if body is None:
        return None
    if isinstance(body, str):
        return body.strip() or None
    if not isinstance(body, dict):
        return None

    error = body.get("error")
    if isinstance(error, dict) and error.get("message"):
        return str(error["message"])
    if body.get("message"):
        return str(body["message"])
    if isinstance(error, str) and error:
        return error
    errors = body.get("errors")
    if isinstance(errors, list) and errors:
        first = errors[0]
        if isinstance(first, dict) and first.get("message"):
            return str(first["message"])
        if isinstance(first, str):
            return first
    if body.get("detail"):
        return str(body["detail"])
    return None


def describe_error(exc: BaseException) -> str:
    """Return a non-empty error string for any exception."""
    if isinstance(exc, httpx.TimeoutException):
        return f"Upstream request timed out: {exc.__class__.__name__}"
    if isinstance(exc, httpx.RequestError):
        try:
            url = str(exc.request.url)
        except RuntimeError:
            url = "upstream"
        return f"Request to {url} failed: {exc}" if str(exc) else f"Request to {url} failed"
    message = str(exc)
    return message or exc.__class__.__name__

"""Generic client layer: endpoint tables, dispatcher, envelope and helpers."""

from switchboard.core.client import ApiClient, build_http_client, pick
from switchboard.core.credentials import CredentialField, resolve_credentials
from switchboard.core.endpoints import (
    Auth,
    CompositeOperation,
    Endpoint,
    Integration,
    Param,
    Route,
    StreamSpec,
)
from switchboard.core.envelope import Envelope, fail, is_success, ok
from switchboard.core.errors import (
    MissingCredentialError,
    MissingParameterError,
    SwitchboardError,
    UnknownOperationError,
    UpstreamError,
    describe_error,
)
from switchboard.core.pool import ClientPool

__all__ = [
    "ApiClient",
    "Auth",
    "ClientPool",
    "CompositeOperation",
    "CredentialField",
    "Endpoint",
    "Envelope",
    "Integration",
    "MissingCredentialError",
    "MissingParameterError",
    "Param",
    "Route",
    "StreamSpec",
    "SwitchboardError",
    "UnknownOperationError",
    "UpstreamError",
    "build_http_client",
    "describe_error",
    "fail",
    "is_success",
    "ok",
    "pick",
    "resolve_credentials",
]

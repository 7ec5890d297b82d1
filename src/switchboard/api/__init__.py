"""Inbound HTTP surface: route factory, client provider and gateway auth."""

from switchboard.api.auth import require_gateway_token
from switchboard.api.clients import ClientProvider
from switchboard.api.routes import build_router, collect_arguments, error_response

__all__ = [
    "ClientProvider",
    "build_router",
    "collect_arguments",
    "error_response",
    "require_gateway_token",
]

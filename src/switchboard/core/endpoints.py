"""Declarative endpoint tables.

An ``Integration`` describes one upstream service: base URL, credential
fields, how credentials become auth, and a table of ``Endpoint`` rows. The
generic ``ApiClient`` interprets these rows; the route factory turns them
into FastAPI routes.

Example::

    STRIPE = Integration(
        slug="stripe",
        title="Stripe",
        base_url="https://api.stripe.com/v1",
        credentials=(CredentialField("api_key", env="STRIPE_API_KEY"),),
        auth=bearer("api_key"),
        endpoints=(
            Endpoint(
                "get_customer", "GET", "/customers/{customer_id}",
                fields={"customer": None},
                route=Route("GET", "/customers/{customer_id}"),
            ),
        ),
    )
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Literal, Mapping

from switchboard.core.credentials import CredentialField

if TYPE_CHECKING:
    from switchboard.core.client import ApiClient

Location = Literal["query", "body", "path"]
Encoding = Literal["json", "form"]

_PLACEHOLDER = re.compile(r"{([a-zA-Z_][a-zA-Z0-9_]*)}")


# ── Serializers ──────────────────────────────────────────────────────


def comma_join(value: Any) -> Any:
    """Lists become ``a,b,c``; anything else passes through."""
    if isinstance(value, (list, tuple, set)):
        return ",".join(str(v) for v in value)
    return value


def json_dumps(value: Any) -> Any:
    """Objects and lists become a compact JSON string; scalars pass through.

    For upstreams that take structured values inside a query or form field.
    """
    if isinstance(value, (dict, list, tuple)):
        return json.dumps(value, separators=(",", ":"))
    return value


# ── Table rows ───────────────────────────────────────────────────────


@dataclass(frozen=True)
class Param:
    """One caller-supplied argument.

    ``alias`` is the upstream key when it differs from the argument name.
    ``spread`` merges a dict argument into the request body.
    """

    name: str
    location: Location = "body"
    required: bool = False
    default: Any = None
    alias: str | None = None
    serialize: Callable[[Any], Any] | None = None
    spread: bool = False

    @property
    def upstream_name(self) -> str:
        return self.alias or self.name


@dataclass(frozen=True)
class Route:
    """Inbound route exposed by the gateway for an endpoint."""

    method: str
    path: str

    def path_params(self) -> list[str]:
        return _PLACEHOLDER.findall(self.path)


@dataclass(frozen=True)
class StreamSpec:
    """How to read deltas out of an SSE-style streamed response."""

    extract: Callable[[dict[str, Any]], str | None]


@dataclass(frozen=True)
class Endpoint:
    """One upstream operation.

    ``fields`` maps envelope field -> dotted path into the upstream JSON;
    ``None`` means the whole body. ``transform`` replaces ``fields`` for the
    rare response that needs computing.
    """

    name: str
    method: str
    path: str
    params: tuple[Param, ...] = ()
    fields: Mapping[str, str | None] = field(default_factory=dict)
    transform: Callable[[Any, Mapping[str, Any]], dict[str, Any]] | None = None
    encoding: Encoding = "json"
    stream: StreamSpec | None = None
    route: Route | None = None
    description: str = ""

    def path_params(self) -> list[str]:
        return _PLACEHOLDER.findall(self.path)

    def required_names(self) -> list[str]:
        names = list(self.path_params())
        names.extend(p.name for p in self.params if p.required and p.name not in names)
        return names

    def missing(self, args: Mapping[str, Any]) -> list[str]:
        return [n for n in self.required_names() if args.get(n) is None]

    def bind_credentials(self, args: Mapping[str, Any], credentials: Mapping[str, str]) -> dict[str, Any]:
        """Fill path placeholders such as ``{account_sid}`` from credentials."""
        bound = dict(args)
        for name in self.path_params():
            if bound.get(name) is None and name in credentials:
                bound[name] = credentials[name]
        return bound

    def inbound_route(self) -> Route:
        if self.route is not None:
            return self.route
        return Route("POST", "/" + self.name.replace("_", "-"))


Composite = Callable[["ApiClient", dict[str, Any]], Awaitable[dict[str, Any]]]


@dataclass(frozen=True)
class CompositeOperation:
    """An operation written in Python on top of ``ApiClient.call``."""

    name: str
    handler: Composite
    required: tuple[str, ...] = ()
    route: Route | None = None
    description: str = ""

    def required_names(self) -> list[str]:
        return list(self.required)

    def missing(self, args: Mapping[str, Any]) -> list[str]:
        return [n for n in self.required if args.get(n) is None]

    def bind_credentials(self, args: Mapping[str, Any], credentials: Mapping[str, str]) -> dict[str, Any]:
        return dict(args)

    def inbound_route(self) -> Route:
        if self.route is not None:
            return self.route
        return Route("POST", "/" + self.name.replace("_", "-"))


# ── Auth ─────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class Auth:
    headers: dict[str, str] = field(default_factory=dict)
    params: dict[str, str] = field(default_factory=dict)
    basic: tuple[str, str] | None = None


AuthBuilder = Callable[[Mapping[str, str]], Auth]


def bearer(credential: str) -> AuthBuilder:
    def build(creds: Mapping[str, str]) -> Auth:
        return Auth(headers={"Authorization": f"Bearer {creds[credential]}"})
    return build


def header(name: str, credential: str) -> AuthBuilder:
    def build(creds: Mapping[str, str]) -> Auth:
        return Auth(headers={name: creds[credential]})
    return build


def query(**mapping: str) -> AuthBuilder:
    """Credentials sent as query params: ``query(key="api_key")``."""
    def build(creds: Mapping[str, str]) -> Auth:
        return Auth(params={param: creds[cred] for param, cred in mapping.items()})
    return build


def basic(username: str, password: str) -> AuthBuilder:
    def build(creds: Mapping[str, str]) -> Auth:
        return Auth(basic=(creds[username], creds[password]))
    return build


def no_auth(creds: Mapping[str, str]) -> Auth:
    return Auth()


# ── Integration ──────────────────────────────────────────────────────


@dataclass(frozen=True)
class Integration:
    """Declarative description of one upstream service."""

    slug: str
    title: str
    base_url: str
    credentials: tuple[CredentialField, ...] = ()
    auth: AuthBuilder = no_auth
    endpoints: tuple[Endpoint, ...] = ()
    composites: tuple[CompositeOperation, ...] = ()
    headers: Mapping[str, str] = field(default_factory=dict)
    protected: bool = False
    client_factory: Callable[..., Any] | None = None

    def __post_init__(self) -> None:
        seen: set[str] = set()
        for op in (*self.endpoints, *self.composites):
            if op.name in seen:
                raise ValueError(f"{self.slug}: duplicate operation {op.name!r}")
            seen.add(op.name)

    def endpoint(self, name: str) -> Endpoint | None:
        return next((e for e in self.endpoints if e.name == name), None)

    def composite(self, name: str) -> CompositeOperation | None:
        return next((c for c in self.composites if c.name == name), None)

    def operation(self, name: str) -> Endpoint | CompositeOperation | None:
        return self.endpoint(name) or self.composite(name)

    def operations(self) -> list[Endpoint | CompositeOperation]:
        return [*self.endpoints, *self.composites]

    def credential_names(self) -> set[str]:
        return {c.name for c in self.credentials}

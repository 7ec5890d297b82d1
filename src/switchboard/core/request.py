"""Turn an endpoint row plus caller arguments into a request descriptor."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping
from urllib.parse import quote

from switchboard.core.endpoints import Endpoint, Param
from switchboard.core.errors import MissingParameterError


@dataclass
class RequestDescriptor:
    method: str
    path: str
    query: dict[str, Any] = field(default_factory=dict)
    body: dict[str, Any] | None = None
    encoding: str = "json"

    def httpx_kwargs(self) -> dict[str, Any]:
        kwargs: dict[str, Any] = {}
        if self.query:
            kwargs["params"] = self.query
        if self.body is not None:
            if self.encoding == "form":
                kwargs["data"] = flatten_form(self.body)
            else:
                kwargs["json"] = self.body
        return kwargs


def flatten_form(body: Mapping[str, Any], prefix: str = "") -> dict[str, str]:
    """Flatten nested dicts/lists with the ``a[b][0]=c`` bracket convention."""
    flat: dict[str, str] = {}
    for key, value in body.items():
        name = f"{prefix}[{key}]" if prefix else str(key)
        if value is None:
            continue
        if isinstance(value, Mapping):
            flat.update(flatten_form(value, name))
        elif isinstance(value, (list, tuple)):
            for i, item in enumerate(value):
                if isinstance(item, Mapping):
                    flat.update(flatten_form(item, f"{name}[{i}]"))
                else:
                    flat[f"{name}[{i}]"] = _form_scalar(item)
        else:
            flat[name] = _form_scalar(value)
    return flat


def _form_scalar(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _value_for(param: Param, args: Mapping[str, Any]) -> Any:
    value = args.get(param.name)
    if value is None:
        value = param.default
    if value is not None and param.serialize is not None:
        value = param.serialize(value)
    return value


def build_request(endpoint: Endpoint, args: Mapping[str, Any]) -> RequestDescriptor:
    """Build the outbound request.

    Arguments that are absent or ``None`` and have no default are left out
    entirely; no ``None``-valued keys reach the query or body.
    """
    missing = endpoint.missing(args)
    if missing:
        raise MissingParameterError(missing)

    path = endpoint.path
    for name in endpoint.path_params():
        path = path.replace("{" + name + "}", quote(str(args[name]), safe=""))

    query: dict[str, Any] = {}
    body: dict[str, Any] = {}
    for param in endpoint.params:
        if param.location == "path":
            continue
        value = _value_for(param, args)
        if value is None:
            continue
        if param.spread:
            if not isinstance(value, Mapping):
                raise TypeError(f"{param.name} must be an object")
            body.update({k: v for k, v in value.items() if v is not None})
            continue
        target = query if param.location == "query" else body
        target[param.upstream_name] = value

    method = endpoint.method.upper()
    has_body_params = any(p.location == "body" for p in endpoint.params)
    return RequestDescriptor(
        method=method,
        path=path,
        query=query,
        body=body if (body or (has_body_params and method != "GET")) else None,
        encoding=endpoint.encoding,
    )

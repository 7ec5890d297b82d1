"""Credential bundle resolution.

Each secret is looked up in four tiers, first hit wins:

  1. explicit value   (constructor argument or request body field)
  2. request header   ``x-<slug>-<credential-name>``
  3. environment      ``CredentialField.env`` (e.g. ``STRIPE_API_KEY``)
  4. keys.json        ``{"<slug>": {"<credential>": "..."}}``

Empty strings count as absent at every tier.
"""

from __future__ import annotations

import hashlib
import os
from dataclasses import dataclass
from typing import Mapping

from switchboard.core.errors import MissingCredentialError


@dataclass(frozen=True)
class CredentialField:
    """One named secret of an integration."""

    name: str
    env: str | None = None
    required: bool = True
    default: str | None = None

    def header_for(self, slug: str) -> str:
        return f"x-{slug}-{self.name.replace('_', '-')}".lower()


def _present(value: object) -> bool:
    return value is not None and str(value) != ""


def resolve_credentials(
    slug: str,
    fields: tuple[CredentialField, ...],
    explicit: Mapping[str, object] | None = None,
    headers: Mapping[str, str] | None = None,
    environ: Mapping[str, str] | None = None,
    stored: Mapping[str, str] | None = None,
) -> dict[str, str]:
    """Resolve a credential bundle, raising if a required secret is absent."""
    explicit = explicit or {}
    environ = os.environ if environ is None else environ
    stored = stored or {}
    lowered = {k.lower(): v for k, v in (headers or {}).items()}

    bundle: dict[str, str] = {}
    missing: list[str] = []
    for field in fields:
        candidates = (
            explicit.get(field.name),
            lowered.get(field.header_for(slug)),
            environ.get(field.env) if field.env else None,
            stored.get(field.name),
        )
        value = next((c for c in candidates if _present(c)), None)
        if value is None:
            value = field.default
        if value is None:
            if field.required:
                missing.append(field.name)
            continue
        bundle[field.name] = str(value)

    if missing:
        raise MissingCredentialError(slug, missing)
    return bundle


def fingerprint(bundle: Mapping[str, str]) -> str:
    """Stable, non-reversible key for a credential bundle."""
    digest = hashlib.sha256()
    for name in sorted(bundle):
        digest.update(name.encode())
        digest.update(b"\x00")
        digest.update(bundle[name].encode())
        digest.update(b"\x01")
    return digest.hexdigest()[:32]

"""Result envelope shared by every client operation and route.

Success: ``{"success": True, <field>: <value>, ...}`` with at least one
domain field. Failure: ``{"success": False, "error": "<message>"}``.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict


class Envelope(BaseModel):
    """Documents the envelope shape in the OpenAPI schema."""

    model_config = ConfigDict(extra="allow")

    success: bool
    error: str | None = None


def ok(**fields: Any) -> dict[str, Any]:
    """Build a success envelope. At least one domain field is required."""
    if not fields:
        raise ValueError("success envelope needs at least one domain field")
    if "success" in fields or "error" in fields:
        raise ValueError("'success' and 'error' are reserved envelope keys")
    return {"success": True, **fields}


def fail(error: str) -> dict[str, Any]:
    """Build a failure envelope with a non-empty error string."""
    message = str(error).strip() if error is not None else ""
    return {"success": False, "error": message or "Unknown error"}


def is_success(result: Any) -> bool:
    return isinstance(result, dict) and result.get("success") is True

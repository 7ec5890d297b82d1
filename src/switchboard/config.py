"""Centralized configuration via Pydantic Settings.

All values loaded from environment variables prefixed with SWITCHBOARD_.
Upstream credentials can also be loaded from keys.json, keyed by
integration slug.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import structlog
from pydantic import PrivateAttr
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = structlog.get_logger()


def load_keys_json(path: Path) -> dict[str, dict[str, str]]:
    """Load per-integration credentials from keys.json if available."""
    if not path.exists():
        return {}
    try:
        with open(path) as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        logger.warning("keys_json_load_failed", path=str(path), error=str(e))
        return {}
    if not isinstance(data, dict):
        logger.warning("keys_json_invalid", path=str(path))
        return {}
    return {
        slug: {k: str(v) for k, v in entry.items() if v is not None}
        for slug, entry in data.items()
        if isinstance(entry, dict)
    }


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="SWITCHBOARD_", env_file=".env", extra="ignore")

    _keys: dict[str, dict[str, str]] = PrivateAttr(default_factory=dict)

    # ── Outbound HTTP ─────────────────────────────────────────
    http_timeout_s: float = 30.0
    http_connect_timeout_s: float = 5.0
    http_max_connections: int = 20
    http_max_keepalive: int = 10
    retry_attempts: int = 1

    # ── Client pool ───────────────────────────────────────────
    pool_clients: bool = True
    pool_max_clients: int = 64

    # ── Batch helpers ─────────────────────────────────────────
    batch_fail_fast: bool = True

    # ── Inbound surface ───────────────────────────────────────
    gateway_token: str = ""
    host: str = "0.0.0.0"
    port: int = 8000

    # Credentials file
    keys_path: Path = Path("./keys.json")

    # Application
    log_level: str = "INFO"
    env: str = "development"

    def model_post_init(self, __context: Any) -> None:
        """Post-initialization: resolve keys.json and load stored credentials."""
        if not self.keys_path.is_absolute():
            self.keys_path = Path(__file__).parent.parent.parent / self.keys_path
        self._keys = load_keys_json(self.keys_path)

    def stored_credentials(self, slug: str) -> dict[str, str]:
        """Credentials for *slug* from keys.json (empty if none)."""
        return dict(self._keys.get(slug, {}))


settings = Settings()  # type: ignore[call-arg]

"""Tests for credential resolution, config and keys.json loading."""

from __future__ import annotations

import json

import pytest

from switchboard.config import Settings, load_keys_json
from switchboard.core import CredentialField, MissingCredentialError, resolve_credentials
from switchboard.core.credentials import fingerprint

FIELDS = (CredentialField("api_key", env="STRIPE_API_KEY"),)


class TestPrecedence:
    def test_explicit_wins(self):
        creds = resolve_credentials(
            "stripe", FIELDS,
            explicit={"api_key": "explicit"},
            headers={"x-stripe-api-key": "header"},
            environ={"STRIPE_API_KEY": "env"},
            stored={"api_key": "stored"},
        )
        assert creds == {"api_key": "explicit"}

    def test_header_beats_env(self):
        creds = resolve_credentials(
            "stripe", FIELDS,
            headers={"X-Stripe-Api-Key": "header"},
            environ={"STRIPE_API_KEY": "env"},
            stored={"api_key": "stored"},
        )
        assert creds["api_key"] == "header"

    def test_env_beats_stored(self):
        creds = resolve_credentials(
            "stripe", FIELDS,
            environ={"STRIPE_API_KEY": "env"},
            stored={"api_key": "stored"},
        )
        assert creds["api_key"] == "env"

    def test_stored_is_last(self):
        creds = resolve_credentials("stripe", FIELDS, environ={}, stored={"api_key": "stored"})
        assert creds["api_key"] == "stored"

    def test_empty_string_counts_as_absent(self):
        creds = resolve_credentials(
            "stripe", FIELDS,
            explicit={"api_key": ""},
            environ={"STRIPE_API_KEY": "env"},
        )
        assert creds["api_key"] == "env"


class TestMissingAndDefaults:
    def test_missing_required_raises(self):
        with pytest.raises(MissingCredentialError) as exc_info:
            resolve_credentials("stripe", FIELDS, environ={})
        assert exc_info.value.names == ["api_key"]

    def test_optional_is_skipped(self):
        fields = (CredentialField("organization", env="OPENAI_ORGANIZATION", required=False),)
        assert resolve_credentials("openai", fields, environ={}) == {}

    def test_default_applies(self):
        fields = (CredentialField("host", env="REDIS_HOST", required=False, default="localhost"),)
        assert resolve_credentials("redis-cache", fields, environ={}) == {"host": "localhost"}

    def test_header_name_uses_dashes(self):
        assert CredentialField("account_sid").header_for("twilio") == "x-twilio-account-sid"


class TestFingerprint:
    def test_stable_and_order_independent(self):
        a = fingerprint({"user": "u", "password": "p"})
        b = fingerprint({"password": "p", "user": "u"})
        assert a == b
        assert len(a) == 32

    def test_differs_by_value(self):
        assert fingerprint({"api_key": "a"}) != fingerprint({"api_key": "b"})

    def test_does_not_contain_secret(self):
        assert "sk_live_secret" not in fingerprint({"api_key": "sk_live_secret"})


# ─────────────────────────────────────────────────────────────────────────────
# Settings / keys.json
# ─────────────────────────────────────────────────────────────────────────────

class TestKeysJson:
    def test_loads_per_slug(self, tmp_path):
        path = tmp_path / "keys.json"
        path.write_text(json.dumps({"stripe": {"api_key": "sk_test"}, "junk": "x"}))
        assert load_keys_json(path) == {"stripe": {"api_key": "sk_test"}}

    def test_missing_file(self, tmp_path):
        assert load_keys_json(tmp_path / "nope.json") == {}

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "keys.json"
        path.write_text("{not json")
        assert load_keys_json(path) == {}

    def test_settings_expose_stored_credentials(self, tmp_path):
        path = tmp_path / "keys.json"
        path.write_text(json.dumps({"github": {"token": "ghp_x"}}))
        settings = Settings(keys_path=path)
        assert settings.stored_credentials("github") == {"token": "ghp_x"}
        assert settings.stored_credentials("slack") == {}

    def test_env_prefix(self, monkeypatch):
        monkeypatch.setenv("SWITCHBOARD_RETRY_ATTEMPTS", "3")
        monkeypatch.setenv("SWITCHBOARD_BATCH_FAIL_FAST", "false")
        settings = Settings()
        assert settings.retry_attempts == 3
        assert settings.batch_fail_fast is False

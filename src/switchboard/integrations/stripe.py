"""Stripe payments: customers, payment intents, refunds, subscriptions.

Stripe takes form-encoded bodies; nested objects such as ``metadata`` are
sent with the ``metadata[key]=value`` bracket convention.
"""

from __future__ import annotations

from switchboard.core import CredentialField, Endpoint, Integration, Param, Route
from switchboard.core.endpoints import bearer

STRIPE = Integration(
    slug="stripe",
    title="Stripe",
    base_url="https://api.stripe.com/v1",
    credentials=(CredentialField("api_key", env="STRIPE_API_KEY"),),
    auth=bearer("api_key"),
    endpoints=(
        # ── Customers ────────────────────────────────────────────
        Endpoint(
            "create_customer", "POST", "/customers",
            params=(
                Param("email", required=True),
                Param("name"),
                Param("description"),
                Param("phone"),
                Param("metadata"),
            ),
            fields={"customer": None},
            encoding="form",
            route=Route("POST", "/customers"),
        ),
        Endpoint(
            "get_customer", "GET", "/customers/{customer_id}",
            fields={"customer": None},
            route=Route("GET", "/customers/{customer_id}"),
        ),
        Endpoint(
            "update_customer", "POST", "/customers/{customer_id}",
            params=(Param("data", spread=True, required=True),),
            fields={"customer": None},
            encoding="form",
            route=Route("POST", "/customers/{customer_id}"),
        ),
        Endpoint(
            "delete_customer", "DELETE", "/customers/{customer_id}",
            fields={"deleted": "deleted"},
            route=Route("DELETE", "/customers/{customer_id}"),
        ),
        Endpoint(
            "list_customers", "GET", "/customers",
            params=(
                Param("limit", "query", default=10),
                Param("starting_after", "query"),
                Param("email", "query"),
            ),
            fields={"customers": "data", "has_more": "has_more"},
            route=Route("GET", "/customers"),
        ),
        # ── Payment intents ──────────────────────────────────────
        Endpoint(
            "create_payment_intent", "POST", "/payment_intents",
            params=(
                Param("amount", required=True),
                Param("currency", default="usd"),
                Param("customer"),
                Param("description"),
                Param("payment_method"),
                Param("metadata"),
            ),
            fields={"payment_intent": None},
            encoding="form",
            route=Route("POST", "/payment-intents"),
        ),
        Endpoint(
            "get_payment_intent", "GET", "/payment_intents/{payment_intent_id}",
            fields={"payment_intent": None},
            route=Route("GET", "/payment-intents/{payment_intent_id}"),
        ),
        Endpoint(
            "confirm_payment_intent", "POST", "/payment_intents/{payment_intent_id}/confirm",
            params=(Param("payment_method"),),
            fields={"payment_intent": None},
            encoding="form",
            route=Route("POST", "/payment-intents/{payment_intent_id}/confirm"),
        ),
        Endpoint(
            "cancel_payment_intent", "POST", "/payment_intents/{payment_intent_id}/cancel",
            params=(Param("cancellation_reason"),),
            fields={"payment_intent": None},
            encoding="form",
            route=Route("POST", "/payment-intents/{payment_intent_id}/cancel"),
        ),
        # ── Refunds / charges ────────────────────────────────────
        Endpoint(
            "create_refund", "POST", "/refunds",
            params=(
                Param("payment_intent"),
                Param("charge"),
                Param("amount"),
                Param("reason"),
            ),
            fields={"refund": None},
            encoding="form",
            route=Route("POST", "/refunds"),
        ),
        Endpoint(
            "list_charges", "GET", "/charges",
            params=(
                Param("limit", "query", default=10),
                Param("customer", "query"),
                Param("starting_after", "query"),
            ),
            fields={"charges": "data", "has_more": "has_more"},
            route=Route("GET", "/charges"),
        ),
        # ── Subscriptions ────────────────────────────────────────
        Endpoint(
            "create_subscription", "POST", "/subscriptions",
            params=(
                Param("customer", required=True),
                Param("items", required=True),
                Param("trial_period_days"),
                Param("default_payment_method"),
                Param("metadata"),
            ),
            fields={"subscription": None},
            encoding="form",
            route=Route("POST", "/subscriptions"),
        ),
        Endpoint(
            "cancel_subscription", "DELETE", "/subscriptions/{subscription_id}",
            fields={"subscription": None},
            route=Route("DELETE", "/subscriptions/{subscription_id}"),
        ),
    ),
)

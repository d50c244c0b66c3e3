import hashlib
import hmac
import json
import time
from datetime import date

import pytest

from mindful.core.exceptions import BadRequestError
from mindful.crud.subscription import crud_subscription
from mindful.crud.user import crud_user
from mindful.services.billing import BillingGateway
from mindful.models.user import SubscriptionTier
from mindful.services.subscription import (
    BASIC_AI_REQUESTS_LIMIT,
    first_day_of_next_month,
    subscription_service,
)


class FakeGateway:
    def __init__(self, status="active"):
        self.status = status
        self.cancelled = []
        self.events = {}

    def create_customer(self, email, user_id):
        return f"cus_{user_id}"

    def create_subscription(self, customer_id, price_id):
        return {
            "subscription_id": "sub_123",
            "status": self.status,
            "client_secret": "pi_secret",
            "period_start": None,
            "period_end": None,
        }

    def cancel_subscription(self, subscription_id):
        self.cancelled.append(subscription_id)
        return "canceled"

    def construct_event(self, payload, signature):
        if signature != "valid":
            raise BadRequestError("Invalid webhook signature")
        return self.events[payload]


@pytest.fixture
def gateway(monkeypatch, db):
    fake = FakeGateway()
    monkeypatch.setattr(subscription_service, "gateway", fake)
    plan = crud_subscription.get_plan_by_name(db, "premium")
    plan.price_id = "price_test_premium"
    db.commit()
    return fake


def current_user(db, tokens):
    user = crud_user.get(db, id=tokens["user"]["id"])
    db.refresh(user)
    return user


# ---------------------------------------------------------------------
# Quota
# ---------------------------------------------------------------------

def test_next_reset_date_rolls_over_the_year():
    assert first_day_of_next_month(date(2024, 1, 31)) == date(2024, 2, 1)
    assert first_day_of_next_month(date(2024, 12, 15)) == date(2025, 1, 1)


def test_basic_tier_allows_limited_ai_requests(db, client, user_tokens):
    user = current_user(db, user_tokens)
    today = date(2024, 6, 10)

    allowed = [subscription_service.consume_ai_request(db, user, today=today) for _ in range(BASIC_AI_REQUESTS_LIMIT + 1)]

    assert allowed.count(True) == BASIC_AI_REQUESTS_LIMIT
    assert allowed[-1] is False
    assert user.ai_requests_reset_date == date(2024, 7, 1)


def test_quota_resets_on_reset_date(db, client, user_tokens):
    user = current_user(db, user_tokens)
    crud_user.set_ai_usage(db, user=user, count=BASIC_AI_REQUESTS_LIMIT, reset_date=date(2024, 7, 1))

    assert subscription_service.consume_ai_request(db, user, today=date(2024, 6, 30)) is False
    assert subscription_service.consume_ai_request(db, user, today=date(2024, 7, 1)) is True
    assert user.ai_requests_count == 1
    assert user.ai_requests_reset_date == date(2024, 8, 1)


def test_paid_tiers_are_unlimited(db, client, user_tokens):
    user = current_user(db, user_tokens)
    crud_user.set_subscription_tier(db, user=user, tier=SubscriptionTier.premium)
    crud_user.set_ai_usage(db, user=user, count=1000, reset_date=date(2099, 1, 1))

    assert subscription_service.consume_ai_request(db, user) is True


def test_over_quota_entry_gets_neutral_analysis(client, headers, db, user_tokens):
    user = current_user(db, user_tokens)
    crud_user.set_ai_usage(db, user=user, count=BASIC_AI_REQUESTS_LIMIT, reset_date=date(2099, 1, 1))

    response = client.post("/api/entries", json={"content": "Busy day", "mood": 3}, headers=headers)

    assert response.status_code == 201
    assert response.json()["analysis"]["sentiment"]["label"] == "neutral"


# ---------------------------------------------------------------------
# Plans & status
# ---------------------------------------------------------------------

def test_plans_are_listed_cheapest_first(client):
    plans = client.get("/api/subscription/plans").json()
    assert [p["name"] for p in plans] == ["basic", "premium", "professional"]
    assert plans[0]["ai_requests_limit"] == BASIC_AI_REQUESTS_LIMIT
    assert plans[1]["ai_requests_limit"] is None


def test_status_for_new_user(client, headers):
    status = client.get("/api/subscription", headers=headers).json()
    assert status["tier"] == "basic"
    assert status["ai_requests_used"] == 0
    assert status["group_limit"] == 2
    assert status["subscription"] is None


# ---------------------------------------------------------------------
# Checkout & cancellation
# ---------------------------------------------------------------------

def test_checkout_rejects_unknown_and_free_prices(client, headers, gateway):
    assert client.post("/api/subscription", json={"price_id": "price_bogus"}, headers=headers).status_code == 422
    assert client.post("/api/subscription", json={"price_id": "price_basic"}, headers=headers).status_code == 422


def test_checkout_creates_subscription_and_upgrades_tier(client, headers, gateway, db, user_tokens):
    response = client.post("/api/subscription", json={"price_id": "price_premium"}, headers=headers)

    assert response.status_code == 200
    assert response.json() == {"subscription_id": "sub_123", "client_secret": "pi_secret", "status": "active"}
    user = current_user(db, user_tokens)
    assert user.subscription_tier == SubscriptionTier.premium
    assert user.stripe_customer_id == f"cus_{user.id}"

    status = client.get("/api/subscription", headers=headers).json()
    assert status["subscription"]["stripe_subscription_id"] == "sub_123"
    assert status["ai_requests_limit"] is None


def test_incomplete_checkout_keeps_basic_tier(client, headers, gateway, db, user_tokens):
    gateway.status = "incomplete"
    client.post("/api/subscription", json={"price_id": "price_premium"}, headers=headers)

    assert current_user(db, user_tokens).subscription_tier == SubscriptionTier.basic


def test_cancel_downgrades_to_basic(client, headers, gateway, db, user_tokens):
    client.post("/api/subscription", json={"price_id": "price_premium"}, headers=headers)

    response = client.post("/api/subscription/cancel", headers=headers)

    assert response.status_code == 200
    assert response.json()["status"] == "cancelled"
    assert gateway.cancelled == ["sub_123"]
    assert current_user(db, user_tokens).subscription_tier == SubscriptionTier.basic


def test_cancel_without_subscription_is_not_found(client, headers, gateway):
    assert client.post("/api/subscription/cancel", headers=headers).status_code == 404


def test_checkout_without_provider_is_bad_gateway(client, headers, db):
    plan = crud_subscription.get_plan_by_name(db, "premium")
    plan.price_id = "price_test_premium"
    db.commit()

    response = client.post("/api/subscription", json={"price_id": "price_premium"}, headers=headers)

    assert response.status_code == 502


# ---------------------------------------------------------------------
# Webhooks
# ---------------------------------------------------------------------

def test_webhook_rejects_bad_signature(client, gateway):
    response = client.post(
        "/api/webhooks/stripe", content=b"{}", headers={"stripe-signature": "forged"}
    )
    assert response.status_code == 400


def test_webhook_deleted_subscription_downgrades_user(client, headers, gateway, db, user_tokens):
    client.post("/api/subscription", json={"price_id": "price_premium"}, headers=headers)
    gateway.events[b"deleted"] = {
        "type": "customer.subscription.deleted",
        "data": {"object": {"id": "sub_123", "status": "canceled", "canceled_at": 1717200000}},
    }

    response = client.post(
        "/api/webhooks/stripe", content=b"deleted", headers={"stripe-signature": "valid"}
    )

    assert response.status_code == 200
    assert response.json() == {"received": True}
    subscription = crud_subscription.get_by_stripe_id(db, "sub_123")
    db.refresh(subscription)
    assert subscription.status == "canceled"
    assert subscription.cancelled_at is not None
    assert current_user(db, user_tokens).subscription_tier == SubscriptionTier.basic


def test_payment_succeeded_activates_subscription(db, client, headers, gateway, user_tokens):
    gateway.status = "incomplete"
    client.post("/api/subscription", json={"price_id": "price_premium"}, headers=headers)

    subscription_service.apply_event(
        db,
        {
            "type": "invoice.payment_succeeded",
            "data": {"object": {"subscription": "sub_123", "period_start": 1717200000, "period_end": 1719792000}},
        },
    )

    subscription = crud_subscription.get_by_stripe_id(db, "sub_123")
    assert subscription.status == "active"
    assert subscription.end_date is not None
    assert current_user(db, user_tokens).subscription_tier == SubscriptionTier.premium


def test_unknown_events_are_ignored(db):
    assert subscription_service.apply_event(db, {"type": "customer.created", "data": {"object": {}}}) is None


def test_gateway_verifies_provider_signatures():
    secret = "whsec_test"
    gateway = BillingGateway(api_key=None, webhook_secret=secret, api_version="2024-12-18.acacia")
    payload = json.dumps(
        {
            "id": "evt_1",
            "object": "event",
            "type": "customer.subscription.updated",
            "data": {"object": {"id": "sub_1", "status": "active"}},
        }
    ).encode()
    timestamp = int(time.time())
    digest = hmac.new(secret.encode(), f"{timestamp}.".encode() + payload, hashlib.sha256).hexdigest()

    event = gateway.construct_event(payload, f"t={timestamp},v1={digest}")

    assert event["data"]["object"]["id"] == "sub_1"
    with pytest.raises(BadRequestError):
        gateway.construct_event(payload, f"t={timestamp},v1={'0' * 64}")

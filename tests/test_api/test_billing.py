from __future__ import annotations

import time
from datetime import datetime

import pytest
import stripe
from fastapi import status

from npsdesk.core.config import settings
from tests.conftest import (
    API_PREFIX,
    build_auth_header,
    days_ago,
    seed_account,
    stripe_event,
    stripe_signed,
)


def _checkout_completed(account_id, plan_id="Profissional", cycle="annual", subscription="sub_123"):
    return stripe_event(
        "checkout.session.completed",
        {
            "id": "cs_test_1",
            "object": "checkout.session",
            "client_reference_id": str(account_id),
            "subscription": subscription,
            "metadata": {"plan_id": plan_id, "cycle": cycle},
        },
    )


def _subscription_event(event_type, provider_id, provider_status, price_id="price_professional"):
    now = int(time.time())
    return stripe_event(
        event_type,
        {
            "id": provider_id,
            "object": "subscription",
            "status": provider_status,
            "cancel_at_period_end": False,
            "current_period_start": now,
            "current_period_end": now + 30 * 86400,
            "items": {"object": "list", "data": [{"id": "si_1", "price": {"id": price_id}}]},
        },
    )


async def _post_event(client, event, secret=None):
    payload, headers = stripe_signed(event, secret) if secret else stripe_signed(event)
    return await client.post(f"{API_PREFIX}/billing/webhook", content=payload, headers=headers)


@pytest.mark.asyncio
async def test_expired_account_cannot_unblock_itself(client, test_db, webhook_secret):
    account = await seed_account(test_db, created_at=days_ago(10))
    headers = build_auth_header(account.id)

    blocked = await client.post(f"{API_PREFIX}/campaigns", json={"name": "Q3"}, headers=headers)
    assert blocked.status_code == status.HTTP_402_PAYMENT_REQUIRED

    for path, body in (
        ("/billing/subscribe", {"plan_id": "enterprise", "cycle": "annual"}),
        ("/billing/status", {"status": "active"}),
    ):
        attempt = await client.post(f"{API_PREFIX}{path}", json=body, headers=headers)
        assert attempt.status_code in (
            status.HTTP_404_NOT_FOUND,
            status.HTTP_405_METHOD_NOT_ALLOWED,
        )

    # An account token is not a webhook signature
    unsigned = await client.post(
        f"{API_PREFIX}/billing/webhook",
        json=_checkout_completed(account.id),
        headers=headers,
    )
    assert unsigned.status_code == status.HTTP_400_BAD_REQUEST
    assert unsigned.json()["message"] == "Missing Stripe-Signature header"

    forged = await _post_event(client, _checkout_completed(account.id), secret="whsec_guessed")
    assert forged.status_code == status.HTTP_400_BAD_REQUEST
    assert forged.json()["message"] == "Invalid webhook signature"

    limits = (await client.get(f"{API_PREFIX}/entitlements/limits", headers=headers)).json()
    assert limits["upgrade_required"] is True
    still_blocked = await client.post(
        f"{API_PREFIX}/campaigns", json={"name": "Q3"}, headers=headers
    )
    assert still_blocked.status_code == status.HTTP_402_PAYMENT_REQUIRED


@pytest.mark.asyncio
async def test_webhook_rejects_stale_signature(client, test_db, webhook_secret):
    account = await seed_account(test_db, created_at=days_ago(10))
    payload, headers = stripe_signed(
        _checkout_completed(account.id),
        timestamp=int(time.time()) - settings.billing.webhook_tolerance_seconds - 60,
    )

    response = await client.post(
        f"{API_PREFIX}/billing/webhook", content=payload, headers=headers
    )

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["message"] == "Invalid webhook signature"


@pytest.mark.asyncio
async def test_webhook_requires_configured_secret(client, test_db, monkeypatch):
    monkeypatch.setattr(settings.billing, "stripe_webhook_secret", "")
    account = await seed_account(test_db, created_at=days_ago(10))

    response = await _post_event(client, _checkout_completed(account.id))

    assert response.status_code == status.HTTP_503_SERVICE_UNAVAILABLE
    assert response.json()["message"] == "Billing webhook not configured"


@pytest.mark.asyncio
async def test_subscription_lifecycle(client, test_db, webhook_secret):
    account = await seed_account(test_db, created_at=days_ago(10))
    headers = build_auth_header(account.id)

    before = (await client.get(f"{API_PREFIX}/entitlements/limits", headers=headers)).json()
    assert before["upgrade_required"] is True

    checkout = await _post_event(client, _checkout_completed(account.id))
    assert checkout.status_code == status.HTTP_200_OK, checkout.text
    body = checkout.json()
    assert body["received"] is True
    assert body["event_type"] == "checkout.session.completed"
    assert body["subscription"]["status"] == "active"
    assert body["subscription"]["plan_id"] == "professional"
    assert body["subscription"]["plan_name"] == "Profissional"
    period_start = datetime.fromisoformat(body["subscription"]["period_start"]).date()
    period_end = datetime.fromisoformat(body["subscription"]["period_end"]).date()
    assert period_end.year == period_start.year + 1

    after = (await client.get(f"{API_PREFIX}/entitlements/limits", headers=headers)).json()
    assert after["upgrade_required"] is False
    assert after["is_trial_active"] is False
    assert after["limits"]["campaigns"] == "unlimited"
    created = await client.post(f"{API_PREFIX}/campaigns", json={"name": "Q3"}, headers=headers)
    assert created.status_code == status.HTTP_201_CREATED

    cancelled = await client.post(
        f"{API_PREFIX}/billing/cancel", json={"reason": "budget"}, headers=headers
    )
    assert cancelled.status_code == status.HTTP_200_OK
    assert cancelled.json()["cancel_at_period_end"] is True

    state = (await client.get(f"{API_PREFIX}/entitlements/subscription", headers=headers)).json()
    assert state["is_active"] is True
    assert state["cancel_at_period_end"] is True

    past_due = await _post_event(
        client, _subscription_event("customer.subscription.updated", "sub_123", "past_due")
    )
    assert past_due.status_code == status.HTTP_200_OK
    assert past_due.json()["subscription"]["status"] == "past_due"

    blocked = (await client.get(f"{API_PREFIX}/entitlements/limits", headers=headers)).json()
    assert blocked["upgrade_required"] is True
    assert blocked["can_create_campaign"] is False

    again = await client.post(f"{API_PREFIX}/billing/cancel", json={}, headers=headers)
    assert again.status_code == status.HTTP_400_BAD_REQUEST
    assert again.json()["message"] == "No active subscription to cancel"


@pytest.mark.asyncio
async def test_subscription_deleted_event_revokes_access(client, test_db, webhook_secret):
    account = await seed_account(
        test_db,
        created_at=days_ago(40),
        status="active",
        plan_id="starter",
        provider_subscription_id="sub_live",
    )
    headers = build_auth_header(account.id)

    deleted = await _post_event(
        client,
        _subscription_event("customer.subscription.deleted", "sub_live", "canceled", "price_starter"),
    )

    assert deleted.status_code == status.HTTP_200_OK
    assert deleted.json()["subscription"]["status"] == "canceled"
    limits = (await client.get(f"{API_PREFIX}/entitlements/limits", headers=headers)).json()
    assert limits["upgrade_required"] is True


@pytest.mark.asyncio
async def test_unhandled_event_is_acknowledged(client, webhook_secret):
    response = await _post_event(
        client, stripe_event("invoice.finalized", {"id": "in_1", "object": "invoice"})
    )

    assert response.status_code == status.HTTP_200_OK
    assert response.json() == {
        "received": True,
        "event_type": "invoice.finalized",
        "subscription": None,
    }


@pytest.mark.asyncio
async def test_cancel_forwards_to_stripe(client, test_db, monkeypatch):
    monkeypatch.setattr(settings.billing, "stripe_secret_key", "sk_test_key")
    calls = []

    def _modify(subscription_id, **params):
        calls.append((subscription_id, params))
        return {"id": subscription_id, "cancel_at_period_end": True}

    monkeypatch.setattr(stripe.Subscription, "modify", _modify)
    account = await seed_account(
        test_db,
        created_at=days_ago(40),
        status="active",
        plan_id="starter",
        provider_subscription_id="sub_remote",
    )

    response = await client.post(
        f"{API_PREFIX}/billing/cancel",
        json={"reason": "switching tools"},
        headers=build_auth_header(account.id),
    )

    assert response.status_code == status.HTTP_200_OK, response.text
    assert response.json()["cancel_at_period_end"] is True
    assert calls == [
        (
            "sub_remote",
            {
                "api_key": "sk_test_key",
                "cancel_at_period_end": True,
                "metadata": {"cancellation_reason": "switching tools"},
            },
        )
    ]


@pytest.mark.asyncio
async def test_cancel_reports_provider_outage(client, test_db, monkeypatch):
    monkeypatch.setattr(settings.billing, "stripe_secret_key", "sk_test_key")

    def _modify(subscription_id, **params):
        raise stripe.APIConnectionError("connection refused")

    monkeypatch.setattr(stripe.Subscription, "modify", _modify)
    account = await seed_account(
        test_db,
        created_at=days_ago(40),
        status="active",
        plan_id="starter",
        provider_subscription_id="sub_remote",
    )
    headers = build_auth_header(account.id)

    response = await client.post(f"{API_PREFIX}/billing/cancel", json={}, headers=headers)

    assert response.status_code == status.HTTP_502_BAD_GATEWAY
    assert response.json()["message"] == "Payment provider unavailable"
    state = (await client.get(f"{API_PREFIX}/entitlements/subscription", headers=headers)).json()
    assert state["cancel_at_period_end"] is False

"""Billing endpoints: plan catalogue, Stripe webhook and cancellation."""
from __future__ import annotations

import logging

import stripe
from fastapi import APIRouter, Depends, Header, HTTPException, Request, status
from fastapi.concurrency import run_in_threadpool
from sqlalchemy.ext.asyncio import AsyncSession

from npsdesk.api.deps import get_db_session
from npsdesk.auth.jwt import require_auth
from npsdesk.core.config import settings
from npsdesk.repositories.subscription_repo import SubscriptionRepo
from npsdesk.schemas.billing import CancelBody
from npsdesk.schemas.entitlement import PlanRead
from npsdesk.services.billing import BillingService
from npsdesk.services.limits import check_rate_limit
from npsdesk.services.plans import PAID_TIERS, PLAN_TABLE, lookup_paid_tier
from npsdesk.services.subscription_state import evaluate_subscription


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/billing", tags=["billing"])


def _subscription_response(subscription):
    state = evaluate_subscription(subscription)
    tier = lookup_paid_tier(subscription.plan_id)
    return {
        "status": state.status,
        "plan_id": subscription.plan_id,
        "plan_name": PLAN_TABLE[tier].name if tier else None,
        "period_start": str(subscription.current_period_start) if subscription.current_period_start else None,
        "period_end": str(subscription.current_period_end) if subscription.current_period_end else None,
        "cancel_at_period_end": state.cancel_at_period_end,
        "limits": PLAN_TABLE[tier].limits.model_dump() if tier else None,
    }


@router.get("/plans", response_model=list[PlanRead])
async def list_plans():
    return [
        PlanRead(
            id=tier.value,
            name=PLAN_TABLE[tier].name,
            price_id=PLAN_TABLE[tier].price_id,
            price_cents=PLAN_TABLE[tier].price_cents,
            limits=PLAN_TABLE[tier].limits,
        )
        for tier in PAID_TIERS
    ]


@router.post("/webhook")
async def stripe_webhook(
    request: Request,
    stripe_signature: str | None = Header(default=None, alias="Stripe-Signature"),
    db: AsyncSession = Depends(get_db_session),
):
    """
    Record subscription changes reported by Stripe.

    Only events carrying a valid ``Stripe-Signature`` for the configured
    webhook secret are applied.
    """
    webhook_secret = settings.billing.stripe_webhook_secret
    if not webhook_secret:
        logger.error("Stripe webhook secret is not configured")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Billing webhook not configured",
        )
    if not stripe_signature:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Missing Stripe-Signature header",
        )

    payload = await request.body()
    try:
        event = stripe.Webhook.construct_event(
            payload,
            stripe_signature,
            webhook_secret,
            tolerance=settings.billing.webhook_tolerance_seconds,
        )
    except stripe.SignatureVerificationError as exc:
        logger.warning(f"Stripe webhook signature verification failed: {exc}")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid webhook signature",
        ) from exc
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid webhook payload",
        ) from exc

    subscription = await BillingService(db).process_webhook(event)
    return {
        "received": True,
        "event_type": event["type"],
        "subscription": _subscription_response(subscription) if subscription else None,
    }


@router.post("/cancel")
async def cancel(
    body: CancelBody,
    auth=Depends(require_auth),
    db: AsyncSession = Depends(get_db_session),
):
    account_id = auth["account_id"]
    await check_rate_limit(str(account_id))

    subscription_repo = SubscriptionRepo(db)
    subscription = await subscription_repo.get(account_id)
    if subscription is None or subscription.status != "active":
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No active subscription to cancel",
        )

    if subscription.provider_subscription_id and settings.billing.stripe_secret_key:
        try:
            await run_in_threadpool(
                stripe.Subscription.modify,
                subscription.provider_subscription_id,
                api_key=settings.billing.stripe_secret_key,
                cancel_at_period_end=True,
                metadata={"cancellation_reason": body.reason or "No reason provided"},
            )
        except stripe.StripeError as exc:
            logger.error(f"Stripe cancellation failed for account {account_id}: {exc}")
            raise HTTPException(
                status_code=status.HTTP_502_BAD_GATEWAY,
                detail="Payment provider unavailable",
            ) from exc

    subscription = await subscription_repo.set_cancel_at_period_end(subscription, True)
    logger.info(f"Account {account_id} cancels at period end, reason: {body.reason or '-'}")
    return _subscription_response(subscription)

"""
Apply verified Stripe webhook events to the local subscription record.

The payment provider is the only source of subscription status: checkout
completion activates a plan, subscription events move it between statuses.
"""
from __future__ import annotations

import logging
from datetime import date, datetime, timezone
from typing import Any, Optional
from uuid import UUID

from dateutil.relativedelta import relativedelta
from sqlalchemy.ext.asyncio import AsyncSession

from npsdesk.db.models.subscription import Subscription
from npsdesk.repositories.account_repo import AccountRepo
from npsdesk.repositories.subscription_repo import SubscriptionRepo
from npsdesk.services.plans import lookup_paid_tier

logger = logging.getLogger(__name__)

# Stripe subscription statuses mapped onto the local status set
PROVIDER_STATUS_MAP = {
    "active": "active",
    "trialing": "trialing",
    "past_due": "past_due",
    "unpaid": "past_due",
    "paused": "past_due",
    "canceled": "canceled",
    "incomplete_expired": "canceled",
    "incomplete": "not_started",
}


def map_provider_status(provider_status: Optional[str]) -> str:
    """Translate a Stripe status; anything unrecognised grants nothing."""

    status = PROVIDER_STATUS_MAP.get(provider_status or "")
    if status is None:
        logger.warning(f"Unknown Stripe subscription status {provider_status!r}, recording not_started")
        return "not_started"
    return status


def _field(obj: Any, key: str, default: Any = None) -> Any:
    """Read ``key`` from a dict or StripeObject, tolerating absent keys."""

    if obj is None:
        return default
    try:
        value = obj[key]
    except (KeyError, TypeError):
        return default
    return default if value is None else value


def _parse_account_id(value: Any) -> Optional[UUID]:
    if not value:
        return None
    try:
        return UUID(str(value))
    except ValueError:
        logger.warning(f"Ignoring malformed account id {value!r} in Stripe event")
        return None


def _timestamp_date(value: Any) -> Optional[date]:
    if value is None:
        return None
    return datetime.fromtimestamp(int(value), tz=timezone.utc).date()


def _resolve_plan_id(raw: Optional[str]) -> Optional[str]:
    tier = lookup_paid_tier(raw)
    return tier.value if tier else raw


class BillingService:
    """Record subscription state reported by Stripe."""

    def __init__(self, session: AsyncSession) -> None:
        self.accounts = AccountRepo(session)
        self.subscriptions = SubscriptionRepo(session)

    async def process_webhook(self, event: Any) -> Optional[Subscription]:
        """
        Apply one verified event

        Returns:
            The updated subscription, or None when the event is ignored
        """
        event_type = _field(event, "type")
        obj = _field(_field(event, "data"), "object")
        handlers = {
            "checkout.session.completed": self._checkout_completed,
            "customer.subscription.created": self._subscription_changed,
            "customer.subscription.updated": self._subscription_changed,
            "customer.subscription.deleted": self._subscription_deleted,
        }
        handler = handlers.get(event_type)
        if handler is None:
            logger.info(f"Ignoring Stripe event {event_type}")
            return None
        return await handler(obj)

    async def _known_account(self, account_id: Optional[UUID]) -> Optional[UUID]:
        if account_id is None or await self.accounts.get(account_id) is None:
            logger.warning(f"Stripe event references unknown account {account_id}")
            return None
        return account_id

    async def _checkout_completed(self, session_obj: Any) -> Optional[Subscription]:
        metadata = _field(session_obj, "metadata", {})
        account_id = await self._known_account(
            _parse_account_id(
                _field(session_obj, "client_reference_id") or _field(metadata, "account_id")
            )
        )
        if account_id is None:
            return None

        start = datetime.now(timezone.utc).date()
        cycle = _field(metadata, "cycle", "monthly")
        delta = relativedelta(years=1) if cycle == "annual" else relativedelta(months=1)
        plan_id = _resolve_plan_id(_field(metadata, "plan_id"))

        subscription = await self.subscriptions.upsert(
            account_id,
            "active",
            plan_id,
            start,
            start + delta,
            provider_subscription_id=_field(session_obj, "subscription"),
        )
        logger.info(f"Checkout completed for account {account_id}: {plan_id} ({cycle})")
        return subscription

    async def _locate(self, sub_obj: Any) -> tuple[Optional[UUID], Optional[Subscription]]:
        provider_id = _field(sub_obj, "id")
        existing = (
            await self.subscriptions.get_by_provider_id(provider_id) if provider_id else None
        )
        if existing is not None:
            return existing.account_id, existing
        account_id = _parse_account_id(_field(_field(sub_obj, "metadata"), "account_id"))
        return await self._known_account(account_id), None

    async def _subscription_changed(
        self, sub_obj: Any, status: Optional[str] = None
    ) -> Optional[Subscription]:
        account_id, existing = await self._locate(sub_obj)
        if account_id is None:
            return None

        items = _field(_field(sub_obj, "items"), "data", [])
        item = items[0] if items else None
        price_id = _field(_field(item, "price"), "id")
        plan_id = _resolve_plan_id(price_id or _field(_field(sub_obj, "metadata"), "plan_id"))
        if plan_id is None and existing is not None:
            plan_id = existing.plan_id

        # Newer API versions report the billing period on the subscription item
        period_start = _timestamp_date(
            _field(sub_obj, "current_period_start", _field(item, "current_period_start"))
        )
        period_end = _timestamp_date(
            _field(sub_obj, "current_period_end", _field(item, "current_period_end"))
        )

        new_status = status or map_provider_status(_field(sub_obj, "status"))
        previous = existing.status if existing is not None else "not_started"
        subscription = await self.subscriptions.upsert(
            account_id,
            new_status,
            plan_id,
            period_start,
            period_end,
            provider_subscription_id=_field(sub_obj, "id"),
            cancel_at_period_end=bool(_field(sub_obj, "cancel_at_period_end", False)),
        )
        logger.info(f"Subscription for account {account_id}: {previous} -> {new_status}")
        return subscription

    async def _subscription_deleted(self, sub_obj: Any) -> Optional[Subscription]:
        return await self._subscription_changed(sub_obj, status="canceled")

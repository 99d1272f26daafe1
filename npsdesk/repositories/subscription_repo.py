"""Repository utilities for account subscriptions."""
from __future__ import annotations

import datetime as dt
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from npsdesk.db.models.subscription import SUBSCRIPTION_STATUSES, Subscription


class SubscriptionRepo:
    """Data-access helpers for :class:`Subscription`."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get(self, account_id: UUID) -> Subscription | None:
        return await self.session.get(Subscription, account_id)

    async def get_by_provider_id(self, provider_subscription_id: str) -> Subscription | None:
        result = await self.session.execute(
            select(Subscription).where(
                Subscription.provider_subscription_id == provider_subscription_id
            )
        )
        return result.scalar_one_or_none()

    async def upsert(
        self,
        account_id: UUID,
        status: str,
        plan_id: str | None,
        period_start: dt.date | None,
        period_end: dt.date | None,
        *,
        provider_subscription_id: str | None = None,
        cancel_at_period_end: bool = False,
    ) -> Subscription:
        if status not in SUBSCRIPTION_STATUSES:
            raise ValueError(f"Unknown subscription status: {status!r}")

        subscription = await self.session.get(Subscription, account_id)
        if subscription is None:
            subscription = Subscription(account_id=account_id)
            self.session.add(subscription)

        subscription.status = status
        subscription.plan_id = plan_id
        subscription.current_period_start = period_start
        subscription.current_period_end = period_end
        subscription.cancel_at_period_end = cancel_at_period_end
        if provider_subscription_id is not None:
            subscription.provider_subscription_id = provider_subscription_id

        await self.session.flush()
        await self.session.refresh(subscription)
        return subscription

    async def set_cancel_at_period_end(
        self, subscription: Subscription, cancel: bool
    ) -> Subscription:
        subscription.cancel_at_period_end = cancel
        self.session.add(subscription)
        await self.session.flush()
        return subscription

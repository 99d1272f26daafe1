"""Read-only account data source used by the entitlement evaluators."""
from __future__ import annotations

from typing import Any, Optional, Protocol, Sequence
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from npsdesk.repositories.account_repo import AccountRepo
from npsdesk.repositories.campaign_repo import CampaignRepo
from npsdesk.repositories.response_repo import ResponseRepo
from npsdesk.repositories.subscription_repo import SubscriptionRepo


class EntitlementBackend(Protocol):
    """Where account, subscription, campaign and response records come from.

    Records only need the attributes the evaluators read: ``created_at`` on
    accounts and responses, ``id`` on campaigns, ``status``/``plan_id`` on
    subscriptions.
    """

    async def get_account(self, account_id: UUID) -> Optional[Any]: ...

    async def get_subscription(self, account_id: UUID) -> Optional[Any]: ...

    async def list_campaigns(self, account_id: UUID) -> Sequence[Any]: ...

    async def list_responses(self, campaign_id: UUID) -> Sequence[Any]: ...


class RepositoryBackend:
    """:class:`EntitlementBackend` over the SQLAlchemy repositories."""

    def __init__(self, session: AsyncSession) -> None:
        self.accounts = AccountRepo(session)
        self.subscriptions = SubscriptionRepo(session)
        self.campaigns = CampaignRepo(session)
        self.responses = ResponseRepo(session)

    async def get_account(self, account_id: UUID):
        return await self.accounts.get(account_id)

    async def get_subscription(self, account_id: UUID):
        return await self.subscriptions.get(account_id)

    async def list_campaigns(self, account_id: UUID):
        return await self.campaigns.list_for_account(account_id)

    async def list_responses(self, campaign_id: UUID):
        return await self.responses.list_for_campaign(campaign_id)

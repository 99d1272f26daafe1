"""Repository utilities for working with Campaign records."""
from datetime import date
from typing import List, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from npsdesk.db.models.campaign import Campaign


class CampaignRepo:
    """Simple data-access helper for Campaign entities."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get_by_id(self, campaign_id: UUID) -> Optional[Campaign]:
        result = await self.session.execute(
            select(Campaign).where(Campaign.id == campaign_id)
        )
        return result.scalar_one_or_none()

    async def list_for_account(self, account_id: UUID) -> List[Campaign]:
        result = await self.session.execute(
            select(Campaign)
            .where(Campaign.account_id == account_id)
            .order_by(Campaign.created_at)
        )
        return list(result.scalars().all())

    async def create(
        self,
        account_id: UUID,
        name: str,
        description: Optional[str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> Campaign:
        campaign = Campaign(
            account_id=account_id,
            name=name,
            description=description,
            start_date=start_date or date.today(),
            end_date=end_date,
        )
        self.session.add(campaign)
        await self.session.flush()
        return campaign


"""Repository helpers for survey responses."""
from __future__ import annotations

from typing import List, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from npsdesk.db.models.response import NpsResponse


class ResponseRepo:
    """Data-access helpers for :class:`NpsResponse`."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def list_for_campaign(self, campaign_id: UUID) -> List[NpsResponse]:
        result = await self.session.execute(
            select(NpsResponse)
            .where(NpsResponse.campaign_id == campaign_id)
            .order_by(NpsResponse.created_at)
        )
        return list(result.scalars().all())

    async def create(
        self,
        campaign_id: UUID,
        score: int,
        feedback: Optional[str] = None,
        source: Optional[str] = None,
        idempotency_key: Optional[str] = None,
    ) -> NpsResponse:
        response = NpsResponse(
            campaign_id=campaign_id,
            score=score,
            feedback=feedback,
            source=source,
            idempotency_key=idempotency_key,
        )
        self.session.add(response)
        await self.session.flush()
        return response

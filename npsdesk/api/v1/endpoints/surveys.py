"""Public survey endpoint receiving respondent answers."""
from __future__ import annotations

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, Header, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from npsdesk.api.deps import get_db_session, get_entitlement_service
from npsdesk.repositories.campaign_repo import CampaignRepo
from npsdesk.repositories.response_repo import ResponseRepo
from npsdesk.schemas.campaign import ResponseCreate, ResponseRead
from npsdesk.services.entitlements import EntitlementService
from npsdesk.services.limits import check_rate_limit, ensure_idempotent


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/surveys", tags=["surveys"])


@router.post(
    "/{campaign_id}/responses",
    response_model=ResponseRead,
    status_code=status.HTTP_201_CREATED,
)
async def submit_response(
    campaign_id: UUID,
    body: ResponseCreate,
    idempotency_key: str | None = Header(default=None, alias="Idempotency-Key"),
    db: AsyncSession = Depends(get_db_session),
    entitlements: EntitlementService = Depends(get_entitlement_service),
):
    subject = f"survey:{campaign_id}"
    await check_rate_limit(subject)

    campaign = await CampaignRepo(db).get_by_id(campaign_id)
    if not campaign:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Campaign not found")
    if not campaign.active:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Campaign is not accepting responses",
        )

    info = await entitlements.plan_limit_info(campaign.account_id)
    if not info.can_receive_response:
        logger.info(
            f"Response rejected for campaign {campaign_id}: account "
            f"{campaign.account_id} is over its monthly quota"
        )
        raise HTTPException(
            status_code=status.HTTP_402_PAYMENT_REQUIRED,
            detail="This survey is not accepting more responses this month.",
        )

    await ensure_idempotent(subject, idempotency_key)

    return await ResponseRepo(db).create(
        campaign_id,
        body.score,
        feedback=body.feedback,
        source=body.source,
        idempotency_key=idempotency_key,
    )

"""Endpoints for account-owned campaigns and their results."""
from __future__ import annotations

from datetime import datetime, timezone
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from npsdesk.api.deps import get_db_session, get_entitlement_service
from npsdesk.auth.jwt import require_auth
from npsdesk.repositories.campaign_repo import CampaignRepo
from npsdesk.repositories.response_repo import ResponseRepo
from npsdesk.schemas.campaign import (
    CampaignCreate,
    CampaignRead,
    NpsSummary,
    ResponseRead,
    SourceBreakdown,
)
from npsdesk.services.entitlements import EntitlementService
from npsdesk.services.limits import check_rate_limit
from npsdesk.services.nps import (
    calculate_nps,
    categorize,
    nps_over_time,
    responses_by_source,
    score_histogram,
)


router = APIRouter(prefix="/campaigns", tags=["campaigns"])


async def _owned_campaign(repo: CampaignRepo, campaign_id: UUID, account_id: UUID):
    campaign = await repo.get_by_id(campaign_id)
    if not campaign or campaign.account_id != account_id:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Campaign not found")
    return campaign


@router.get("", response_model=List[CampaignRead])
async def list_campaigns(
    auth=Depends(require_auth),
    db: AsyncSession = Depends(get_db_session),
):
    account_id = auth["account_id"]
    await check_rate_limit(str(account_id))
    return await CampaignRepo(db).list_for_account(account_id)


@router.post("", response_model=CampaignRead, status_code=status.HTTP_201_CREATED)
async def create_campaign(
    body: CampaignCreate,
    auth=Depends(require_auth),
    db: AsyncSession = Depends(get_db_session),
    entitlements: EntitlementService = Depends(get_entitlement_service),
):
    account_id = auth["account_id"]
    await check_rate_limit(str(account_id))

    info = await entitlements.plan_limit_info(account_id)
    if info.upgrade_required:
        raise HTTPException(
            status_code=status.HTTP_402_PAYMENT_REQUIRED,
            detail="Trial expired. Subscribe to a plan to continue.",
        )
    if not info.can_create_campaign:
        raise HTTPException(
            status_code=status.HTTP_402_PAYMENT_REQUIRED,
            detail="Campaign limit reached for your plan. Upgrade to create more campaigns.",
        )

    if body.end_date and body.start_date and body.end_date < body.start_date:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="end_date must not be before start_date",
        )

    return await CampaignRepo(db).create(
        account_id,
        body.name,
        description=body.description,
        start_date=body.start_date,
        end_date=body.end_date,
    )


@router.get("/{campaign_id}/responses", response_model=List[ResponseRead])
async def list_responses(
    campaign_id: UUID,
    auth=Depends(require_auth),
    db: AsyncSession = Depends(get_db_session),
):
    account_id = auth["account_id"]
    await check_rate_limit(str(account_id))
    await _owned_campaign(CampaignRepo(db), campaign_id, account_id)
    return await ResponseRepo(db).list_for_campaign(campaign_id)


@router.get("/{campaign_id}/nps", response_model=NpsSummary)
async def campaign_nps(
    campaign_id: UUID,
    auth=Depends(require_auth),
    db: AsyncSession = Depends(get_db_session),
):
    account_id = auth["account_id"]
    await check_rate_limit(str(account_id))
    await _owned_campaign(CampaignRepo(db), campaign_id, account_id)

    responses = await ResponseRepo(db).list_for_campaign(campaign_id)
    scores = [r.score for r in responses]
    counts = categorize(scores)
    return NpsSummary(
        campaign_id=campaign_id,
        nps=calculate_nps(scores),
        promoters=counts["promoters"],
        passives=counts["passives"],
        detractors=counts["detractors"],
        total=counts["total"],
        by_score=score_histogram(scores),
        by_source={
            source: SourceBreakdown(
                total=len(grouped), nps=calculate_nps(r.score for r in grouped)
            )
            for source, grouped in responses_by_source(responses).items()
        },
        over_time=nps_over_time(responses, datetime.now(timezone.utc)),
    )

"""Endpoints exposing trial, subscription and plan-limit state."""
from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, Request
from fastapi.responses import StreamingResponse
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from npsdesk.api.deps import get_entitlement_service
from npsdesk.auth.jwt import require_auth
from npsdesk.db.session import get_session_factory
from npsdesk.schemas.entitlement import PlanLimitInfo, SubscriptionState, TrialInfo
from npsdesk.services.backend import RepositoryBackend
from npsdesk.services.countdown import watch_trial
from npsdesk.services.entitlements import EntitlementService
from npsdesk.services.limits import check_rate_limit


router = APIRouter(prefix="/entitlements", tags=["entitlements"])


@router.get("/trial", response_model=TrialInfo)
async def trial_info(
    auth=Depends(require_auth),
    service: EntitlementService = Depends(get_entitlement_service),
):
    account_id = auth["account_id"]
    await check_rate_limit(str(account_id))
    return await service.trial_info(account_id)


@router.get("/trial/stream")
async def trial_stream(
    request: Request,
    auth=Depends(require_auth),
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
):
    """Server-sent events with the trial countdown, refreshed periodically."""

    account_id: UUID = auth["account_id"]
    await check_rate_limit(str(account_id))

    async def _load() -> TrialInfo:
        # Each tick reads a fresh snapshot in its own session
        async with session_factory() as session:
            return await EntitlementService(RepositoryBackend(session)).trial_info(account_id)

    async def _events():
        async for info in watch_trial(_load):
            if await request.is_disconnected():
                break
            yield f"data: {info.model_dump_json()}\n\n"

    return StreamingResponse(_events(), media_type="text/event-stream")


@router.get("/limits", response_model=PlanLimitInfo)
async def plan_limits(
    auth=Depends(require_auth),
    service: EntitlementService = Depends(get_entitlement_service),
):
    account_id = auth["account_id"]
    await check_rate_limit(str(account_id))
    return await service.plan_limit_info(account_id)


@router.get("/subscription", response_model=SubscriptionState)
async def subscription_state(
    auth=Depends(require_auth),
    service: EntitlementService = Depends(get_entitlement_service),
):
    account_id = auth["account_id"]
    await check_rate_limit(str(account_id))
    return await service.subscription_state(account_id)

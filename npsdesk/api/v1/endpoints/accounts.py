"""Endpoints for managing accounts (bootstrap utilities)."""
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from npsdesk.api.deps import get_db_session
from npsdesk.auth.jwt import create_access_token, require_auth
from npsdesk.repositories.account_repo import AccountRepo
from npsdesk.schemas.account import AccountCreate, AccountRead


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/accounts", tags=["accounts"])


@router.post("/create", status_code=status.HTTP_201_CREATED)
async def create_account(
    body: AccountCreate,
    db: AsyncSession = Depends(get_db_session),
):
    repo = AccountRepo(db)
    if await repo.get_by_email(body.email):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Account already exists",
        )

    account = await repo.create(email=body.email, name=body.name)
    return {
        "account": AccountRead.model_validate(account).model_dump(mode="json"),
        "access_token": create_access_token(account.id),
        "token_type": "bearer",
    }


@router.post("/deactivate")
async def deactivate_account(
    auth=Depends(require_auth),
    db: AsyncSession = Depends(get_db_session),
):
    """Deactivate the calling account; it keeps no entitlements afterwards."""

    repo = AccountRepo(db)
    account = await repo.get(auth["account_id"])
    if account is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Account not found")

    await repo.deactivate(account)
    logger.info(f"Account {account.id} deactivated")
    return {"account_id": str(account.id), "is_deactivated": True}

"""Endpoints for an account's contact book and its segments."""
from __future__ import annotations

import logging
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from npsdesk.api.deps import get_db_session
from npsdesk.auth.jwt import require_auth
from npsdesk.repositories.contact_repo import ContactRepo
from npsdesk.schemas.contact import ContactCreate, ContactRead, ContactUpdate, SegmentSummary
from npsdesk.services.limits import check_rate_limit
from npsdesk.services.segments import filter_contacts, summarize_segments


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/contacts", tags=["contacts"])


async def _owned_contact(repo: ContactRepo, contact_id: UUID, account_id: UUID):
    contact = await repo.get_owned(contact_id, account_id)
    if contact is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Contact not found")
    return contact


@router.get("", response_model=List[ContactRead])
async def list_contacts(
    q: Optional[str] = Query(None, description="Search name, e-mail, phone or company"),
    group: Optional[List[str]] = Query(None, description="Keep contacts in any of these groups"),
    tag: Optional[List[str]] = Query(None, description="Keep contacts carrying all of these tags"),
    auth=Depends(require_auth),
    db: AsyncSession = Depends(get_db_session),
):
    account_id = auth["account_id"]
    await check_rate_limit(str(account_id))
    contacts = await ContactRepo(db).list_for_account(account_id, search=q)
    return filter_contacts(contacts, groups=group, tags=tag)


@router.get("/segments", response_model=SegmentSummary)
async def contact_segments(
    auth=Depends(require_auth),
    db: AsyncSession = Depends(get_db_session),
):
    account_id = auth["account_id"]
    await check_rate_limit(str(account_id))
    return summarize_segments(await ContactRepo(db).list_for_account(account_id))


@router.post("", response_model=ContactRead, status_code=status.HTTP_201_CREATED)
async def create_contact(
    body: ContactCreate,
    auth=Depends(require_auth),
    db: AsyncSession = Depends(get_db_session),
):
    account_id = auth["account_id"]
    await check_rate_limit(str(account_id))
    contact = await ContactRepo(db).create(account_id, **body.model_dump())
    logger.info(f"Created contact {contact.id} for account {account_id}")
    return contact


@router.put("/{contact_id}", response_model=ContactRead)
async def update_contact(
    contact_id: UUID,
    body: ContactUpdate,
    auth=Depends(require_auth),
    db: AsyncSession = Depends(get_db_session),
):
    account_id = auth["account_id"]
    await check_rate_limit(str(account_id))
    repo = ContactRepo(db)
    contact = await _owned_contact(repo, contact_id, account_id)
    return await repo.update(contact, **body.model_dump())


@router.delete("/{contact_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_contact(
    contact_id: UUID,
    auth=Depends(require_auth),
    db: AsyncSession = Depends(get_db_session),
):
    account_id = auth["account_id"]
    await check_rate_limit(str(account_id))
    repo = ContactRepo(db)
    contact = await _owned_contact(repo, contact_id, account_id)
    await repo.delete(contact)
    logger.info(f"Deleted contact {contact_id} for account {account_id}")
    return Response(status_code=status.HTTP_204_NO_CONTENT)

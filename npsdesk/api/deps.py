"""Shared FastAPI dependencies."""
from typing import AsyncGenerator

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from npsdesk.db.session import get_db
from npsdesk.services.backend import RepositoryBackend
from npsdesk.services.entitlements import EntitlementService


async def get_db_session(
    session: AsyncSession = Depends(get_db),
) -> AsyncGenerator[AsyncSession, None]:
    yield session


def get_entitlement_service(
    db: AsyncSession = Depends(get_db_session),
) -> EntitlementService:
    return EntitlementService(RepositoryBackend(db))

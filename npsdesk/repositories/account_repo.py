"""Repository for account records."""
from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from npsdesk.db.models.account import Account


class AccountRepo:
    """Data-access helpers for :class:`Account`."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get(self, account_id: UUID) -> Account | None:
        result = await self.session.execute(
            select(Account).where(Account.id == account_id)
        )
        return result.scalar_one_or_none()

    async def get_by_email(self, email: str) -> Account | None:
        result = await self.session.execute(
            select(Account).where(Account.email == email)
        )
        return result.scalar_one_or_none()

    async def create(
        self, email: str, name: str = "", created_at: datetime | None = None
    ) -> Account:
        account = Account(email=email, name=name)
        if created_at is not None:
            account.created_at = created_at
        self.session.add(account)
        await self.session.flush()
        return account

    async def deactivate(self, account: Account) -> Account:
        account.is_deactivated = True
        self.session.add(account)
        await self.session.flush()
        return account

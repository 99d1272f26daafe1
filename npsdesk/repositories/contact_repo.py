"""Repository helpers for account contacts."""
from __future__ import annotations

from typing import Any, List, Optional
from uuid import UUID

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from npsdesk.db.models.contact import Contact


class ContactRepo:
    """Data-access helpers for :class:`Contact`."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get_owned(self, contact_id: UUID, account_id: UUID) -> Optional[Contact]:
        result = await self.session.execute(
            select(Contact).where(Contact.id == contact_id, Contact.account_id == account_id)
        )
        return result.scalar_one_or_none()

    async def list_for_account(
        self, account_id: UUID, search: Optional[str] = None
    ) -> List[Contact]:
        """Contacts ordered by name, optionally matching ``search`` in any text field."""

        stmt = select(Contact).where(Contact.account_id == account_id)
        if search:
            pattern = f"%{search.lower()}%"
            stmt = stmt.where(
                or_(
                    func.lower(Contact.name).like(pattern),
                    func.lower(Contact.email).like(pattern),
                    func.lower(Contact.phone).like(pattern),
                    func.lower(Contact.company).like(pattern),
                )
            )
        result = await self.session.execute(stmt.order_by(Contact.name))
        return list(result.scalars().all())

    async def create(self, account_id: UUID, **fields: Any) -> Contact:
        contact = Contact(account_id=account_id, **fields)
        self.session.add(contact)
        await self.session.flush()
        return contact

    async def update(self, contact: Contact, **fields: Any) -> Contact:
        for name, value in fields.items():
            setattr(contact, name, value)
        self.session.add(contact)
        await self.session.flush()
        return contact

    async def delete(self, contact: Contact) -> None:
        await self.session.delete(contact)
        await self.session.flush()

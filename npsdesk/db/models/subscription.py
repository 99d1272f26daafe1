"""Subscription model holding the billing state of an account."""
from __future__ import annotations

import datetime as dt
import uuid
from typing import Optional

from sqlalchemy import Boolean, CheckConstraint, Date, ForeignKey, String
from sqlalchemy.dialects.postgresql import UUID as PGUUID
from sqlalchemy.orm import Mapped, mapped_column

from npsdesk.db.base import Base


SUBSCRIPTION_STATUSES = ("not_started", "trialing", "active", "past_due", "canceled")


class Subscription(Base):
    """Zero-or-one billing subscription per account, only ever status-transitioned."""

    __tablename__ = "subscriptions"

    account_id: Mapped[uuid.UUID] = mapped_column(
        PGUUID(as_uuid=True), ForeignKey("accounts.id"), primary_key=True
    )
    status: Mapped[str] = mapped_column(String, nullable=False, default="not_started")
    plan_id: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    provider_subscription_id: Mapped[Optional[str]] = mapped_column(
        String, nullable=True, unique=True, index=True
    )
    current_period_start: Mapped[Optional[dt.date]] = mapped_column(Date, nullable=True)
    current_period_end: Mapped[Optional[dt.date]] = mapped_column(Date, nullable=True)
    cancel_at_period_end: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False
    )

    __table_args__ = (
        CheckConstraint(
            "status IN ({})".format(", ".join(f"'{s}'" for s in SUBSCRIPTION_STATUSES)),
            name="ck_subscriptions_status",
        ),
    )

    def __repr__(self) -> str:  # pragma: no cover - debug helper
        return f"<Subscription account={self.account_id} status={self.status} plan={self.plan_id}>"

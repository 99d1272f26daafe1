"""Pydantic schemas describing trial, subscription and plan-limit state."""
from datetime import date, datetime
from typing import Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

UNLIMITED = "unlimited"

Quota = Union[int, Literal["unlimited"]]


class TrialInfo(BaseModel):
    """Trial countdown derived from the account creation time."""

    model_config = ConfigDict(frozen=True)

    is_trial_active: bool = False
    is_trial_expired: bool = False
    days_remaining: int = 0
    hours_remaining: int = 0
    minutes_remaining: int = 0
    trial_start: Optional[datetime] = None
    trial_end: Optional[datetime] = None


class SubscriptionState(BaseModel):
    """Billing state derived from the subscription record."""

    model_config = ConfigDict(frozen=True)

    status: str = "not_started"
    plan_id: Optional[str] = None
    is_active: bool = False
    is_past_due: bool = False
    is_canceled: bool = False
    cancel_at_period_end: bool = False
    current_period_end: Optional[date] = None


class PlanLimits(BaseModel):
    """Quotas granted by a plan tier."""

    model_config = ConfigDict(frozen=True)

    campaigns: Quota = Field(..., description="Campaign quota")
    responses_per_month: Quota = Field(..., description="Monthly response quota")
    users: Quota = Field(..., description="Seat quota")


class UsageSnapshot(BaseModel):
    """Counted usage at evaluation time; never persisted."""

    model_config = ConfigDict(frozen=True)

    campaigns: int = 0
    responses_this_month: int = 0
    users: int = 1


class PlanLimitInfo(BaseModel):
    """Entitlement gate output consumed by clients."""

    limits: PlanLimits
    usage: UsageSnapshot
    can_create_campaign: bool
    can_receive_response: bool
    is_trial_active: bool
    plan_name: str
    upgrade_required: bool
    recommended_plan: Optional[str] = Field(
        default=None, description="Suggested tier to upgrade to, if any"
    )


class PlanRead(BaseModel):
    """Catalogue entry for a paid plan."""

    id: str
    name: str
    price_id: Optional[str] = None
    price_cents: Optional[int] = None
    currency: str = "BRL"
    limits: PlanLimits

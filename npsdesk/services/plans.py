"""Plan tiers and the static quota table."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional
from uuid import UUID

from npsdesk.core.exceptions import UnknownPlanError
from npsdesk.schemas.entitlement import UNLIMITED, PlanLimits, Quota

logger = logging.getLogger(__name__)


class PlanTier(str, Enum):
    NONE = "none"
    TRIAL = "trial"
    STARTER = "starter"
    PROFESSIONAL = "professional"
    ENTERPRISE = "enterprise"

    @property
    def rank(self) -> int:
        return _TIER_ORDER.index(self)


_TIER_ORDER = [
    PlanTier.NONE,
    PlanTier.TRIAL,
    PlanTier.STARTER,
    PlanTier.PROFESSIONAL,
    PlanTier.ENTERPRISE,
]

PAID_TIERS = (PlanTier.STARTER, PlanTier.PROFESSIONAL, PlanTier.ENTERPRISE)


@dataclass(frozen=True)
class PlanDefinition:
    tier: PlanTier
    name: str
    limits: PlanLimits
    price_id: Optional[str] = None
    price_cents: Optional[int] = None


# Quotas must not decrease as the tier rank increases.
PLAN_TABLE: Dict[PlanTier, PlanDefinition] = {
    PlanTier.NONE: PlanDefinition(
        tier=PlanTier.NONE,
        name="No active plan",
        limits=PlanLimits(campaigns=0, responses_per_month=0, users=0),
    ),
    PlanTier.TRIAL: PlanDefinition(
        tier=PlanTier.TRIAL,
        name="Trial period",
        limits=PlanLimits(campaigns=2, responses_per_month=100, users=1),
    ),
    PlanTier.STARTER: PlanDefinition(
        tier=PlanTier.STARTER,
        name="Iniciante",
        limits=PlanLimits(campaigns=2, responses_per_month=500, users=1),
        price_id="price_starter",
        price_cents=4900,
    ),
    PlanTier.PROFESSIONAL: PlanDefinition(
        tier=PlanTier.PROFESSIONAL,
        name="Profissional",
        limits=PlanLimits(campaigns=UNLIMITED, responses_per_month=2500, users=5),
        price_id="price_professional",
        price_cents=9900,
    ),
    PlanTier.ENTERPRISE: PlanDefinition(
        tier=PlanTier.ENTERPRISE,
        name="Empresarial",
        limits=PlanLimits(
            campaigns=UNLIMITED, responses_per_month=UNLIMITED, users=UNLIMITED
        ),
        price_id="price_enterprise",
        price_cents=24900,
    ),
}


@dataclass(frozen=True)
class ResolvedPlan:
    tier: PlanTier
    name: str
    limits: PlanLimits


def lookup_paid_tier(plan_id: Optional[str]) -> Optional[PlanTier]:
    """Match a plan identifier against tier values, price ids and plan names.

    Only exact matches count; a name merely containing a tier name is not
    a match.
    """
    if not plan_id:
        return None
    key = plan_id.strip().lower()
    for tier in PAID_TIERS:
        definition = PLAN_TABLE[tier]
        candidates = {tier.value, definition.name.lower()}
        if definition.price_id:
            candidates.add(definition.price_id.lower())
        if key in candidates:
            return tier
    return None


def resolve_plan_limits(
    *,
    subscription_active: bool,
    plan_id: Optional[str],
    trial_active: bool,
    account_id: Optional[UUID] = None,
) -> ResolvedPlan:
    """Return the quotas in force for an account.

    Paid plans win over the trial; an unknown paid plan falls back to trial
    quotas; no plan and no trial resolves to all-zero quotas.
    """
    if subscription_active:
        tier = lookup_paid_tier(plan_id)
        if tier is None:
            error = UnknownPlanError(plan_id, account_id=account_id)
            logger.warning(f"{error.message} (account={account_id}), using trial limits")
            trial = PLAN_TABLE[PlanTier.TRIAL]
            return ResolvedPlan(tier=PlanTier.TRIAL, name=trial.name, limits=trial.limits)
        definition = PLAN_TABLE[tier]
        return ResolvedPlan(tier=tier, name=definition.name, limits=definition.limits)

    tier = PlanTier.TRIAL if trial_active else PlanTier.NONE
    definition = PLAN_TABLE[tier]
    return ResolvedPlan(tier=tier, name=definition.name, limits=definition.limits)


def is_within_quota(used: int, quota: Quota) -> bool:
    """True when one more unit fits under ``quota``."""

    if quota == UNLIMITED:
        return True
    return used < int(quota)


def next_tier_above(tier: PlanTier) -> PlanTier:
    """The next paid tier above ``tier``, capped at enterprise."""

    for candidate in PAID_TIERS:
        if candidate.rank > tier.rank:
            return candidate
    return PlanTier.ENTERPRISE

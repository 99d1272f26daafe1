"""
Entitlement gate: combine trial, subscription, plan limits and usage into
the permissions and upgrade hints served to clients.

Every evaluation reads a fresh snapshot from the backend. Failures to load
data never raise to the caller; they resolve to the most restrictive state.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Optional
from uuid import UUID

from npsdesk.core.config import settings
from npsdesk.core.exceptions import (
    AccountDeactivatedError,
    EntitlementFetchError,
    MissingAccountDataError,
)
from npsdesk.core.result import Failure, Result, Success
from npsdesk.schemas.entitlement import (
    PlanLimitInfo,
    SubscriptionState,
    TrialInfo,
    UsageSnapshot,
)
from npsdesk.services.backend import EntitlementBackend
from npsdesk.services.plans import (
    PAID_TIERS,
    PlanTier,
    is_within_quota,
    next_tier_above,
    resolve_plan_limits,
)
from npsdesk.services.subscription_state import evaluate_subscription
from npsdesk.services.trial import evaluate_trial, expired_trial_info
from npsdesk.services.usage import accumulate_usage

logger = logging.getLogger(__name__)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class AccountSnapshot:
    account: Any
    subscription: Optional[Any]


async def load_account_snapshot(
    backend: EntitlementBackend, account_id: UUID
) -> Result[AccountSnapshot]:
    """Load the account and its subscription without raising."""

    try:
        account = await backend.get_account(account_id)
        subscription = await backend.get_subscription(account_id)
    except Exception as exc:
        logger.error(f"Failed to load entitlement data for account {account_id}: {exc}")
        return Failure(EntitlementFetchError(str(exc), account_id=account_id))

    if account is None or getattr(account, "created_at", None) is None:
        return Failure(
            MissingAccountDataError(
                "Account missing or without creation timestamp", account_id=account_id
            )
        )
    if getattr(account, "is_deactivated", False):
        return Failure(AccountDeactivatedError("Account is deactivated", account_id=account_id))
    return Success(AccountSnapshot(account=account, subscription=subscription))


def trial_from_snapshot(snapshot: Result[AccountSnapshot], now: datetime) -> TrialInfo:
    if not snapshot.ok:
        logger.warning(
            f"Treating trial as expired for account {snapshot.error.account_id}: "
            f"{snapshot.error.message}"
        )
        return expired_trial_info()
    subscription = evaluate_subscription(snapshot.value.subscription)
    return evaluate_trial(snapshot.value.account.created_at, now, subscription.status)


def recommend_plan(
    *,
    tier: PlanTier,
    can_create_campaign: bool,
    can_receive_response: bool,
    upgrade_required: bool,
    responses_this_month: int,
    threshold: Optional[int] = None,
) -> Optional[PlanTier]:
    """Suggest a tier to upgrade to. Presentation guidance only, never enforced."""

    if threshold is None:
        threshold = settings.entitlements.response_upgrade_threshold

    if upgrade_required:
        candidate = PlanTier.STARTER
    elif not can_create_campaign:
        candidate = PlanTier.PROFESSIONAL
    elif not can_receive_response:
        if responses_this_month > threshold:
            candidate = PlanTier.PROFESSIONAL
        else:
            candidate = PlanTier.STARTER
    else:
        return None

    if tier in PAID_TIERS and candidate.rank <= tier.rank:
        candidate = next_tier_above(tier)
    return candidate


def evaluate_entitlements(
    trial: TrialInfo,
    subscription: SubscriptionState,
    usage: Result[UsageSnapshot],
    *,
    account_id: Optional[UUID] = None,
) -> PlanLimitInfo:
    """Combine the evaluator outputs into :class:`PlanLimitInfo`."""

    resolved = resolve_plan_limits(
        subscription_active=subscription.is_active,
        plan_id=subscription.plan_id,
        trial_active=trial.is_trial_active,
        account_id=account_id,
    )

    if usage.ok:
        snapshot = usage.value
        can_create_campaign = is_within_quota(snapshot.campaigns, resolved.limits.campaigns)
        can_receive_response = is_within_quota(
            snapshot.responses_this_month, resolved.limits.responses_per_month
        )
    else:
        snapshot = UsageSnapshot()
        can_create_campaign = False
        can_receive_response = False

    upgrade_required = not subscription.is_active and not trial.is_trial_active
    recommended = recommend_plan(
        tier=resolved.tier,
        can_create_campaign=can_create_campaign,
        can_receive_response=can_receive_response,
        upgrade_required=upgrade_required,
        responses_this_month=snapshot.responses_this_month,
    )

    return PlanLimitInfo(
        limits=resolved.limits,
        usage=snapshot,
        can_create_campaign=can_create_campaign,
        can_receive_response=can_receive_response,
        is_trial_active=trial.is_trial_active,
        plan_name=resolved.name,
        upgrade_required=upgrade_required,
        recommended_plan=recommended.value if recommended else None,
    )


class EntitlementService:
    """Evaluate entitlements for one account against an injected backend."""

    def __init__(
        self,
        backend: EntitlementBackend,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.backend = backend
        self.clock = clock

    async def trial_info(self, account_id: UUID) -> TrialInfo:
        snapshot = await load_account_snapshot(self.backend, account_id)
        return trial_from_snapshot(snapshot, self.clock())

    async def subscription_state(self, account_id: UUID) -> SubscriptionState:
        snapshot = await load_account_snapshot(self.backend, account_id)
        if not snapshot.ok:
            return SubscriptionState()
        return evaluate_subscription(snapshot.value.subscription)

    async def plan_limit_info(self, account_id: UUID) -> PlanLimitInfo:
        now = self.clock()
        snapshot = await load_account_snapshot(self.backend, account_id)
        trial = trial_from_snapshot(snapshot, now)
        if snapshot.ok:
            subscription = evaluate_subscription(snapshot.value.subscription)
            usage = await accumulate_usage(self.backend, account_id, now)
        else:
            # Without an account there is nothing to count; zero quotas block anyway
            subscription = SubscriptionState()
            usage = Success(UsageSnapshot())
        return evaluate_entitlements(trial, subscription, usage, account_id=account_id)

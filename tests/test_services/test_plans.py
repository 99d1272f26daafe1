from uuid import uuid4

import pytest

from npsdesk.schemas.entitlement import UNLIMITED
from npsdesk.services.plans import (
    PAID_TIERS,
    PLAN_TABLE,
    PlanTier,
    is_within_quota,
    lookup_paid_tier,
    next_tier_above,
    resolve_plan_limits,
)


def _as_number(quota):
    return float("inf") if quota == UNLIMITED else quota


def test_every_tier_has_complete_limits():
    for tier in PlanTier:
        limits = PLAN_TABLE[tier].limits
        for quota in (limits.campaigns, limits.responses_per_month, limits.users):
            assert quota == UNLIMITED or (isinstance(quota, int) and quota >= 0)


def test_quotas_do_not_decrease_with_tier_rank():
    ordered = sorted(PlanTier, key=lambda tier: tier.rank)
    for lower, higher in zip(ordered, ordered[1:]):
        low, high = PLAN_TABLE[lower].limits, PLAN_TABLE[higher].limits
        for field in ("campaigns", "responses_per_month", "users"):
            assert _as_number(getattr(low, field)) <= _as_number(getattr(high, field))


@pytest.mark.parametrize(
    "plan_id, tier",
    [
        ("professional", PlanTier.PROFESSIONAL),
        ("Profissional", PlanTier.PROFESSIONAL),
        ("price_professional", PlanTier.PROFESSIONAL),
        (" iniciante ", PlanTier.STARTER),
        ("ENTERPRISE", PlanTier.ENTERPRISE),
        ("Empresarial", PlanTier.ENTERPRISE),
    ],
)
def test_lookup_by_tier_price_or_name(plan_id, tier):
    assert lookup_paid_tier(plan_id) is tier


@pytest.mark.parametrize("plan_id", [None, "", "trial", "none", "Meu NPS - Profissional", "gold"])
def test_lookup_rejects_partial_and_unknown_names(plan_id):
    assert lookup_paid_tier(plan_id) is None


def test_active_subscription_uses_plan_quotas():
    resolved = resolve_plan_limits(
        subscription_active=True, plan_id="professional", trial_active=False
    )

    assert resolved.tier is PlanTier.PROFESSIONAL
    assert resolved.name == "Profissional"
    assert resolved.limits.campaigns == UNLIMITED
    assert resolved.limits.responses_per_month == 2500
    assert resolved.limits.users == 5


def test_unknown_plan_falls_back_to_trial_quotas(caplog):
    resolved = resolve_plan_limits(
        subscription_active=True, plan_id="legacy_gold", trial_active=False
    )

    assert resolved.limits == PLAN_TABLE[PlanTier.TRIAL].limits
    assert "legacy_gold" in caplog.text


def test_unknown_plan_warning_names_the_account(caplog):
    account_id = uuid4()

    resolved = resolve_plan_limits(
        subscription_active=True,
        plan_id="legacy_gold",
        trial_active=False,
        account_id=account_id,
    )

    assert resolved.tier is PlanTier.TRIAL
    assert f"account={account_id}" in caplog.text


def test_trial_without_subscription_uses_trial_quotas():
    resolved = resolve_plan_limits(subscription_active=False, plan_id=None, trial_active=True)

    assert resolved.tier is PlanTier.TRIAL
    assert (resolved.limits.campaigns, resolved.limits.responses_per_month) == (2, 100)


def test_no_plan_and_no_trial_resolves_to_zero():
    resolved = resolve_plan_limits(
        subscription_active=False, plan_id="professional", trial_active=False
    )

    assert resolved.tier is PlanTier.NONE
    assert resolved.limits.model_dump() == {
        "campaigns": 0,
        "responses_per_month": 0,
        "users": 0,
    }


def test_resolution_is_idempotent():
    kwargs = dict(subscription_active=True, plan_id="starter", trial_active=True)

    assert resolve_plan_limits(**kwargs) == resolve_plan_limits(**kwargs)


@pytest.mark.parametrize(
    "used, quota, expected",
    [(0, 0, False), (1, 2, True), (2, 2, False), (3, 2, False), (10_000, UNLIMITED, True)],
)
def test_is_within_quota(used, quota, expected):
    assert is_within_quota(used, quota) is expected


def test_next_tier_above_is_capped():
    assert next_tier_above(PlanTier.TRIAL) is PlanTier.STARTER
    assert next_tier_above(PlanTier.STARTER) is PlanTier.PROFESSIONAL
    assert next_tier_above(PlanTier.ENTERPRISE) is PlanTier.ENTERPRISE
    assert all(tier in PLAN_TABLE for tier in PAID_TIERS)

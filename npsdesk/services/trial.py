"""
Trial window evaluation.

The trial starts at account creation and lasts exactly seven days; it cannot
be extended, paused or reset. An active paid subscription suppresses the
trial entirely.
"""
from datetime import datetime, timedelta, timezone
from typing import Optional, Tuple

from npsdesk.schemas.entitlement import TrialInfo

TRIAL_DURATION = timedelta(days=7)

ACTIVE_STATUS = "active"


def as_utc(value: datetime) -> datetime:
    """Attach UTC to naive datetimes (SQLite drops the offset)."""

    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def trial_window(created_at: datetime) -> Tuple[datetime, datetime]:
    start = as_utc(created_at)
    return start, start + TRIAL_DURATION


def expired_trial_info() -> TrialInfo:
    """Fail-closed trial state used when the account cannot be loaded."""

    return TrialInfo(is_trial_active=False, is_trial_expired=True)


def evaluate_trial(
    created_at: Optional[datetime],
    now: datetime,
    subscription_status: Optional[str] = None,
) -> TrialInfo:
    """
    Compute the trial countdown for an account

    Args:
        created_at: Account creation time; None is treated as an expired trial
        now: Current time
        subscription_status: Raw status of the billing subscription, if any

    Returns:
        TrialInfo with the remaining time split into days, hours within the
        partial day and minutes within the partial hour
    """
    if subscription_status == ACTIVE_STATUS:
        return TrialInfo()

    if created_at is None:
        return expired_trial_info()

    start, end = trial_window(created_at)
    remaining = end - as_utc(now)

    if remaining <= timedelta(0):
        return TrialInfo(
            is_trial_active=False,
            is_trial_expired=True,
            trial_start=start,
            trial_end=end,
        )

    return TrialInfo(
        is_trial_active=True,
        is_trial_expired=False,
        days_remaining=remaining.days,
        hours_remaining=remaining.seconds // 3600,
        minutes_remaining=(remaining.seconds % 3600) // 60,
        trial_start=start,
        trial_end=end,
    )

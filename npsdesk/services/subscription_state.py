"""Map a raw billing subscription record to boolean billing flags."""
from typing import Any, Optional

from npsdesk.schemas.entitlement import SubscriptionState


def evaluate_subscription(subscription: Optional[Any]) -> SubscriptionState:
    """Derive :class:`SubscriptionState` from a subscription record.

    A missing record is reported as ``not_started`` with every flag false.
    """
    if subscription is None:
        return SubscriptionState()

    status = getattr(subscription, "status", None) or "not_started"
    return SubscriptionState(
        status=status,
        plan_id=getattr(subscription, "plan_id", None),
        is_active=status == "active",
        is_past_due=status == "past_due",
        is_canceled=status == "canceled",
        cancel_at_period_end=bool(getattr(subscription, "cancel_at_period_end", False)),
        current_period_end=getattr(subscription, "current_period_end", None),
    )

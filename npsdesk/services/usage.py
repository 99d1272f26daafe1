"""Usage accumulation: campaigns and responses received this calendar month."""
from __future__ import annotations

import logging
from datetime import datetime
from uuid import UUID

from dateutil.relativedelta import relativedelta

from npsdesk.core.exceptions import EntitlementFetchError
from npsdesk.core.result import Failure, Result, Success
from npsdesk.schemas.entitlement import UsageSnapshot
from npsdesk.services.backend import EntitlementBackend
from npsdesk.services.trial import as_utc

logger = logging.getLogger(__name__)


def month_start(now: datetime) -> datetime:
    """First instant of ``now``'s calendar month, in ``now``'s timezone."""

    return now + relativedelta(day=1, hour=0, minute=0, second=0, microsecond=0)


async def accumulate_usage(
    backend: EntitlementBackend, account_id: UUID, now: datetime
) -> Result[UsageSnapshot]:
    """
    Count the account's campaigns and this month's responses

    Responses are fetched campaign by campaign. A failed campaign contributes
    zero and is logged; only a failure to list campaigns fails the snapshot.
    """
    try:
        campaigns = list(await backend.list_campaigns(account_id))
    except Exception as exc:
        logger.error(f"Failed to list campaigns for account {account_id}: {exc}")
        return Failure(EntitlementFetchError(str(exc), account_id=account_id))

    since = month_start(as_utc(now))
    responses_this_month = 0
    for campaign in campaigns:
        try:
            responses = await backend.list_responses(campaign.id)
        except Exception as exc:
            logger.warning(
                f"Failed to list responses for campaign {campaign.id}, counting zero: {exc}"
            )
            continue
        responses_this_month += sum(
            1 for response in responses if as_utc(response.created_at) >= since
        )

    return Success(
        UsageSnapshot(
            campaigns=len(campaigns),
            responses_this_month=responses_this_month,
            users=1,
        )
    )

"""Periodic trial countdown recomputation for streaming clients."""
from __future__ import annotations

import asyncio
import logging
from typing import AsyncIterator, Awaitable, Callable, Optional

from npsdesk.core.config import settings
from npsdesk.schemas.entitlement import TrialInfo

logger = logging.getLogger(__name__)


async def watch_trial(
    load: Callable[[], Awaitable[TrialInfo]],
    interval: Optional[float] = None,
    *,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> AsyncIterator[TrialInfo]:
    """
    Yield fresh trial info now and then every ``interval`` seconds

    Args:
        load: Coroutine factory computing the current TrialInfo
        interval: Seconds between recomputations, defaults to
            settings.entitlements.refresh_interval_seconds
        sleep: Awaitable used to wait between ticks
    """
    period = interval if interval is not None else settings.entitlements.refresh_interval_seconds
    while True:
        info = await load()
        logger.debug(
            f"Trial countdown tick: active={info.is_trial_active} "
            f"{info.days_remaining}d {info.hours_remaining}h {info.minutes_remaining}m"
        )
        yield info
        await sleep(period)

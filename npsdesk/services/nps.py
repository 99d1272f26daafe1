"""NPS scoring helpers."""
import math
from datetime import datetime, timedelta
from typing import Dict, Iterable, List, Sequence

from npsdesk.services.trial import as_utc

PROMOTER_MIN = 9
DETRACTOR_MAX = 6


def categorize(scores: Iterable[int]) -> Dict[str, int]:
    scores = list(scores)
    promoters = sum(1 for s in scores if s >= PROMOTER_MIN)
    detractors = sum(1 for s in scores if s <= DETRACTOR_MAX)
    return {
        "promoters": promoters,
        "passives": len(scores) - promoters - detractors,
        "detractors": detractors,
        "total": len(scores),
    }


def calculate_nps(scores: Iterable[int]) -> int:
    """Percentage of promoters minus percentage of detractors, rounded."""

    counts = categorize(scores)
    if not counts["total"]:
        return 0
    value = (counts["promoters"] - counts["detractors"]) / counts["total"] * 100
    # half-way values round up; round() would round them to even
    return math.floor(value + 0.5)


def score_histogram(scores: Iterable[int]) -> Dict[int, int]:
    histogram = {score: 0 for score in range(11)}
    for score in scores:
        histogram[score] += 1
    return histogram


UNKNOWN_SOURCE = "unknown"


def responses_by_source(responses: Iterable) -> Dict[str, List]:
    """Group responses by the channel they came from, in input order."""

    grouped: Dict[str, List] = {}
    for response in responses:
        grouped.setdefault(response.source or UNKNOWN_SOURCE, []).append(response)
    return grouped


def nps_over_time(
    responses: Sequence, now: datetime, periods: int = 8
) -> List[Dict[str, object]]:
    """
    Split responses into ``periods`` consecutive windows starting at the first
    response and compute the NPS of each window

    Each window spans ``max(total_days // periods, 7)`` days.
    """
    ordered = sorted(responses, key=lambda r: as_utc(r.created_at))
    if not ordered:
        return []

    first = as_utc(ordered[0].created_at)
    total_days = math.ceil((as_utc(now) - first).total_seconds() / 86400)
    days_per_period = max(total_days // periods, 7)

    timeline: List[Dict[str, object]] = []
    for index in range(periods):
        start = first + timedelta(days=index * days_per_period)
        end = start + timedelta(days=days_per_period)
        window = [
            r.score for r in ordered if start <= as_utc(r.created_at) < end
        ]
        timeline.append({"start": start.date(), "nps": calculate_nps(window)})
    return timeline

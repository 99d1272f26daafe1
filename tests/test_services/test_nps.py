from datetime import date, datetime, timedelta, timezone

from npsdesk.services.nps import (
    calculate_nps,
    categorize,
    nps_over_time,
    responses_by_source,
    score_histogram,
)
from tests.fakes import ResponseRecord


def test_nps_of_no_responses_is_zero():
    assert calculate_nps([]) == 0


def test_nps_promoters_minus_detractors():
    scores = [10, 9, 9, 8, 7, 6, 0]

    assert categorize(scores) == {"promoters": 3, "passives": 2, "detractors": 2, "total": 7}
    assert calculate_nps(scores) == 14


def test_nps_half_values_round_up():
    # (1 - 0) / 8 * 100 = 12.5
    assert calculate_nps([9, 7, 7, 7, 7, 7, 7, 7]) == 13
    # (0 - 1) / 8 * 100 = -12.5
    assert calculate_nps([6, 7, 7, 7, 7, 7, 7, 7]) == -12


def test_histogram_has_every_score():
    histogram = score_histogram([10, 10, 0])

    assert set(histogram) == set(range(11))
    assert histogram[10] == 2
    assert histogram[0] == 1
    assert histogram[5] == 0


def test_nps_over_time_uses_minimum_week_periods():
    first = datetime(2024, 1, 1, tzinfo=timezone.utc)
    responses = [
        ResponseRecord(created_at=first, score=10),
        ResponseRecord(created_at=first + timedelta(days=8), score=0),
    ]

    timeline = nps_over_time(responses, now=first + timedelta(days=20), periods=4)

    assert [period["start"] for period in timeline] == [
        date(2024, 1, 1),
        date(2024, 1, 8),
        date(2024, 1, 15),
        date(2024, 1, 22),
    ]
    assert [period["nps"] for period in timeline] == [100, -100, 0, 0]


def test_nps_over_time_empty():
    assert nps_over_time([], now=datetime.now(timezone.utc)) == []


def test_responses_grouped_by_source():
    now = datetime(2024, 5, 10, tzinfo=timezone.utc)
    responses = [
        ResponseRecord(created_at=now, score=10, source="email"),
        ResponseRecord(created_at=now, score=2, source="whatsapp"),
        ResponseRecord(created_at=now, score=9, source="email"),
        ResponseRecord(created_at=now, score=7),
        ResponseRecord(created_at=now, score=8, source=""),
    ]

    grouped = responses_by_source(responses)

    assert list(grouped) == ["email", "whatsapp", "unknown"]
    assert [r.score for r in grouped["email"]] == [10, 9]
    assert [r.score for r in grouped["unknown"]] == [7, 8]
    assert calculate_nps(r.score for r in grouped["whatsapp"]) == -100


def test_no_responses_have_no_sources():
    assert responses_by_source([]) == {}

"""Tests for status freshness."""

from datetime import datetime, timedelta, timezone

import pytest

from hivespoke.hub.staleness import (
    DEFAULT_STALE_THRESHOLD,
    age_in_days,
    is_stale,
    status_is_stale,
)
from hivespoke.schemas import SpokeStatus

NOW = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)


def _iso(moment):
    return moment.isoformat().replace("+00:00", "Z")


def test_default_threshold_is_seven_days():
    assert DEFAULT_STALE_THRESHOLD == timedelta(days=7)
    assert DEFAULT_STALE_THRESHOLD / timedelta(milliseconds=1) == 604_800_000


def test_one_second_past_threshold_is_stale():
    generated = NOW - timedelta(days=7, seconds=1)
    assert is_stale(_iso(generated), NOW)


def test_six_days_is_fresh():
    assert not is_stale(_iso(NOW - timedelta(days=6)), NOW)


def test_exactly_threshold_is_fresh():
    assert not is_stale(_iso(NOW - timedelta(days=7)), NOW)


def test_accepts_datetime_and_offsets():
    generated = datetime(2026, 10, 18, 14, 0, tzinfo=timezone(timedelta(hours=2)))
    assert not is_stale(generated, NOW)


def test_naive_timestamp_is_utc():
    assert is_stale("2026-10-12T11:59:59", NOW)
    assert not is_stale("2026-10-12T12:00:00", NOW)


def test_custom_threshold():
    assert is_stale(_iso(NOW - timedelta(hours=2)), NOW, threshold=timedelta(hours=1))


def test_unparseable_timestamp_is_stale():
    assert is_stale("not-a-date", NOW)


def test_missing_status_is_stale():
    assert status_is_stale(None, NOW)


def test_status_freshness(status_data):
    status_data["generatedAt"] = _iso(NOW - timedelta(days=1))
    status = SpokeStatus.model_validate(status_data)

    assert not status_is_stale(status, NOW)


@pytest.mark.parametrize(
    "delta, days",
    [(timedelta(hours=23), 0), (timedelta(days=3, hours=5), 3), (timedelta(days=10), 10)],
)
def test_age_in_days(delta, days):
    assert age_in_days(_iso(NOW - delta), NOW) == days

"""IST day-bucket arithmetic"""
import os
import time
from datetime import datetime, timezone

import pytest

from app.core.timezone import (
    day_bounds,
    format_day_label,
    get_date_range_timestamp,
    now_ts,
    start_of_day_ist,
)
from tests.helpers import DAY, FIXED_NOW, TODAY_START


def test_start_of_today():
    assert start_of_day_ist(0, now=FIXED_NOW) == TODAY_START


def test_consecutive_days_are_exactly_one_day_apart():
    for days_ago in range(1, 400):
        assert start_of_day_ist(days_ago - 1, now=FIXED_NOW) - start_of_day_ist(days_ago, now=FIXED_NOW) == DAY


def test_last_minute_of_ist_day_is_still_today():
    # 18:29 UTC == 23:59 IST on 2024-03-10
    late = datetime(2024, 3, 10, 18, 29, 59, tzinfo=timezone.utc)
    assert start_of_day_ist(0, now=late) == TODAY_START


def test_ist_date_rolls_over_before_utc_date():
    # 18:30 UTC on the 10th is already midnight on the 11th in IST
    assert start_of_day_ist(0, now=datetime(2024, 3, 10, 18, 30, tzinfo=timezone.utc)) == TODAY_START + DAY
    # 20:00 UTC on the 9th is 01:30 IST on the 10th
    assert start_of_day_ist(0, now=datetime(2024, 3, 9, 20, 0, tzinfo=timezone.utc)) == TODAY_START


def test_month_and_leap_day_rollover():
    now = datetime(2024, 3, 1, 2, 0, tzinfo=timezone.utc)
    # 2024-02-29 00:00 IST
    assert start_of_day_ist(1, now=now) == 1709164800 - 19800


def test_year_rollover():
    now = datetime(2024, 1, 1, 6, 0, tzinfo=timezone.utc)
    # 2023-12-31 00:00 IST
    assert start_of_day_ist(1, now=now) == 1703980800 - 19800


def test_negative_days_rejected():
    with pytest.raises(ValueError):
        start_of_day_ist(-1, now=FIXED_NOW)


@pytest.mark.skipif(not hasattr(time, "tzset"), reason="tzset not available")
def test_independent_of_server_timezone(monkeypatch):
    expected = start_of_day_ist(3, now=FIXED_NOW)
    try:
        for tz in ("America/Los_Angeles", "Pacific/Kiritimati", "UTC"):
            monkeypatch.setenv("TZ", tz)
            time.tzset()
            assert start_of_day_ist(3, now=FIXED_NOW) == expected
            assert start_of_day_ist(0) <= now_ts()
    finally:
        monkeypatch.undo()
        time.tzset()


def test_date_range_tags():
    assert get_date_range_timestamp("all", now=FIXED_NOW) is None
    assert get_date_range_timestamp("today", now=FIXED_NOW) == TODAY_START
    assert get_date_range_timestamp("7days", now=FIXED_NOW) == TODAY_START - 7 * DAY
    assert get_date_range_timestamp("14days", now=FIXED_NOW) == TODAY_START - 14 * DAY
    assert get_date_range_timestamp("30days", now=FIXED_NOW) == TODAY_START - 30 * DAY


def test_unknown_range_means_no_lower_bound():
    assert get_date_range_timestamp("90days", now=FIXED_NOW) is None


def test_bounded_ranges_never_exceed_start_of_today():
    for tag in ("today", "7days", "14days", "30days"):
        assert get_date_range_timestamp(tag) <= start_of_day_ist(0)


def test_day_bounds():
    assert day_bounds(0, now=FIXED_NOW) == (TODAY_START, now_ts(FIXED_NOW))
    assert day_bounds(1, now=FIXED_NOW) == (TODAY_START - DAY, TODAY_START)
    assert day_bounds(5, now=FIXED_NOW) == (TODAY_START - 5 * DAY, TODAY_START - 4 * DAY)


def test_naive_now_is_treated_as_utc():
    assert start_of_day_ist(0, now=datetime(2024, 3, 10, 12, 0)) == TODAY_START


def test_format_day_label():
    assert format_day_label(TODAY_START) == "10 Mar"
    assert format_day_label(TODAY_START - 9 * DAY) == "01 Mar"

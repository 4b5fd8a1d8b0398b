"""
IST calendar-day bucketing.

Every time-series query is partitioned into calendar days in India Standard
Time (fixed UTC+5:30, no DST), whatever timezone the server runs in.
All boundaries are Unix epoch seconds.
"""
from datetime import datetime, timedelta, timezone
from typing import Literal, Optional, Tuple

IST_OFFSET = timedelta(hours=5, minutes=30)
IST = timezone(IST_OFFSET, "IST")

SECONDS_PER_DAY = 86400

DateRange = Literal["today", "7days", "14days", "30days", "all"]

DATE_RANGE_DAYS = {
    "today": 0,
    "7days": 7,
    "14days": 14,
    "30days": 30,
}


def _utcnow(now: Optional[datetime] = None) -> datetime:
    if now is None:
        return datetime.now(timezone.utc)
    if now.tzinfo is None:
        # Naive datetimes are taken as UTC
        return now.replace(tzinfo=timezone.utc)
    return now


def now_ts(now: Optional[datetime] = None) -> int:
    return int(_utcnow(now).timestamp())


def start_of_day_ist(days_ago: int = 0, now: Optional[datetime] = None) -> int:
    """
    Unix timestamp of midnight IST, `days_ago` calendar days before today (IST).

    Today's date is taken in IST, not server local time, so 23:59 IST still
    maps to the start of that same IST day.
    """
    if days_ago < 0:
        raise ValueError("days_ago must be >= 0")

    today_ist = _utcnow(now).astimezone(IST).date()
    target = today_ist - timedelta(days=days_ago)

    midnight_utc = datetime(target.year, target.month, target.day, tzinfo=timezone.utc)
    return int((midnight_utc - IST_OFFSET).timestamp())


def get_date_range_timestamp(date_range: str, now: Optional[datetime] = None) -> Optional[int]:
    """Lower-bound timestamp for a range tag; None means no lower bound ('all' or unknown)."""
    days = DATE_RANGE_DAYS.get(date_range)
    if days is None:
        return None
    return start_of_day_ist(days, now=now)


def day_bounds(days_ago: int, now: Optional[datetime] = None) -> Tuple[int, int]:
    """
    Half-open [start, end) for the bucket `days_ago` days back.
    Today's bucket ends at `now`; earlier buckets end at the next day's start.
    """
    start = start_of_day_ist(days_ago, now=now)
    if days_ago == 0:
        end = now_ts(now)
    else:
        end = start_of_day_ist(days_ago - 1, now=now)
    return start, end


def format_day_label(ts: int) -> str:
    """Chart label for a bucket start, e.g. '05 Oct'."""
    d = datetime.fromtimestamp(ts, tz=IST)
    return f"{d.day:02d} {d.strftime('%b')}"

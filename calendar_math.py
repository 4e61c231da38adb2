from datetime import date, datetime, time, timedelta, tzinfo
from typing import Optional

from config import local_tz


def local_now(now: Optional[datetime] = None) -> datetime:
    """Current instant in the configured zone.

    Every resolver entry point takes an optional ``now`` and funnels it through
    here, so tests pin the clock by passing it explicitly. Naive values are
    read as local wall-clock time.
    """
    tz = local_tz()
    if now is None:
        return datetime.now(tz)
    if now.tzinfo is None:
        return now.replace(tzinfo=tz)
    return now.astimezone(tz)


def days_in_month(year: int, month: int) -> int:
    if month == 12:
        next_month = date(year + 1, 1, 1)
    else:
        next_month = date(year, month + 1, 1)
    return (next_month - date(year, month, 1)).days


def month_start(d: date) -> date:
    return d.replace(day=1)


def month_end(d: date) -> date:
    return d.replace(day=days_in_month(d.year, d.month))


def add_months(d: date, count: int) -> date:
    total_months = d.month - 1 + count
    year = d.year + total_months // 12
    month = total_months % 12 + 1
    day = min(d.day, days_in_month(year, month))
    return date(year, month, day)


def week_start(d: date) -> date:
    # Weeks start on Monday
    return d - timedelta(days=d.weekday())


def half_year_start(d: date) -> date:
    return date(d.year, 1 if d.month <= 6 else 7, 1)


def start_of_day(d: date, tz: Optional[tzinfo] = None) -> datetime:
    return datetime.combine(d, time.min, tzinfo=tz or local_tz())


def end_of_day(d: date, tz: Optional[tzinfo] = None) -> datetime:
    return datetime.combine(d, time.max, tzinfo=tz or local_tz())


def iter_days(start: date, end: date):
    for offset in range((end - start).days + 1):
        yield start + timedelta(days=offset)


def iter_months(start: date, end: date):
    first = start.year * 12 + start.month - 1
    last = end.year * 12 + end.month - 1
    for index in range(first, last + 1):
        yield date(index // 12, index % 12 + 1, 1)

import logging
from dataclasses import dataclass
from datetime import MINYEAR, date, datetime, time, timedelta, timezone
from typing import Optional, Union

from calendar_math import (
    add_months,
    end_of_day,
    half_year_start,
    local_now,
    month_end,
    month_start,
    start_of_day,
    week_start,
)
from config import get_settings, local_tz
from models import Direction, View
from schemas import DateFilterParams, DateRange

logger = logging.getLogger(__name__)

CursorLike = Union[str, date, datetime, None]


@dataclass(frozen=True)
class Period:
    view: View
    start: datetime
    end: datetime

    def contains(self, instant: datetime) -> bool:
        return self.start <= local_now(instant) <= self.end

    @property
    def start_date(self) -> date:
        return self.start.date()

    @property
    def end_date(self) -> date:
        return self.end.date()

    @property
    def days(self) -> int:
        return (self.end_date - self.start_date).days + 1


def format_cursor(instant: datetime) -> str:
    """Serialize an instant the way the REST layer and URLs carry it (UTC, ms)."""
    local = local_now(instant)
    try:
        utc = local.astimezone(timezone.utc)
    except OverflowError:
        # UTC equivalent leaves the calendar range; keep the local offset
        return local.isoformat(timespec="milliseconds")
    return utc.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_instant(value: str) -> datetime:
    """Parse an ISO-8601 string into an aware local datetime.

    Naive values are local time. The date-only ``yyyy-MM-dd`` form is read as
    local noon so that a UTC conversion never shifts it onto the neighbouring
    day. Raises ``ValueError`` for anything else.
    """
    raw = value.strip()
    if len(raw) == 10 and "T" not in raw:
        day = date.fromisoformat(raw)
        return datetime.combine(day, time(12, 0), tzinfo=local_tz())
    if raw.endswith(("Z", "z")):
        raw = raw[:-1] + "+00:00"
    return local_now(datetime.fromisoformat(raw))


def parse_period_start(value: CursorLike, *, now: Optional[datetime] = None) -> datetime:
    """Parse a cursor, falling back to ``now`` when it is missing or unparseable.

    Instants whose local date falls outside the supported calendar range
    count as unparseable.
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        return local_now(now)
    try:
        if isinstance(value, datetime):
            return local_now(value)
        if isinstance(value, date):
            return datetime.combine(value, time(12, 0), tzinfo=local_tz())
        return parse_instant(str(value))
    except (ValueError, OverflowError):
        logger.warning(f"period_start_unparseable: value={value!r} fallback=now")
        return local_now(now)


def resolve_period(
    view: Union[View, str],
    reference: CursorLike = None,
    *,
    now: Optional[datetime] = None,
) -> Period:
    view = View(view)
    tz = local_tz()
    current = local_now(now)

    if view == View.all_time:
        years = get_settings().all_time_years
        first = date(max(MINYEAR, current.year - years), 1, 1)
        return Period(view, start_of_day(first, tz), end_of_day(current.date(), tz))

    day = parse_period_start(reference, now=now).date()
    if view == View.daily:
        start, end = day, day
    elif view == View.weekly:
        start = week_start(day)
        end = date.max if start > date.max - timedelta(days=6) else start + timedelta(days=6)
    elif view == View.monthly:
        start, end = month_start(day), month_end(day)
    elif view == View.bi_yearly:
        start = half_year_start(day)
        end = month_end(start.replace(month=start.month + 5))
    else:
        start, end = date(day.year, 1, 1), date(day.year, 12, 31)
    return Period(view, start_of_day(start, tz), end_of_day(end, tz))


def default_period_start(
    view: Union[View, str], *, now: Optional[datetime] = None
) -> datetime:
    view = View(view)
    current = local_now(now)
    if view == View.all_time:
        return current
    return resolve_period(view, current, now=now).start


def period_from_params(
    params: DateFilterParams, *, now: Optional[datetime] = None
) -> Period:
    view = params.view
    cursor = params.period_start
    if cursor is None:
        cursor = default_period_start(view, now=now)
    return resolve_period(view, cursor, now=now)


def step(
    view: Union[View, str],
    period_start: CursorLike,
    direction: Union[Direction, str],
    *,
    now: Optional[datetime] = None,
) -> datetime:
    """Start of the period before or after the one containing ``period_start``.

    The cursor is first normalised to the start of its own period, so month
    based views never drift when crossing shorter months. ``all_time`` has
    nothing to page through and returns the cursor unchanged.
    """
    view = View(view)
    direction = Direction(direction)
    cursor = parse_period_start(period_start, now=now)
    if view == View.all_time:
        return cursor

    start = resolve_period(view, cursor, now=now).start_date
    sign = 1 if direction == Direction.next else -1
    try:
        if view == View.daily:
            shifted = start + timedelta(days=sign)
        elif view == View.weekly:
            shifted = start + timedelta(weeks=sign)
        elif view == View.monthly:
            shifted = add_months(start, sign)
        elif view == View.bi_yearly:
            shifted = add_months(start, 6 * sign)
        else:
            shifted = add_months(start, 12 * sign)
    except (ValueError, OverflowError):
        # No adjacent period inside the calendar range; stay put
        shifted = start
    return start_of_day(shifted)


def can_go_back(view: Union[View, str]) -> bool:
    return View(view) != View.all_time


def is_advanceable(
    view: Union[View, str],
    period_end: CursorLike,
    *,
    now: Optional[datetime] = None,
) -> bool:
    if View(view) == View.all_time:
        return False
    end = parse_period_start(period_end, now=now)
    if end.date() == date.max:
        return False
    next_start = start_of_day(end.date() + timedelta(days=1))
    return next_start <= local_now(now)


def get_date_range_for_api(
    view: Union[View, str],
    period_start: CursorLike = None,
    *,
    now: Optional[datetime] = None,
) -> DateRange:
    view = View(view)
    if view == View.all_time:
        return DateRange()
    if period_start is None:
        period_start = default_period_start(view, now=now)
    period = resolve_period(view, period_start, now=now)
    return DateRange(
        start_date=format_cursor(period.start),
        end_date=format_cursor(period.end),
    )

from datetime import date, datetime
from typing import Optional, Union

from models import Granularity, View
from periods import CursorLike, resolve_period

MONTH_NAMES = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)
WEEKDAY_NAMES = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")

VIEW_LABELS: dict[View, str] = {
    View.daily: "Daily",
    View.weekly: "Weekly",
    View.monthly: "Monthly",
    View.bi_yearly: "Bi-yearly",
    View.yearly: "Yearly",
    View.all_time: "All time",
}

ALL_TIME_LABEL = VIEW_LABELS[View.all_time]


def month_abbr(d: date) -> str:
    return MONTH_NAMES[d.month - 1][:3]


def period_label(
    view: Union[View, str],
    period_start: CursorLike,
    *,
    now: Optional[datetime] = None,
) -> str:
    view = View(view)
    if view == View.all_time:
        return ALL_TIME_LABEL
    period = resolve_period(view, period_start, now=now)
    start, end = period.start_date, period.end_date
    if view == View.daily:
        return f"{WEEKDAY_NAMES[start.weekday()]}, {month_abbr(start)} {start.day}, {start.year}"
    if view == View.weekly:
        return f"{month_abbr(start)} {start.day} – {month_abbr(end)} {end.day}, {end.year}"
    if view == View.bi_yearly:
        return f"{month_abbr(start)} {start.year} – {month_abbr(end)} {end.year}"
    if view == View.yearly:
        return str(start.year)
    return f"{MONTH_NAMES[start.month - 1]} {start.year}"


def bucket_label(d: date, granularity: Union[Granularity, str]) -> str:
    if Granularity(granularity) == Granularity.month:
        return f"{month_abbr(d)} {d.year}"
    return f"{month_abbr(d)} {d.day}"


def series_caption(granularity: Union[Granularity, str], label: Optional[str] = None) -> str:
    per = "per month" if Granularity(granularity) == Granularity.month else "per day"
    if label:
        return f"Spending {per} · {label}"
    return f"Spending {per}"

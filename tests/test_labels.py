from datetime import date, datetime

import pytest

from config import local_tz
from labels import VIEW_LABELS, bucket_label, period_label, series_caption
from models import Granularity, View

NOW = datetime(2025, 3, 14, 15, 30, tzinfo=local_tz())


@pytest.mark.parametrize(
    ("view", "cursor", "expected"),
    [
        (View.daily, "2025-01-03", "Fri, Jan 3, 2025"),
        (View.weekly, "2025-01-03", "Dec 30 – Jan 5, 2025"),
        (View.monthly, "2025-01-01T00:00:00", "January 2025"),
        (View.bi_yearly, "2025-09-09", "Jul 2025 – Dec 2025"),
        (View.yearly, "2025-05-05", "2025"),
        (View.all_time, "2025-05-05", "All time"),
    ],
)
def test_period_label(view: View, cursor: str, expected: str) -> None:
    assert period_label(view, cursor, now=NOW) == expected


def test_every_view_has_display_name() -> None:
    assert set(VIEW_LABELS) == set(View)
    assert VIEW_LABELS[View.bi_yearly] == "Bi-yearly"


def test_bucket_labels() -> None:
    assert bucket_label(date(2025, 1, 5), Granularity.day) == "Jan 5"
    assert bucket_label(date(2025, 1, 1), "month") == "Jan 2025"


def test_series_caption() -> None:
    assert series_caption(Granularity.day, "January 2025") == "Spending per day · January 2025"
    assert series_caption(Granularity.month) == "Spending per month"

from datetime import datetime
from decimal import Decimal

from analytics import CHART_COLORS, UNCATEGORIZED, MetricsService
from config import local_tz
from models import View
from periods import resolve_period
from schemas import DateFilterParams, TransactionRecord

NOW = datetime(2025, 3, 14, 15, 30, tzinfo=local_tz())


def _records() -> list[TransactionRecord]:
    raw = [
        {
            "id": "1",
            "amount": "500.00",
            "type": "debit",
            "transactionDate": "2025-01-05T10:00:00",
            "category": {"name": "Food", "icon": "utensils"},
            "bankName": "Nabil Bank",
        },
        {
            "id": "2",
            "amount": "200.00",
            "type": "credit",
            "transactionDate": "2025-01-10",
            "category": {"name": "Salary", "icon": None},
            "bankName": "Nabil Bank",
        },
        {
            "id": "3",
            "amount": "NaN",
            "type": "debit",
            "transactionDate": "2025-01-15",
            "bankName": "Nabil Bank",
        },
        {
            "id": "4",
            "amount": "1,250.00",
            "type": "DEBIT",
            "transactionDate": "2025-02-03",
            "category": {"name": "Rent", "icon": "home"},
            "bankName": "Himalayan Bank Limited",
        },
        {
            "id": "5",
            "amount": 75,
            "type": "debit",
            "transactionDate": "2024-12-24",
            "category": {"name": "Food", "icon": "utensils"},
        },
    ]
    return [TransactionRecord.model_validate(item) for item in raw]


def test_records_flatten_nested_category() -> None:
    record = _records()[0]
    assert record.category_name == "Food"
    assert record.category_icon == "utensils"
    assert record.is_debit


def test_kpis_split_income_and_expenses() -> None:
    kpis = MetricsService(_records(), now=NOW).kpis()
    assert kpis.total_expenses == Decimal("1825.00")
    assert kpis.total_income == Decimal("200.00")
    assert kpis.transaction_count == 5
    assert kpis.avg_transaction == Decimal("405.00")


def test_kpis_on_empty_list() -> None:
    kpis = MetricsService([], now=NOW).kpis()
    assert kpis.transaction_count == 0
    assert kpis.avg_transaction == 0


def test_monthly_trends_are_ascending_and_limited() -> None:
    service = MetricsService(_records(), now=NOW)
    trends = service.monthly_trends()
    assert [t.key for t in trends] == ["2024-12", "2025-01", "2025-02"]
    assert trends[1].month == "Jan"
    assert trends[1].expenses == Decimal("500.00")
    assert trends[1].income == Decimal("200.00")

    assert [t.key for t in service.monthly_trends(max_points=2)] == ["2025-01", "2025-02"]


def test_category_breakdown_ranks_expenses() -> None:
    breakdown = MetricsService(_records(), now=NOW).category_breakdown()
    assert [item.name for item in breakdown] == ["Rent", "Food", UNCATEGORIZED]
    assert breakdown[1].value == Decimal("575.00")
    assert breakdown[0].fill == CHART_COLORS[0]
    assert breakdown[0].icon == "home"


def test_category_breakdown_respects_limit() -> None:
    breakdown = MetricsService(_records(), now=NOW).category_breakdown(limit=1)
    assert [item.name for item in breakdown] == ["Rent"]


def test_bank_breakdown_truncates_long_names() -> None:
    breakdown = MetricsService(_records(), now=NOW).bank_breakdown()
    names = [item.name for item in breakdown]
    assert names == ["Himalayan Ba...", "Nabil Bank", "Unknown Bank"]
    assert breakdown[1].value == Decimal("500.00")


def test_in_period_keeps_only_matching_records() -> None:
    period = resolve_period(View.monthly, "2025-01-01", now=NOW)
    scoped = MetricsService(_records(), now=NOW).in_period(period)
    assert sorted(r.id for r in scoped.transactions) == ["1", "2", "3"]


def test_spending_series_for_month() -> None:
    params = DateFilterParams.model_validate(
        {"view": "monthly", "periodStart": "2025-01-01T00:00:00"}
    )
    series = MetricsService(_records(), now=NOW).spending_series(params)
    assert len(series) == 31
    by_key = {point.key: point for point in series}
    assert by_key["2025-01-05"].spending == Decimal("500.00")
    assert by_key["2025-01-05"].label == "Jan 5"
    assert by_key["2025-01-10"].spending == 0
    assert by_key["2025-01-10"].income == Decimal("200.00")
    assert by_key["2025-01-15"].spending == 0


def test_spending_series_for_all_time_uses_data_span() -> None:
    params = DateFilterParams(view=View.all_time)
    series = MetricsService(_records(), now=NOW).spending_series(params)
    assert [point.key for point in series] == ["2024-12", "2025-01", "2025-02"]
    assert series[-1].spending == Decimal("1250.00")


def test_breakdowns_are_not_shared_between_calls() -> None:
    service = MetricsService(_records(), now=NOW)
    categories = service.category_breakdown()
    categories[0].value = Decimal("1")
    categories.clear()
    banks = service.bank_breakdown()
    banks[0].name = "Renamed"

    assert [item.name for item in service.category_breakdown()] == ["Rent", "Food", UNCATEGORIZED]
    assert service.category_breakdown()[0].value != Decimal("1")
    assert service.bank_breakdown()[0].name == "Himalayan Ba..."

from __future__ import annotations

from collections import defaultdict
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Optional

from buckets import (
    bucket_key,
    build_series,
    expense_amount,
    income_amount,
    transaction_instant,
)
from config import get_settings
from labels import month_abbr
from models import Granularity
from money import CENT, ZERO
from periods import Period, period_from_params
from schemas import (
    BreakdownItem,
    DateFilterParams,
    Kpis,
    SeriesPoint,
    TransactionRecord,
    TrendPoint,
)

CHART_COLORS = [
    "var(--chart-1)",
    "var(--chart-2)",
    "var(--chart-3)",
    "var(--chart-4)",
    "var(--chart-5)",
    "hsl(221, 83%, 53%)",
    "hsl(142, 71%, 45%)",
    "hsl(38, 92%, 50%)",
    "hsl(0, 84%, 60%)",
    "hsl(280, 65%, 60%)",
]

UNCATEGORIZED = "Uncategorized"
UNKNOWN_BANK = "Unknown Bank"


class MetricsService:
    def __init__(
        self,
        transactions: Iterable[TransactionRecord],
        *,
        now: Optional[datetime] = None,
    ) -> None:
        self.transactions = list(transactions)
        self.now = now
        self.settings = get_settings()
        self._breakdown_cache: dict[str, list[BreakdownItem]] = {}

    def in_period(self, period: Period) -> MetricsService:
        kept = []
        for record in self.transactions:
            instant = transaction_instant(record)
            if instant is not None and period.contains(instant):
                kept.append(record)
        return MetricsService(kept, now=self.now)

    def kpis(self) -> Kpis:
        expenses = ZERO
        income = ZERO
        for record in self.transactions:
            expenses += expense_amount(record) or ZERO
            income += income_amount(record) or ZERO
        count = len(self.transactions)
        average = ZERO
        if count:
            average = ((expenses + income) / count).quantize(
                CENT, rounding=ROUND_HALF_UP
            )
        return Kpis(
            total_expenses=expenses,
            total_income=income,
            transaction_count=count,
            avg_transaction=average,
        )

    def monthly_trends(self, max_points: Optional[int] = None) -> list[TrendPoint]:
        if max_points is None:
            max_points = self.settings.trend_months
        months: dict[str, dict[str, Decimal]] = defaultdict(
            lambda: {"expenses": ZERO, "income": ZERO}
        )
        for record in self.transactions:
            instant = transaction_instant(record)
            if instant is None:
                continue
            entry = months[bucket_key(instant, Granularity.month)]
            entry["expenses"] += expense_amount(record) or ZERO
            entry["income"] += income_amount(record) or ZERO

        keys = sorted(months)
        if max_points and len(keys) > max_points:
            keys = keys[-max_points:]
        points = []
        for key in keys:
            year, month = (int(part) for part in key.split("-"))
            points.append(
                TrendPoint(
                    key=key,
                    month=month_abbr(date(year, month, 1)),
                    expenses=months[key]["expenses"],
                    income=months[key]["income"],
                )
            )
        return points

    def _expense_totals(self, group_of) -> tuple[dict[str, Decimal], dict[str, Optional[str]]]:
        totals: dict[str, Decimal] = defaultdict(lambda: ZERO)
        icons: dict[str, Optional[str]] = {}
        for record in self.transactions:
            amount = expense_amount(record)
            if amount is None:
                continue
            name, icon = group_of(record)
            totals[name] += amount
            icons[name] = icon
        return totals, icons

    def category_breakdown(self, limit: Optional[int] = None) -> list[BreakdownItem]:
        if limit is None:
            limit = self.settings.category_limit
        cache_key = f"category_{limit}"
        if cache_key in self._breakdown_cache:
            return [item.model_copy() for item in self._breakdown_cache[cache_key]]

        totals, icons = self._expense_totals(
            lambda r: (r.category_name or UNCATEGORIZED, r.category_icon)
        )
        ranked = sorted(totals.items(), key=lambda item: (-item[1], item[0]))
        if limit:
            ranked = ranked[:limit]
        breakdown = [
            BreakdownItem(
                name=name,
                value=value,
                icon=icons.get(name),
                fill=CHART_COLORS[index % len(CHART_COLORS)],
            )
            for index, (name, value) in enumerate(ranked)
        ]
        self._breakdown_cache[cache_key] = breakdown
        return [item.model_copy() for item in breakdown]

    def bank_breakdown(self, limit: Optional[int] = None) -> list[BreakdownItem]:
        if limit is None:
            limit = self.settings.bank_limit
        cache_key = f"bank_{limit}"
        if cache_key in self._breakdown_cache:
            return [item.model_copy() for item in self._breakdown_cache[cache_key]]

        max_length = self.settings.bank_name_max_length
        totals, _ = self._expense_totals(lambda r: (r.bank_name or UNKNOWN_BANK, None))
        ranked = sorted(totals.items(), key=lambda item: (-item[1], item[0]))
        if limit:
            ranked = ranked[:limit]
        breakdown = []
        for name, value in ranked:
            if max_length and len(name) > max_length:
                name = name[:max_length] + "..."
            breakdown.append(BreakdownItem(name=name, value=value))
        self._breakdown_cache[cache_key] = breakdown
        return [item.model_copy() for item in breakdown]

    def spending_series(self, params: DateFilterParams) -> list[SeriesPoint]:
        period = period_from_params(params, now=self.now)
        return [
            SeriesPoint(
                key=total.bucket.key,
                label=total.bucket.label,
                spending=total.expenses,
                income=total.income,
            )
            for total in build_series(params.view, period, self.transactions)
        ]

import logging
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Callable, Iterable, Optional, Sequence, Union

from calendar_math import iter_days, iter_months, local_now
from labels import bucket_label
from models import Granularity, View
from money import ZERO, amount_or_zero
from periods import Period, parse_instant
from schemas import TransactionRecord

logger = logging.getLogger(__name__)

Selector = Callable[[TransactionRecord], Optional[Decimal]]

# Weekly periods are drilled down per day, like daily and monthly ones.
BUCKET_GRANULARITY: dict[View, Granularity] = {
    View.daily: Granularity.day,
    View.weekly: Granularity.day,
    View.monthly: Granularity.day,
    View.bi_yearly: Granularity.month,
    View.yearly: Granularity.month,
    View.all_time: Granularity.month,
}


@dataclass(frozen=True)
class Bucket:
    key: str
    representative_date: date
    label: str
    granularity: Granularity


@dataclass(frozen=True)
class BucketTotal:
    bucket: Bucket
    expenses: Decimal
    income: Decimal


def bucket_granularity(view: Union[View, str]) -> Granularity:
    return BUCKET_GRANULARITY[View(view)]


def bucket_key(value: Union[date, datetime], granularity: Union[Granularity, str]) -> str:
    if isinstance(value, datetime):
        value = local_now(value).date()
    if Granularity(granularity) == Granularity.month:
        return f"{value.year:04d}-{value.month:02d}"
    return value.isoformat()


def transaction_instant(record: TransactionRecord) -> Optional[datetime]:
    if not record.transaction_date:
        logger.warning(f"transaction_date_missing: record={record.id}")
        return None
    try:
        return parse_instant(record.transaction_date)
    except (ValueError, OverflowError):
        logger.warning(
            f"transaction_date_unparseable: record={record.id} value={record.transaction_date!r}"
        )
        return None


def expense_amount(record: TransactionRecord) -> Optional[Decimal]:
    if not record.is_debit:
        return None
    return abs(amount_or_zero(record.amount, record_id=record.id))


def income_amount(record: TransactionRecord) -> Optional[Decimal]:
    if not record.is_credit:
        return None
    return abs(amount_or_zero(record.amount, record_id=record.id))


def net_amount(record: TransactionRecord) -> Optional[Decimal]:
    if record.is_credit:
        return abs(amount_or_zero(record.amount, record_id=record.id))
    if record.is_debit:
        return -abs(amount_or_zero(record.amount, record_id=record.id))
    return None


def _data_span(
    transactions: Iterable[TransactionRecord], start: date, end: date
) -> tuple[date, date]:
    dates = [
        instant.date()
        for instant in (transaction_instant(t) for t in transactions)
        if instant is not None
    ]
    if not dates:
        return start, end
    narrowed_start = max(start, min(dates))
    narrowed_end = min(end, max(dates))
    if narrowed_start > narrowed_end:
        return start, end
    return narrowed_start, narrowed_end


def build_buckets(
    view: Union[View, str],
    period: Period,
    *,
    transactions: Optional[Iterable[TransactionRecord]] = None,
) -> list[Bucket]:
    """Partition ``period`` into ascending, gapless chart buckets.

    For ``all_time`` the configured range is narrowed to the span actually
    covered by ``transactions`` when those are given.
    """
    view = View(view)
    granularity = bucket_granularity(view)
    start, end = period.start_date, period.end_date
    if view == View.all_time and transactions is not None:
        start, end = _data_span(transactions, start, end)

    if granularity == Granularity.month:
        points = iter_months(start, end)
    else:
        points = iter_days(start, end)
    return [
        Bucket(
            key=bucket_key(point, granularity),
            representative_date=point,
            label=bucket_label(point, granularity),
            granularity=granularity,
        )
        for point in points
    ]


def aggregate(
    buckets: Sequence[Bucket],
    transactions: Iterable[TransactionRecord],
    selector: Selector = expense_amount,
) -> dict[str, Decimal]:
    """Sum selected amounts per bucket key.

    Every bucket is present in the result, zero when nothing matched.
    Transactions outside the buckets, without a usable date, or rejected by
    ``selector`` are left out.
    """
    totals: dict[str, Decimal] = {bucket.key: ZERO for bucket in buckets}
    if not buckets:
        return totals
    granularity = buckets[0].granularity
    for record in transactions:
        instant = transaction_instant(record)
        if instant is None:
            continue
        key = bucket_key(instant, granularity)
        if key not in totals:
            continue
        amount = selector(record)
        if amount is None:
            continue
        totals[key] += amount
    return totals


def build_series(
    view: Union[View, str],
    period: Period,
    transactions: Iterable[TransactionRecord],
) -> list[BucketTotal]:
    records = list(transactions)
    buckets = build_buckets(view, period, transactions=records)
    expenses = aggregate(buckets, records, expense_amount)
    income = aggregate(buckets, records, income_amount)
    return [
        BucketTotal(bucket=bucket, expenses=expenses[bucket.key], income=income[bucket.key])
        for bucket in buckets
    ]

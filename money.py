import logging
import re
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Optional, Union

from config import get_settings

logger = logging.getLogger(__name__)

ZERO = Decimal("0")
CENT = Decimal("0.01")

_CURRENCY_MARKERS = re.compile(r"(?i)(npr|rs\.?|रु\.?|inr|usd|eur|[$€₹])")

AmountLike = Union[str, int, float, Decimal, None]

# Larger values cannot be summed and rounded to cents within the decimal context
MAX_INTEGER_DIGITS = 18


def _in_range(amount: Decimal) -> bool:
    return amount.is_finite() and amount.adjusted() < MAX_INTEGER_DIGITS


def parse_amount(value: AmountLike) -> Optional[Decimal]:
    """Parse a decimal amount literal, or return None when it is not a usable number.

    Currency markers, spaces and thousands separators are stripped first, so
    ``"Rs. 1,234.50"`` parses to ``Decimal("1234.50")``. NaN, infinities and
    values of more than ``MAX_INTEGER_DIGITS`` integer digits are rejected.
    """
    if value is None:
        return None
    if isinstance(value, Decimal):
        return value if _in_range(value) else None
    clean = _CURRENCY_MARKERS.sub("", str(value)).strip()
    clean = clean.replace(" ", "").replace(" ", "").replace(",", "")
    if not clean:
        return None
    try:
        amount = Decimal(clean)
    except InvalidOperation:
        return None
    if not _in_range(amount):
        return None
    return amount


def amount_or_zero(value: AmountLike, *, record_id: Optional[str] = None) -> Decimal:
    amount = parse_amount(value)
    if amount is None:
        logger.warning(f"amount_unparseable: value={value!r} record={record_id}")
        return ZERO
    return amount


def _plain(value: Decimal) -> str:
    return format(value.normalize(), "f")


def format_currency(value: AmountLike, currency: Optional[str] = None) -> str:
    currency = (currency or get_settings().currency).upper()
    amount = (parse_amount(value) or ZERO).quantize(CENT, rounding=ROUND_HALF_UP)
    sign = "-" if amount < 0 else ""
    return f"{sign}{currency} {abs(amount):,.2f}"


def format_currency_short(value: AmountLike) -> str:
    """Axis tick label: thousands collapse to ``k`` (``"10k"``, ``"1.5k"``)."""
    amount = parse_amount(value) or ZERO
    thousands = amount / 1000
    if thousands >= 1:
        return f"{_plain(thousands)}k"
    return _plain(amount)

import os
from functools import lru_cache
from zoneinfo import ZoneInfo


class Settings:
    def __init__(
        self,
        timezone: str,
        default_view: str,
        all_time_years: int,
        currency: str,
        category_limit: int,
        bank_limit: int,
        trend_months: int,
        bank_name_max_length: int,
    ) -> None:
        self.timezone = timezone
        self.default_view = default_view
        self.all_time_years = all_time_years
        self.currency = currency
        self.category_limit = category_limit
        self.bank_limit = bank_limit
        self.trend_months = trend_months
        self.bank_name_max_length = bank_name_max_length


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name, str(default))
    try:
        value = int(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from exc
    if value < 0:
        raise ValueError(f"{name} must not be negative")
    return value


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    timezone = os.getenv("SPENDING_TIMEZONE", "Asia/Kathmandu")
    default_view = os.getenv("SPENDING_DEFAULT_VIEW", "monthly")
    currency = os.getenv("SPENDING_CURRENCY", "NPR").upper()
    return Settings(
        timezone=timezone,
        default_view=default_view,
        all_time_years=_int_env("SPENDING_ALL_TIME_YEARS", 10),
        currency=currency,
        category_limit=_int_env("SPENDING_CATEGORY_LIMIT", 6),
        bank_limit=_int_env("SPENDING_BANK_LIMIT", 5),
        trend_months=_int_env("SPENDING_TREND_MONTHS", 6),
        bank_name_max_length=_int_env("SPENDING_BANK_NAME_MAX_LENGTH", 12),
    )


def local_tz() -> ZoneInfo:
    return ZoneInfo(get_settings().timezone)

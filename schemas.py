from decimal import Decimal
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from config import get_settings
from models import TransactionType, View


def _default_view() -> View:
    return View(get_settings().default_view)


class DateFilterParams(BaseModel):
    """View and cursor as carried in the URL search params."""

    model_config = ConfigDict(populate_by_name=True)

    view: View = Field(default_factory=_default_view)
    period_start: Optional[str] = Field(default=None, alias="periodStart")


class DateRange(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    start_date: Optional[str] = Field(default=None, alias="startDate")
    end_date: Optional[str] = Field(default=None, alias="endDate")

    def as_query_params(self) -> dict[str, str]:
        return self.model_dump(by_alias=True, exclude_none=True)


class TransactionRecord(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: Optional[str] = None
    amount: str = "0"
    type: str = TransactionType.debit.value
    transaction_date: Optional[str] = Field(default=None, alias="transactionDate")
    category_name: Optional[str] = Field(default=None, alias="categoryName")
    category_icon: Optional[str] = Field(default=None, alias="categoryIcon")
    bank_name: Optional[str] = Field(default=None, alias="bankName")

    @model_validator(mode="before")
    @classmethod
    def _flatten_category(cls, data: Any) -> Any:
        # The transactions API nests the category as {"name": ..., "icon": ...}
        if isinstance(data, dict) and isinstance(data.get("category"), dict):
            data = dict(data)
            category = data.pop("category")
            data.setdefault("categoryName", category.get("name"))
            data.setdefault("categoryIcon", category.get("icon"))
        return data

    @field_validator("amount", mode="before")
    @classmethod
    def _amount_as_text(cls, value: Any) -> str:
        if value is None:
            return "0"
        return str(value)

    @field_validator("type", mode="before")
    @classmethod
    def _normalize_type(cls, value: Any) -> str:
        if value is None:
            return ""
        return str(value).strip().lower()

    @property
    def is_debit(self) -> bool:
        return self.type == TransactionType.debit.value

    @property
    def is_credit(self) -> bool:
        return self.type == TransactionType.credit.value


class Kpis(BaseModel):
    total_expenses: Decimal
    total_income: Decimal
    transaction_count: int
    avg_transaction: Decimal


class TrendPoint(BaseModel):
    key: str
    month: str
    expenses: Decimal
    income: Decimal


class BreakdownItem(BaseModel):
    name: str
    value: Decimal
    fill: Optional[str] = None
    icon: Optional[str] = None


class SeriesPoint(BaseModel):
    key: str
    label: str
    spending: Decimal
    income: Decimal

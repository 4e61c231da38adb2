from enum import Enum


class View(str, Enum):
    daily = "daily"
    weekly = "weekly"
    monthly = "monthly"
    bi_yearly = "bi_yearly"
    yearly = "yearly"
    all_time = "all_time"


class Direction(str, Enum):
    prev = "prev"
    next = "next"


class Granularity(str, Enum):
    day = "day"
    month = "month"


class TransactionType(str, Enum):
    debit = "debit"
    credit = "credit"

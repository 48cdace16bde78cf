"""
General-purpose helper functions used across the project.
"""

import math
import secrets
from datetime import date, datetime, timedelta, timezone
from typing import Optional, Tuple


def format_currency(amount) -> str:
    """12000000 -> '12,000,000 ₫'"""
    return f"{float(amount or 0):,.0f} ₫"


SORT_OPTIONS = [
    {"value": "newest", "label": "Moi nhat", "order_by": "created_at", "ascending": False},
    {"value": "price_asc", "label": "Gia tang dan", "order_by": "price", "ascending": True},
    {"value": "price_desc", "label": "Gia giam dan", "order_by": "price", "ascending": False},
    {"value": "name_asc", "label": "Ten A -> Z", "order_by": "name", "ascending": True},
]


def get_sort_config(sort_value: Optional[str], sort_options=None) -> dict:
    options = SORT_OPTIONS if sort_options is None else sort_options
    if not options:
        return dict(SORT_OPTIONS[0])
    for opt in options:
        if opt["value"] == sort_value:
            return dict(opt)
    return dict(options[0])


def total_pages(count: Optional[int], page_size: int) -> Optional[int]:
    if not count:
        return None
    return math.ceil(count / page_size)


def generate_order_number(now: Optional[datetime] = None) -> str:
    now = now or datetime.now(timezone.utc)
    return f"DDV{now:%Y%m%d}{secrets.token_hex(3).upper()}"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def period_bounds(year: int, month: Optional[int] = None) -> Tuple[datetime, datetime]:
    """[start, end) of a calendar month, or of the whole year when month is None, in UTC."""
    if month is None:
        return datetime(year, 1, 1, tzinfo=timezone.utc), datetime(year + 1, 1, 1, tzinfo=timezone.utc)
    start = datetime(year, month, 1, tzinfo=timezone.utc)
    end = datetime(year + month // 12, month % 12 + 1, 1, tzinfo=timezone.utc)
    return start, end


def day_bounds(day: date) -> Tuple[datetime, datetime]:
    start = datetime(day.year, day.month, day.day, tzinfo=timezone.utc)
    return start, start + timedelta(days=1)

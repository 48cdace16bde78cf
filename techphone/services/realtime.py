"""
In-process change feed for the admin dashboard.

Write paths publish row-level events after they commit; ``DashboardCounters``
folds them into running totals the same way realtime subscriptions would.
"""

import logging
import threading
from datetime import datetime, time, timezone
from typing import Any, Dict, Optional

from techphone.utils.helpers import utcnow

logger = logging.getLogger(__name__)

PENDING_STATUSES = ("pending", "processing")
COMPLETED_STATUSES = ("completed", "delivered")


def start_of_day(now: Optional[datetime] = None) -> datetime:
    now = now or utcnow()
    return datetime.combine(now.date(), time.min, tzinfo=now.tzinfo or timezone.utc)


def _is_today(value, today: datetime) -> bool:
    if not value:
        return False
    if isinstance(value, str):
        try:
            value = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return False
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value >= today


class DashboardCounters:
    """Counters kept current from row-level change events.

    Events look like realtime payloads: ``{"table": "orders", "eventType":
    "INSERT" | "UPDATE" | "DELETE", "new": {...}, "old": {...}}``.
    """

    FIELDS = ("total_users", "total_orders", "pending_orders", "completed_orders",
              "orders_today", "logins_today", "total_revenue", "total_products")

    def __init__(self, now: Optional[datetime] = None, **values):
        self._lock = threading.Lock()
        self.today = start_of_day(now)
        self.values: Dict[str, float] = {f: values.get(f, 0) for f in self.FIELDS}
        self.average_rating = values.get("average_rating", 0)

    @classmethod
    def from_stats(cls, stats: Dict[str, Any], now: Optional[datetime] = None) -> "DashboardCounters":
        return cls(now=now, **stats)

    def snapshot(self) -> Dict[str, Any]:
        with self._lock:
            return {**self.values, "average_rating": self.average_rating}

    def _add(self, field: str, delta: float):
        self.values[field] = max(0, self.values[field] + delta)

    def apply(self, event: Dict[str, Any]):
        table = event.get("table")
        kind = (event.get("eventType") or event.get("type") or "").upper()
        new = event.get("new") or {}
        old = event.get("old") or {}

        handler = {
            "orders": self._on_order,
            "profiles": self._on_profile,
            "products": self._on_product,
        }.get(table)
        if handler is None:
            logger.debug(f"[Dashboard] Ignoring event for table {table}")
            return
        with self._lock:
            handler(kind, new, old)

    def _status_bucket(self, status) -> Optional[str]:
        if status in PENDING_STATUSES:
            return "pending_orders"
        if status in COMPLETED_STATUSES:
            return "completed_orders"
        return None

    def _on_order(self, kind, new, old):
        if kind == "INSERT":
            self._add("total_orders", 1)
            self._add("total_revenue", float(new.get("total_amount") or 0))
            bucket = self._status_bucket(new.get("status", "pending"))
            if bucket:
                self._add(bucket, 1)
            if _is_today(new.get("created_at"), self.today) or not new.get("created_at"):
                self._add("orders_today", 1)
        elif kind == "UPDATE":
            if "total_amount" in new and "total_amount" in old:
                self._add("total_revenue", float(new["total_amount"] or 0) - float(old["total_amount"] or 0))
            before, after = self._status_bucket(old.get("status")), self._status_bucket(new.get("status"))
            if "status" in new and before != after:
                if before:
                    self._add(before, -1)
                if after:
                    self._add(after, 1)
        elif kind == "DELETE":
            self._add("total_orders", -1)
            self._add("total_revenue", -float(old.get("total_amount") or 0))
            bucket = self._status_bucket(old.get("status"))
            if bucket:
                self._add(bucket, -1)
            if _is_today(old.get("created_at"), self.today):
                self._add("orders_today", -1)

    def _on_profile(self, kind, new, old):
        if kind == "INSERT":
            self._add("total_users", 1)
        elif kind == "DELETE":
            self._add("total_users", -1)
        elif kind == "UPDATE":
            if _is_today(new.get("last_login"), self.today) and not _is_today(old.get("last_login"), self.today):
                self._add("logins_today", 1)

    def _on_product(self, kind, new, old):
        if kind == "INSERT" and not new.get("deleted_at"):
            self._add("total_products", 1)
        elif kind == "DELETE" and not old.get("deleted_at"):
            self._add("total_products", -1)
        elif kind == "UPDATE":
            was_live, is_live = not old.get("deleted_at"), not new.get("deleted_at")
            if was_live and not is_live:
                self._add("total_products", -1)
            elif is_live and not was_live:
                self._add("total_products", 1)


_live: Optional[DashboardCounters] = None
_live_lock = threading.Lock()


def current_counters(seed=None) -> Optional[DashboardCounters]:
    """Today's counters; ``seed()`` supplies fresh stats when none exist yet or the day rolled over."""
    global _live
    with _live_lock:
        if seed is not None and (_live is None or _live.today != start_of_day()):
            _live = DashboardCounters.from_stats(seed())
        return _live


def publish_change(table: str, event_type: str, new: Optional[dict] = None, old: Optional[dict] = None):
    counters = _live
    if counters is None:
        return
    counters.apply({"table": table, "eventType": event_type, "new": new, "old": old})


def reset_counters():
    global _live
    with _live_lock:
        _live = None

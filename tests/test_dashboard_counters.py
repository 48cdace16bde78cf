from datetime import datetime, timedelta, timezone

from techphone.services import realtime
from techphone.services.realtime import DashboardCounters, current_counters, publish_change

NOW = datetime(2024, 5, 1, 15, 30, tzinfo=timezone.utc)
TODAY = NOW.isoformat()
YESTERDAY = (NOW - timedelta(days=1)).isoformat()


def counters(**values):
    return DashboardCounters(now=NOW, **values)


def test_new_order_today():
    c = counters()
    c.apply({"table": "orders", "eventType": "INSERT",
             "new": {"total_amount": 500, "status": "pending", "created_at": TODAY}})
    snap = c.snapshot()
    assert snap["total_orders"] == 1
    assert snap["pending_orders"] == 1
    assert snap["orders_today"] == 1
    assert snap["total_revenue"] == 500


def test_order_from_yesterday_not_counted_today():
    c = counters()
    c.apply({"table": "orders", "type": "insert",
             "new": {"total_amount": 100, "status": "completed", "created_at": YESTERDAY}})
    snap = c.snapshot()
    assert snap["orders_today"] == 0
    assert snap["completed_orders"] == 1


def test_status_change_moves_between_buckets():
    c = counters(total_orders=1, pending_orders=1)
    c.apply({"table": "orders", "eventType": "UPDATE",
             "new": {"status": "delivered"}, "old": {"status": "processing"}})
    snap = c.snapshot()
    assert snap["pending_orders"] == 0
    assert snap["completed_orders"] == 1


def test_counters_never_negative():
    c = counters()
    c.apply({"table": "orders", "eventType": "DELETE",
             "old": {"total_amount": 100, "status": "pending", "created_at": TODAY}})
    snap = c.snapshot()
    assert snap["total_orders"] == 0
    assert snap["total_revenue"] == 0
    assert snap["pending_orders"] == 0


def test_profiles_and_logins():
    c = counters()
    c.apply({"table": "profiles", "eventType": "INSERT", "new": {"id": "u1"}})
    c.apply({"table": "profiles", "eventType": "UPDATE",
             "new": {"last_login": TODAY}, "old": {"last_login": YESTERDAY}})
    # second login the same day
    c.apply({"table": "profiles", "eventType": "UPDATE",
             "new": {"last_login": TODAY}, "old": {"last_login": TODAY}})
    snap = c.snapshot()
    assert snap["total_users"] == 1
    assert snap["logins_today"] == 1


def test_soft_delete_and_restore_products():
    c = counters(total_products=2)
    c.apply({"table": "products", "eventType": "UPDATE",
             "new": {"deleted_at": TODAY}, "old": {"deleted_at": None}})
    assert c.snapshot()["total_products"] == 1
    c.apply({"table": "products", "eventType": "UPDATE",
             "new": {"deleted_at": None}, "old": {"deleted_at": TODAY}})
    assert c.snapshot()["total_products"] == 2


def test_unknown_table_ignored():
    c = counters(total_orders=3)
    c.apply({"table": "coupons", "eventType": "INSERT", "new": {}})
    assert c.snapshot()["total_orders"] == 3


def test_publish_without_live_counters_is_noop():
    publish_change("orders", "INSERT", new={"total_amount": 1})
    assert realtime._live is None


def test_publish_updates_seeded_counters():
    live = current_counters(seed=lambda: {"total_orders": 4, "total_revenue": 100.0})
    publish_change("orders", "INSERT", new={"total_amount": 50, "status": "pending"})
    assert current_counters() is live
    snap = live.snapshot()
    assert snap["total_orders"] == 5
    assert snap["total_revenue"] == 150.0

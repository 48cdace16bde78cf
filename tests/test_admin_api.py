from datetime import datetime, timezone

from techphone.core import admin_emails
from techphone.models.orm import Order
from techphone.services import dashboard_service
from techphone.services.realtime import reset_counters
from techphone.utils.helpers import utcnow

from conftest import PASSWORD, add_product


def _order(client, user, product, amount):
    resp = client.post("/api/orders", headers=user["headers"], json={
        "total_amount": amount,
        "order_items": [{"product_id": product.id, "quantity": 1, "price": amount}],
    })
    assert resp.status_code == 201
    return resp.json()["data"]


def test_stats_need_dashboard_permission(client, customer):
    assert client.get("/api/admin/stats", headers=customer["headers"]).status_code == 403
    assert client.get("/api/admin/stats").status_code == 401


def test_stats(client, db, admin, customer):
    phone = add_product(db, rating=4)
    add_product(db, rating=5)
    add_product(db, deleted_at=utcnow())

    first = _order(client, customer, phone, 1000)
    _order(client, customer, phone, 500)
    client.put(f"/api/orders/{first['id']}/status", json={"status": "delivered"}, headers=admin["headers"])

    stats = client.get("/api/admin/stats", headers=admin["headers"]).json()["data"]
    assert stats["total_users"] == 2
    assert stats["total_orders"] == 2
    assert stats["pending_orders"] == 1
    assert stats["completed_orders"] == 1
    assert stats["orders_today"] == 2
    assert stats["logins_today"] == 2
    assert stats["total_revenue"] == 1500
    assert stats["total_products"] == 2
    assert stats["average_rating"] == 4.5


def test_live_stats_follow_writes(client, db, admin, customer):
    phone = add_product(db)
    reset_counters()
    before = client.get("/api/admin/stats/live", headers=admin["headers"]).json()["data"]
    assert before["total_orders"] == 0

    order = _order(client, customer, phone, 2500)
    after = client.get("/api/admin/stats/live", headers=admin["headers"]).json()["data"]
    assert after["total_orders"] == 1
    assert after["pending_orders"] == 1
    assert after["total_revenue"] == 2500

    client.put(f"/api/orders/{order['id']}/status", json={"status": "completed"}, headers=admin["headers"])
    client.delete(f"/api/products/{phone.id}", headers=admin["headers"])
    latest = client.get("/api/admin/stats/live", headers=admin["headers"]).json()["data"]
    assert latest["pending_orders"] == 0
    assert latest["completed_orders"] == 1
    assert latest["total_products"] == 0


def test_recent_orders(client, db, admin, customer):
    phone = add_product(db)
    for amount in (100, 200, 300):
        _order(client, customer, phone, amount)

    body = client.get("/api/admin/recent-orders", params={"pageSize": 2}, headers=admin["headers"]).json()
    assert body["count"] == 3
    assert [o["total_amount"] for o in body["data"]] == [300, 200]
    assert body["pagination"]["totalPages"] == 2


def test_health(client):
    body = client.get("/api/health").json()
    assert body["status"] == "OK"
    assert body["database"] == "connected"
    assert body["service"]
    assert body["timestamp"]


def test_monthly_revenue(client, db, admin, customer):
    phone = add_product(db)
    for amount, when in [
        (1000, datetime(2024, 1, 15, tzinfo=timezone.utc)),
        (500, datetime(2024, 1, 31, 23, 59, tzinfo=timezone.utc)),
        (2000, datetime(2024, 12, 1, tzinfo=timezone.utc)),
        (9999, datetime(2025, 1, 1, tzinfo=timezone.utc)),
    ]:
        order = _order(client, customer, phone, amount)
        db.query(Order).filter(Order.id == order["id"]).update({"created_at": when})
    db.commit()

    resp = client.get("/api/admin/revenue/monthly", params={"year": 2024}, headers=admin["headers"])
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["year"] == 2024
    assert len(data["months"]) == 12
    assert data["months"][0] == 1500
    assert data["months"][11] == 2000
    assert sum(data["months"][1:11]) == 0
    assert data["total"] == 3500


def test_monthly_revenue_defaults_to_current_year(db):
    now = datetime(2026, 5, 10, tzinfo=timezone.utc)
    data = dashboard_service.monthly_revenue(db, now=now)
    assert data == {"year": 2026, "months": [0.0] * 12, "total": 0.0, "current_month": 0.0}


def test_monthly_revenue_needs_analytics_permission(client, customer):
    assert client.get("/api/admin/revenue/monthly", headers=customer["headers"]).status_code == 403


def test_admin_creates_users(client, admin):
    resp = client.post("/api/admin/users", headers=admin["headers"], json={
        "email": "Staff@Example.com", "password": PASSWORD, "full_name": "Nhân viên", "role": "moderator",
    })
    assert resp.status_code == 201
    created = resp.json()["data"]
    assert created["email"] == "staff@example.com"
    assert created["role"] == "user"
    assert created["status"] == "active"

    login = client.post("/api/auth/login", json={"email": "staff@example.com", "password": PASSWORD})
    assert login.status_code == 200
    assert login.json()["profile"]["full_name"] == "Nhân viên"

    again = client.post("/api/admin/users", headers=admin["headers"],
                        json={"email": "staff@example.com", "password": PASSWORD})
    assert again.status_code == 409


def test_admin_created_inactive_user_cannot_log_in(client, admin):
    resp = client.post("/api/admin/users", headers=admin["headers"],
                       json={"email": "later@example.com", "password": PASSWORD, "status": "inactive"})
    assert resp.json()["data"]["status"] == "inactive"
    login = client.post("/api/auth/login", json={"email": "later@example.com", "password": PASSWORD})
    assert login.status_code == 403


def test_admin_can_create_allowlisted_admin(client, admin):
    admin_emails.add_admin_email("boss@techphone.com")
    resp = client.post("/api/admin/users", headers=admin["headers"],
                       json={"email": "boss@techphone.com", "password": PASSWORD, "role": "admin"})
    assert resp.json()["data"]["role"] == "admin"
    login = client.post("/api/auth/login", json={"email": "boss@techphone.com", "password": PASSWORD})
    assert login.json()["profile"]["role"] == "admin"


def test_customers_cannot_create_users(client, customer):
    resp = client.post("/api/admin/users", headers=customer["headers"],
                       json={"email": "x@example.com", "password": PASSWORD})
    assert resp.status_code == 403

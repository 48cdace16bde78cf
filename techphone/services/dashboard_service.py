import logging
from datetime import datetime
from typing import Any, Dict, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from techphone.models.orm import Order, Product, Profile
from techphone.services.orders_service import serialize_order
from techphone.utils.helpers import period_bounds, utcnow
from techphone.services.realtime import (
    COMPLETED_STATUSES, PENDING_STATUSES, DashboardCounters, current_counters, start_of_day,
)

logger = logging.getLogger(__name__)


def compute_stats(db: Session, now: Optional[datetime] = None) -> Dict[str, Any]:
    today = start_of_day(now)

    def count(q):
        return q.scalar() or 0

    order_count = db.query(func.count(Order.id))

    return {
        "total_users": count(db.query(func.count(Profile.id))),
        "total_orders": count(order_count),
        "pending_orders": count(order_count.filter(Order.status.in_(PENDING_STATUSES))),
        "completed_orders": count(order_count.filter(Order.status.in_(COMPLETED_STATUSES))),
        "orders_today": count(order_count.filter(Order.created_at >= today)),
        "logins_today": count(db.query(func.count(Profile.id)).filter(Profile.last_login >= today)),
        "total_revenue": float(db.query(func.coalesce(func.sum(Order.total_amount), 0)).scalar() or 0),
        "total_products": count(db.query(func.count(Product.id)).filter(Product.deleted_at.is_(None))),
        "average_rating": round(float(
            db.query(func.avg(Product.rating)).filter(Product.deleted_at.is_(None)).scalar() or 0
        ), 2),
    }


def live_stats(db: Session) -> Dict[str, Any]:
    counters: DashboardCounters = current_counters(seed=lambda: compute_stats(db))
    return counters.snapshot()


def recent_orders(db: Session, page: int = 1, page_size: int = 5) -> dict:
    page, page_size = max(1, page), max(1, page_size)
    q = db.query(Order)
    total = q.count()
    rows = q.order_by(Order.created_at.desc()).offset((page - 1) * page_size).limit(page_size).all()
    return {
        "data": [serialize_order(o) for o in rows],
        "count": total,
        "pagination": {"page": page, "pageSize": page_size, "totalPages": max(1, -(-total // page_size))},
    }


def monthly_revenue(db: Session, year: Optional[int] = None, now: Optional[datetime] = None) -> Dict[str, Any]:
    """Order totals per calendar month of ``year`` (every order counts, as in ``total_revenue``)."""
    now = now or utcnow()
    year = year or now.year
    start, end = period_bounds(year)
    rows = (
        db.query(Order.created_at, Order.total_amount)
        .filter(Order.created_at >= start, Order.created_at < end)
        .all()
    )

    months = [0.0] * 12
    for created_at, amount in rows:
        months[created_at.month - 1] += float(amount or 0)

    current_month = months[now.month - 1] if year == now.year else 0.0
    logger.info(f"Monthly revenue for {year}: {len(rows)} orders")
    return {"year": year, "months": months, "total": sum(months), "current_month": current_month}
